"""
Service catalog.

Start times are tied to duration so every service finishes inside working
hours without overtime:

- 7-9 hour services: 09:00 only
- 5-6 hour services: 09:00 or 11:00
- 4 hour services: 09:00, 11:00 or 13:00
- under 4 hours: several starts through the day

Deposits are roughly 35-40% of the price and non-refundable.
"""

from .schemas import Service, ServiceExtra

SERVICES: tuple[Service, ...] = (
    # Braids (3-8 hours)
    Service(
        id="knotless-braids-small",
        name="Small Knotless Braids",
        description="Lightweight small knotless braids. Includes consultation, wash and styling.",
        price=350,
        deposit_amount=125,
        duration_minutes=480,
        allowed_start_times=("09:00",),
        category="braids",
    ),
    Service(
        id="knotless-braids-medium",
        name="Medium Knotless Braids",
        description="Classic medium knotless braids, gentle on edges.",
        price=280,
        deposit_amount=100,
        duration_minutes=360,
        allowed_start_times=("09:00", "11:00"),
        category="braids",
    ),
    Service(
        id="knotless-braids-large",
        name="Large Knotless Braids",
        description="Bold large knotless braids with a quicker install time.",
        price=200,
        deposit_amount=75,
        duration_minutes=240,
        allowed_start_times=("09:00", "11:00", "13:00"),
        category="braids",
    ),
    Service(
        id="box-braids-small",
        name="Small Box Braids",
        description="Traditional small box braids for a long-lasting protective style.",
        price=325,
        deposit_amount=125,
        duration_minutes=480,
        allowed_start_times=("09:00",),
        category="braids",
    ),
    Service(
        id="box-braids-medium",
        name="Medium Box Braids",
        description="Versatile medium box braids.",
        price=250,
        deposit_amount=100,
        duration_minutes=360,
        allowed_start_times=("09:00", "11:00"),
        category="braids",
    ),
    Service(
        id="cornrows-feed-in",
        name="Feed-in Cornrows",
        description="Neat feed-in cornrows in straight-back or custom patterns.",
        price=150,
        deposit_amount=60,
        duration_minutes=180,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00"),
        category="braids",
    ),
    Service(
        id="stitch-braids",
        name="Stitch Braids",
        description="Defined stitch braids with crisp parting.",
        price=175,
        deposit_amount=75,
        duration_minutes=240,
        allowed_start_times=("09:00", "11:00", "13:00"),
        category="braids",
    ),
    # Locs (7-9 hours)
    Service(
        id="faux-locs-small",
        name="Small Faux Locs",
        description="Small faux locs, the longest service on the menu.",
        price=375,
        deposit_amount=150,
        duration_minutes=540,
        allowed_start_times=("09:00",),
        category="locs",
    ),
    Service(
        id="faux-locs-medium",
        name="Medium Faux Locs",
        description="Medium faux locs with a natural finish.",
        price=300,
        deposit_amount=125,
        duration_minutes=420,
        allowed_start_times=("09:00",),
        category="locs",
    ),
    Service(
        id="butterfly-locs",
        name="Butterfly Locs",
        description="Distressed, textured butterfly locs.",
        price=325,
        deposit_amount=125,
        duration_minutes=420,
        allowed_start_times=("09:00",),
        category="locs",
    ),
    Service(
        id="soft-locs",
        name="Soft Locs",
        description="Lightweight soft locs with a flowing look.",
        price=310,
        deposit_amount=125,
        duration_minutes=420,
        allowed_start_times=("09:00",),
        category="locs",
    ),
    # Weaves & wigs (2.5-5 hours)
    Service(
        id="sew-in-weave",
        name="Full Sew-in Weave",
        description="Full sew-in with leave-out or closure.",
        price=225,
        deposit_amount=90,
        duration_minutes=300,
        allowed_start_times=("09:00", "11:00"),
        category="weaves",
    ),
    Service(
        id="frontal-install",
        name="Frontal Wig Install",
        description="Lace frontal wig install and styling.",
        price=185,
        deposit_amount=75,
        duration_minutes=180,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00"),
        category="weaves",
    ),
    Service(
        id="closure-install",
        name="Closure Wig Install",
        description="Closure wig install and styling.",
        price=150,
        deposit_amount=60,
        duration_minutes=150,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00"),
        category="weaves",
    ),
    # Natural hair (1.5-2.5 hours)
    Service(
        id="twist-out",
        name="Twist Out Styling",
        description="Defined twist out on natural hair.",
        price=100,
        deposit_amount=50,
        duration_minutes=120,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00", "15:00"),
        category="natural",
    ),
    Service(
        id="silk-press",
        name="Silk Press",
        description="Wash, treatment and silk press.",
        price=115,
        deposit_amount=50,
        duration_minutes=150,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00"),
        category="natural",
    ),
    Service(
        id="wash-style",
        name="Wash & Style",
        description="Wash, condition and style.",
        price=75,
        deposit_amount=35,
        duration_minutes=90,
        allowed_start_times=("09:00", "11:00", "13:00", "14:00", "15:00", "16:00"),
        category="natural",
    ),
)

# Available for every service; paid upfront with the deposit
GLOBAL_EXTRAS: tuple[ServiceExtra, ...] = (
    ServiceExtra(
        id="home-service",
        name="Home Service",
        price=75,
        description="Stylist travels to your location within the service area",
    ),
    ServiceExtra(
        id="hair-provided",
        name="Hair Provided",
        price=50,
        description="Premium quality braiding/loc hair included",
    ),
    ServiceExtra(
        id="takedown",
        name="Takedown Service",
        price=40,
        description="Removal of previous style before new installation",
    ),
    ServiceExtra(
        id="deep-condition",
        name="Deep Conditioning Treatment",
        price=30,
        description="Intensive moisture treatment",
    ),
    ServiceExtra(
        id="edge-control-kit",
        name="Edge Control Kit",
        price=20,
        description="Edge control products to take home",
    ),
)

CATEGORY_NAMES = {
    "braids": "Braids",
    "locs": "Locs & Faux Locs",
    "weaves": "Weaves & Wigs",
    "natural": "Natural Hair",
    "other": "Other Services",
}
