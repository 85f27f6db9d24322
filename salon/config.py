import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./salon.db")

# Paystack Configuration
PAYSTACK_SECRET_KEY = os.getenv("PAYSTACK_SECRET_KEY", "")
PAYSTACK_BASE_URL = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")
# Outbound calls must finish well inside the client's own request timeout
PAYSTACK_TIMEOUT_SECONDS = float(os.getenv("PAYSTACK_TIMEOUT_SECONDS", "15"))
PAYMENT_REFERENCE_PREFIX = os.getenv("PAYMENT_REFERENCE_PREFIX", "BEL")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "CAD")

# Public site URL, used for the processor callback after checkout
SITE_URL = os.getenv("SITE_URL", "https://bellezavari.com")

# Business settings
BUSINESS_NAME = os.getenv("BUSINESS_NAME", "Bellezavari")
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "America/Toronto")
BUFFER_MINUTES = int(os.getenv("BUFFER_MINUTES", "30"))
# Comma separated ISO dates, e.g. "2026-12-25,2026-12-26"
OFF_DAYS = [d.strip() for d in os.getenv("OFF_DAYS", "").split(",") if d.strip()]
MIN_BOOKING_NOTICE_HOURS = int(os.getenv("MIN_BOOKING_NOTICE_HOURS", "2"))
BOOKING_WINDOW_DAYS = int(os.getenv("BOOKING_WINDOW_DAYS", "90"))
HOME_SERVICE_FEE = float(os.getenv("HOME_SERVICE_FEE", "75"))
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "$")
CONTACT_EMAIL = os.getenv("CONTACT_EMAIL", "hello@bellezavari.com")
CONTACT_PHONE = os.getenv("CONTACT_PHONE", "")

# Pending bookings that never reach checkout are released after this long
PENDING_BOOKING_TTL_MINUTES = int(os.getenv("PENDING_BOOKING_TTL_MINUTES", "60"))

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://bellezavari.com,https://www.bellezavari.com,http://localhost:3000",
).split(",")
