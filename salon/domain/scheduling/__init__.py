"""
Scheduling Domain

Turns a service's allowed start times, the weekly working hours and the
existing bookings for a day into the slots a client may pick.

Structure:
```
salon/domain/scheduling/
├── __init__.py
├── settings.py             # Working hours, off days, buffer, notice
├── schemas.py              # TimeSlot and availability responses
├── time_calculator.py      # "HH:MM" parsing and calculations
├── availability_service.py # Slot evaluation and next-date search
└── router.py               # Public availability endpoints
```

RULES (first failing check wins, per candidate start time):
1. Starts before opening time
2. Service would end after closing
3. Same-day start inside the minimum notice window
4. Overlaps a pending or confirmed booking plus the cleanup buffer

Closed weekdays and off days return no slots at all.
"""
