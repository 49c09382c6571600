from clinic.domain.dates import Timeslot


def time_to_12h(timeslot: Timeslot) -> str:
    """Convert ``Timeslot(hour=14, minute=30)`` → ``2:30 PM``.

    No leading zero on the hour (``9:00 AM`` not ``09:00 AM``).
    """
    hour = timeslot.hour % 12 or 12
    period = "AM" if timeslot.hour < 12 else "PM"
    return f"{hour}:{timeslot.minute:02d} {period}"


def format_currency(amount: float) -> str:
    """Render ``1250`` → ``$1,250.00``."""
    return f"${amount:,.2f}"
