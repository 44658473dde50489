"""Date and time encodings used by CRM activity records."""

from datetime import date, datetime, timedelta


def due_date(now: datetime, offset_hours: int) -> date:
    """
    Calendar date of ``now + offset_hours`` in the timezone of ``now``.

    Args:
        now: Reference time (aware or naive local time)
        offset_hours: Hours to add before truncating to a date

    Returns:
        Due date without a time component
    """
    return (now + timedelta(hours=offset_hours)).date()


def format_call_start(moment: datetime) -> str:
    """
    Encode a call start time as ``YYYY-MM-DDTHH:mm:ss+HH:mm``.

    Naive values are interpreted as system local time.

    Args:
        moment: Call start time

    Returns:
        ISO-8601 string with seconds precision and a numeric UTC offset
    """
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.replace(microsecond=0).isoformat()
