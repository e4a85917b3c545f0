"""Render five-field cron expressions as short English text.

Only the shapes the scheduler issues are described; anything else is
returned verbatim rather than guessed at.
"""

from __future__ import annotations

_DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
_DAY_ABBREVIATIONS = {name[:3].upper(): i for i, name in enumerate(_DAY_NAMES)}


def _int(field: str, low: int, high: int) -> int | None:
    if not field.isdigit():
        return None
    value = int(field)
    return value if low <= value <= high else None


def _step(field: str) -> int | None:
    if field.startswith("*/"):
        return _int(field[2:], 1, 59)
    return None


def _day(token: str) -> int | None:
    if token.isdigit():
        value = int(token)
        return value % 7 if 0 <= value <= 7 else None
    return _DAY_ABBREVIATIONS.get(token.upper())


def _days(field: str) -> list[int] | None:
    days: list[int] = []
    for part in field.split(","):
        if "-" in part:
            start, _, end = part.partition("-")
            first, last = _day(start), _day(end)
            if first is None or last is None or first > last:
                return None
            days.extend(range(first, last + 1))
        else:
            day = _day(part)
            if day is None:
                return None
            days.append(day)
    return days


def cron_to_human(expression: str) -> str:
    """Describe ``expression``, e.g. ``"0 8 * * *"`` -> ``"Every day at 8:00"``."""
    fields = expression.split()
    if len(fields) != 5:
        return expression
    minute, hour, dom, month, dow = fields

    if month != "*":
        return expression

    if hour == "*" and dom == "*" and dow == "*":
        if minute == "*":
            return "Every minute"
        every = _step(minute)
        if every is not None:
            return f"Every {every} minutes"
        at = _int(minute, 0, 59)
        if at is not None:
            return f"Every hour at :{at:02d}"
        return expression

    m = _int(minute, 0, 59)
    if m is None:
        return expression

    every_hours = _step(hour)
    if every_hours is not None and dom == "*" and dow == "*":
        return f"Every {every_hours} hours at :{m:02d}"

    h = _int(hour, 0, 23)
    if h is None:
        return expression
    at = f"{h}:{m:02d}"

    if dom == "*" and dow == "*":
        return f"Every day at {at}"

    if dom == "*":
        days = _days(dow)
        if days is None:
            return expression
        if sorted(set(days)) == [1, 2, 3, 4, 5]:
            return f"Weekdays at {at}"
        if sorted(set(days)) == [0, 6]:
            return f"Weekends at {at}"
        return f"Every {', '.join(_DAY_NAMES[d] for d in days)} at {at}"

    if dow == "*":
        day_of_month = _int(dom, 1, 31)
        if day_of_month is not None:
            return f"Monthly on day {day_of_month} at {at}"
    return expression
