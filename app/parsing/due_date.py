"""Resolve the trailing fragment of a lending message into a due date.

The grammar is deliberately small: a handful of relative phrases plus
day/month forms such as ``15jan``, ``15 january`` and ``jan 15``. Anything
else resolves to ``None`` and the caller keeps the raw text as a note.
"""

import calendar
import re
from datetime import date, timedelta

MONTHS: dict[str, int] = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

_IN_DAYS_RE = re.compile(r"^in\s+(\d+)\s+days?$")
_DAY_MONTH_RE = re.compile(r"^(\d{1,2})\s*([a-z]+)$")
_MONTH_DAY_RE = re.compile(r"^([a-z]+)\s+(\d{1,2})$")


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping to the end of short months."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _upcoming(today: date, month_name: str, day: int) -> date | None:
    month = MONTHS.get(month_name)
    if month is None:
        return None
    try:
        candidate = date(today.year, month, day)
    except ValueError:
        return None
    if candidate < today:
        try:
            candidate = candidate.replace(year=today.year + 1)
        except ValueError:
            # 29 Feb with no leap day next year
            return None
    return candidate


def resolve_due_date(text: str, today: date) -> date | None:
    """Return the absolute date ``text`` refers to, relative to ``today``."""
    phrase = " ".join(text.lower().split())
    if not phrase:
        return None

    if phrase == "today":
        return today
    if phrase == "tomorrow":
        return today + timedelta(days=1)
    if phrase == "next week":
        return today + timedelta(days=7)
    if phrase == "next month":
        return add_months(today, 1)

    match = _IN_DAYS_RE.match(phrase)
    if match:
        try:
            return today + timedelta(days=int(match.group(1)))
        except OverflowError:
            return None

    match = _DAY_MONTH_RE.match(phrase)
    if match:
        return _upcoming(today, match.group(2), int(match.group(1)))

    match = _MONTH_DAY_RE.match(phrase)
    if match:
        return _upcoming(today, match.group(1), int(match.group(2)))

    return None
