"""Turn a short chat message into a structured lending entry.

Accepted shapes::

    gave john 500 tomorrow      keyword person amount [due...]
    received 500 john           keyword amount person [due...]
    500 john 15jan              amount person [due...]   (lent)

Anything that does not fit is "not a lending message" and yields ``None``.
"""

from datetime import datetime
from decimal import Decimal

from loguru import logger

from app.models.schemas import Intent, ParsedLending
from app.parsing.amount import parse_amount
from app.parsing.due_date import resolve_due_date
from app.parsing.intent import LEGACY_INTENT, classify_keyword


def _is_name(token: str) -> bool:
    return any(ch.isalpha() for ch in token)


def _capitalize_first(name: str) -> str:
    return name[:1].upper() + name[1:]


def _person_and_amount(first: str, second: str) -> tuple[str, Decimal] | None:
    """Accept either ``person amount`` or ``amount person`` ordering."""
    amount = parse_amount(second)
    if amount is not None and _is_name(first):
        return first, amount
    amount = parse_amount(first)
    if amount is not None and _is_name(second):
        return second, amount
    return None


def parse_lending_message(text: str, now: datetime) -> ParsedLending | None:
    """Parse ``text`` into a :class:`ParsedLending`, or ``None`` if it isn't one.

    ``now`` is the reference instant used to resolve relative due dates.
    """
    tokens = text.split()
    if not tokens:
        return None

    intent = classify_keyword(tokens[0])
    if intent is not None:
        if len(tokens) < 3:
            return None
        found = _person_and_amount(tokens[1], tokens[2])
        if found is None:
            return None
        person, amount = found
        rest = tokens[3:]
    else:
        if len(tokens) < 2:
            return None
        amount = parse_amount(tokens[0])
        if amount is None or not _is_name(tokens[1]):
            return None
        intent = LEGACY_INTENT
        person = tokens[1]
        rest = tokens[2:]

    raw_due_text = " ".join(rest) or None
    due_date = None
    if raw_due_text:
        due_date = resolve_due_date(raw_due_text, now.date())
        if due_date is None:
            logger.debug("Unresolved due text kept as note: {!r}", raw_due_text)

    return ParsedLending(
        amount=amount,
        person_name=_capitalize_first(person),
        intent=intent,
        due_date=due_date,
        raw_due_text=raw_due_text,
    )


def describe(parsed: ParsedLending) -> str:
    """Short human label, e.g. ``lent 500 to John``."""
    preposition = "to" if parsed.intent in (Intent.LENT, Intent.REPAID) else "from"
    return f"{parsed.intent.value} {parsed.amount} {preposition} {parsed.person_name}"
