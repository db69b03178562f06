import re
from decimal import Decimal, DecimalException, localcontext

from app.models.schemas import EXACT

_SYMBOLS_RE = re.compile(r"[₹$,]")
_RUPEE_PREFIX_RE = re.compile(r"^(?:rs|inr)\.?", re.IGNORECASE)

_NUMBER = r"([+-]?(?:\d+(?:\.\d*)?|\.\d+))"
_THOUSANDS_RE = re.compile(rf"^{_NUMBER}k$", re.IGNORECASE)
_LAKHS_RE = re.compile(rf"^{_NUMBER}(?:l|lacs?|lakhs?)$", re.IGNORECASE)
_PLAIN_RE = re.compile(rf"^{_NUMBER}$")

# Tried in order; the first pattern that matches decides the multiplier.
_FORMS: list[tuple[re.Pattern, int]] = [
    (_THOUSANDS_RE, 1_000),
    (_LAKHS_RE, 100_000),
    (_PLAIN_RE, 1),
]


def parse_amount(token: str) -> Decimal | None:
    """Parse a single token such as ``10k``, ``1.5L`` or ``₹1,200`` into a
    positive amount.

    Returns ``None`` when the token is not a finite number greater than zero.
    """
    cleaned = _SYMBOLS_RE.sub("", token.strip())
    cleaned = _RUPEE_PREFIX_RE.sub("", cleaned)

    for pattern, multiplier in _FORMS:
        match = pattern.match(cleaned)
        if not match:
            continue
        try:
            with localcontext(EXACT):
                value = Decimal(match.group(1)) * multiplier
        except DecimalException:
            return None
        if not value.is_finite() or value <= 0:
            return None
        return value

    return None
