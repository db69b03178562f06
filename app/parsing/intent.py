from app.models.schemas import Intent

KEYWORDS: dict[str, Intent] = {
    "gave": Intent.LENT,
    "give": Intent.LENT,
    "lent": Intent.LENT,
    "lend": Intent.LENT,
    "got": Intent.RECEIVED,
    "get": Intent.RECEIVED,
    "received": Intent.RECEIVED,
    "borrowed": Intent.BORROWED,
    "borrow": Intent.BORROWED,
    "repaid": Intent.REPAID,
    "repay": Intent.REPAID,
    "paid": Intent.REPAID,
}

# Messages without a keyword ("500 john tomorrow") are lendings.
LEGACY_INTENT = Intent.LENT


def classify_keyword(token: str) -> Intent | None:
    """Map the leading word of a message to its intent, if it is a keyword."""
    return KEYWORDS.get(token.strip().lower())
