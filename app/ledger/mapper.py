from typing import NamedTuple

from app.models.schemas import (
    Intent,
    LendingRecordDraft,
    LendingStatus,
    MappedLending,
    ParsedLending,
    TransactionDraft,
)

DEFAULT_PAYMENT_MODE = "Cash"


class IntentRule(NamedTuple):
    title_prefix: str
    category: str


INTENT_RULES: dict[Intent, IntentRule] = {
    Intent.LENT: IntentRule("Lent to", "Lending"),
    Intent.REPAID: IntentRule("Repaid to", "Repayment"),
    Intent.RECEIVED: IntentRule("Received from", "Repayment"),
    Intent.BORROWED: IntentRule("Borrowed from", "Borrowing"),
}


def to_transaction(
    parsed: ParsedLending,
    ledger_id: int,
    payment_mode: str = DEFAULT_PAYMENT_MODE,
) -> MappedLending:
    """Build the transaction draft (and lending draft for new debts) for a
    parsed message. Nothing is persisted here."""
    rule = INTENT_RULES[parsed.intent]

    transaction = TransactionDraft(
        ledger_id=ledger_id,
        type=parsed.intent.transaction_type,
        amount=parsed.amount,
        title=f"{rule.title_prefix} {parsed.person_name}",
        category=rule.category,
        payment_mode=payment_mode,
        person=parsed.person_name,
    )

    lending = None
    if parsed.intent.creates_debt:
        lending = LendingRecordDraft(
            borrower_name=parsed.person_name,
            due_date=parsed.due_date,
            status=LendingStatus.PENDING,
            original_amount=parsed.amount,
            remaining_amount=parsed.amount,
            # Only unresolved due text becomes a note
            notes=parsed.raw_due_text if parsed.due_date is None else None,
        )

    return MappedLending(transaction=transaction, lending=lending)
