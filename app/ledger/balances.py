"""Derive per-person balances from a ledger's transaction history.

Balances are never stored. They are recomputed from the full transaction set
on every read, so the output depends only on the snapshot passed in.
"""

from decimal import Decimal, localcontext
from typing import Iterable

from app.models.schemas import (
    EXACT,
    LedgerOverview,
    PersonBalance,
    Transaction,
    TransactionType,
)


def _person_key(transaction: Transaction) -> str | None:
    return transaction.person or None


def _total(amounts: Iterable[Decimal]) -> Decimal:
    with localcontext(EXACT):
        return sum(amounts, Decimal(0))


def summarize(transactions: Iterable[Transaction]) -> list[PersonBalance]:
    """Group transactions by person and compute each person's balance.

    Transactions without a person form their own group with ``name=None``.
    Positive balance means the person owes the ledger owner. The result is
    ordered by absolute balance, largest first; ties keep first-seen order.
    """
    groups: dict[str | None, list[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(_person_key(txn), []).append(txn)

    balances = []
    for name, txns in groups.items():
        total_lent = _total(t.amount for t in txns if t.type == TransactionType.CASH_OUT)
        total_received = _total(t.amount for t in txns if t.type == TransactionType.CASH_IN)
        with localcontext(EXACT):
            balance = total_lent - total_received
        newest_first = sorted(txns, key=lambda t: t.created_at, reverse=True)
        balances.append(
            PersonBalance(
                name=name,
                balance=balance,
                total_lent=total_lent,
                total_received=total_received,
                transactions=newest_first,
                last_transaction_date=newest_first[0].created_at,
            )
        )

    balances.sort(key=lambda b: b.balance.copy_abs(), reverse=True)
    return balances


def overview(balances: list[PersonBalance]) -> LedgerOverview:
    """Split balances into who owes you, whom you owe, and settled people."""
    they_owe_you = [b for b in balances if b.balance > 0]
    you_owe_them = [b for b in balances if b.balance < 0]
    settled = [b for b in balances if b.balance == 0 and b.transactions]

    return LedgerOverview(
        they_owe_you=they_owe_you,
        you_owe_them=you_owe_them,
        settled=settled,
        total_owed_to_you=_total(b.balance for b in they_owe_you),
        total_you_owe=_total(-b.balance for b in you_owe_them),
    )


def find_balance(balances: list[PersonBalance], name: str) -> PersonBalance | None:
    """Case-insensitive lookup of a named person's balance."""
    wanted = name.strip().lower()
    for balance in balances:
        if balance.name is not None and balance.name.lower() == wanted:
            return balance
    return None
