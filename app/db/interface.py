"""Storage contract the lending service depends on.

The service only talks to this interface, so the TinyDB store can be swapped
for another backend (or a fake in tests) without touching business logic.
"""

from abc import ABC, abstractmethod

from app.models.schemas import (
    Ledger,
    LendingRecord,
    LendingRecordDraft,
    Transaction,
    TransactionDraft,
)


class StoreError(Exception):
    """Raised when the underlying store cannot complete a write or read."""


class LedgerStore(ABC):
    @abstractmethod
    def get_or_create_ledger(
        self,
        owner_id: str,
        name: str,
        categories: list[str],
        payment_modes: list[str],
    ) -> Ledger:
        """Return the owner's ledger called ``name``, creating it if needed."""

    @abstractmethod
    def list_ledgers(self, owner_id: str) -> list[Ledger]: ...

    @abstractmethod
    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        """Persist ``draft``; the store assigns ``id`` and ``created_at``.

        Raises:
            StoreError: If the transaction could not be written
        """

    @abstractmethod
    def get_transaction(self, id: int) -> Transaction | None: ...

    @abstractmethod
    def list_transactions(self, ledger_id: int) -> list[Transaction]:
        """All transactions of a ledger, newest first."""

    @abstractmethod
    def delete_transaction(self, id: int) -> bool:
        """Delete a transaction and any lending record it owns."""

    @abstractmethod
    def create_lending_record(self, draft: LendingRecordDraft) -> LendingRecord:
        """Persist a lending record for an existing transaction.

        Raises:
            StoreError: If the record could not be written
        """

    @abstractmethod
    def list_lending_records(self, ledger_id: int) -> list[LendingRecord]: ...
