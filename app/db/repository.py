import threading
from datetime import datetime
from typing import Callable

from loguru import logger
from tinydb import Query, TinyDB

from app.db.interface import LedgerStore, StoreError
from app.models.schemas import (
    Ledger,
    LendingRecord,
    LendingRecordDraft,
    Transaction,
    TransactionDraft,
)


class LedgerRepository(LedgerStore):
    """TinyDB-backed store.

    TinyDB is not thread-safe, and the HTTP routes run in a threadpool while
    the bot runs on the event loop, so every read and write holds ``lock``.
    """

    def __init__(
        self,
        db_path: str = "lendings.json",
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.db = TinyDB(db_path)
        self.ledgers = self.db.table("ledgers")
        self.transactions = self.db.table("transactions")
        self.lendings = self.db.table("lendings")
        self.clock = clock
        self.lock = threading.RLock()

    def get_or_create_ledger(
        self,
        owner_id: str,
        name: str,
        categories: list[str],
        payment_modes: list[str],
    ) -> Ledger:
        L = Query()
        # Lookup and insert must be atomic or two first messages create two ledgers
        with self.lock:
            doc = self.ledgers.get((L.owner_id == owner_id) & (L.name == name))
            if doc is not None:
                return Ledger(id=doc.doc_id, **doc)

            ledger = Ledger(
                owner_id=owner_id,
                name=name,
                categories=categories,
                payment_modes=payment_modes,
                created_at=self.clock(),
            )
            data = ledger.model_dump(mode="json")
            data.pop("id", None)
            try:
                ledger.id = self.ledgers.insert(data)
            except (OSError, ValueError) as e:
                raise StoreError(f"Could not create ledger {name!r}: {e}") from e
        logger.info("Created ledger #{} '{}' for owner {}", ledger.id, name, owner_id)
        return ledger

    def list_ledgers(self, owner_id: str) -> list[Ledger]:
        L = Query()
        with self.lock:
            docs = self.ledgers.search(L.owner_id == owner_id)
        return [Ledger(id=doc.doc_id, **doc) for doc in docs]

    def create_transaction(self, draft: TransactionDraft) -> Transaction:
        data = draft.model_dump(mode="json")
        with self.lock:
            if self.ledgers.get(doc_id=draft.ledger_id) is None:
                raise StoreError(f"Ledger #{draft.ledger_id} does not exist")
            data["created_at"] = self.clock().isoformat()
            try:
                doc_id = self.transactions.insert(data)
            except (OSError, ValueError) as e:
                raise StoreError(f"Could not create transaction: {e}") from e
        return Transaction(id=doc_id, **data)

    def get_transaction(self, id: int) -> Transaction | None:
        with self.lock:
            doc = self.transactions.get(doc_id=id)
        if doc is None:
            return None
        return Transaction(id=doc.doc_id, **doc)

    def list_transactions(self, ledger_id: int) -> list[Transaction]:
        T = Query()
        with self.lock:
            docs = self.transactions.search(T.ledger_id == ledger_id)
        txns = [Transaction(id=doc.doc_id, **doc) for doc in docs]
        # Newest first; later inserts win ties on created_at
        return sorted(txns, key=lambda t: (t.created_at, t.id), reverse=True)

    def delete_transaction(self, id: int) -> bool:
        Lr = Query()
        with self.lock:
            if self.transactions.get(doc_id=id) is None:
                return False
            self.lendings.remove(Lr.transaction_id == id)
            self.transactions.remove(doc_ids=[id])
        return True

    def create_lending_record(self, draft: LendingRecordDraft) -> LendingRecord:
        if draft.transaction_id is None:
            raise StoreError("Lending record has no owning transaction")

        data = draft.model_dump(mode="json")
        with self.lock:
            if self.transactions.get(doc_id=draft.transaction_id) is None:
                raise StoreError(f"Transaction #{draft.transaction_id} does not exist")
            data["created_at"] = self.clock().isoformat()
            try:
                doc_id = self.lendings.insert(data)
            except (OSError, ValueError) as e:
                raise StoreError(f"Could not create lending record: {e}") from e
        return LendingRecord(id=doc_id, **data)

    def list_lending_records(self, ledger_id: int) -> list[LendingRecord]:
        Lr = Query()
        with self.lock:
            transaction_ids = [t.id for t in self.list_transactions(ledger_id)]
            docs = self.lendings.search(Lr.transaction_id.one_of(transaction_ids))
        return [LendingRecord(id=doc.doc_id, **doc) for doc in docs]
