from datetime import date, datetime
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    Context,
    Decimal,
    Inexact,
    InvalidOperation,
    Overflow,
    Underflow,
    localcontext,
)
from enum import Enum

from pydantic import BaseModel, Field, computed_field

# Money arithmetic never rounds: anything inexact raises instead.
EXACT = Context(
    prec=MAX_PREC,
    Emax=MAX_EMAX,
    Emin=MIN_EMIN,
    traps=[InvalidOperation, Inexact, Overflow, Underflow],
)

UNKNOWN_PERSON = "Unknown"


class TransactionType(str, Enum):
    CASH_IN = "cash_in"
    CASH_OUT = "cash_out"


class Intent(str, Enum):
    LENT = "lent"
    REPAID = "repaid"
    RECEIVED = "received"
    BORROWED = "borrowed"

    @property
    def transaction_type(self) -> TransactionType:
        if self in (Intent.LENT, Intent.REPAID):
            return TransactionType.CASH_OUT
        return TransactionType.CASH_IN

    @property
    def creates_debt(self) -> bool:
        return self in (Intent.LENT, Intent.BORROWED)


class LendingStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    SETTLED = "settled"


class ParsedLending(BaseModel):
    amount: Decimal = Field(gt=0)
    person_name: str
    intent: Intent
    due_date: date | None = None
    raw_due_text: str | None = None


class Ledger(BaseModel):
    id: int | None = None
    owner_id: str
    name: str
    categories: list[str] = []
    payment_modes: list[str] = []
    created_at: datetime = Field(default_factory=datetime.now)


class TransactionDraft(BaseModel):
    ledger_id: int
    type: TransactionType
    amount: Decimal = Field(gt=0)
    title: str
    category: str
    payment_mode: str | None = None
    person: str | None = None


class Transaction(TransactionDraft):
    id: int
    created_at: datetime


class LendingRecordDraft(BaseModel):
    transaction_id: int | None = None
    borrower_name: str
    due_date: date | None = None
    status: LendingStatus = LendingStatus.PENDING
    original_amount: Decimal = Field(gt=0)
    remaining_amount: Decimal = Field(ge=0)
    notes: str | None = None


class LendingRecord(LendingRecordDraft):
    id: int
    transaction_id: int
    created_at: datetime


class MappedLending(BaseModel):
    transaction: TransactionDraft
    lending: LendingRecordDraft | None = None


class PersonBalance(BaseModel):
    # None groups the transactions that name no counterparty
    name: str | None
    balance: Decimal
    total_lent: Decimal
    total_received: Decimal
    transactions: list[Transaction] = []
    last_transaction_date: datetime | None = None

    @property
    def label(self) -> str:
        return self.name or UNKNOWN_PERSON


class LedgerOverview(BaseModel):
    they_owe_you: list[PersonBalance] = []
    you_owe_them: list[PersonBalance] = []
    settled: list[PersonBalance] = []
    total_owed_to_you: Decimal = Decimal(0)
    total_you_owe: Decimal = Decimal(0)

    @computed_field
    @property
    def net(self) -> Decimal:
        with localcontext(EXACT):
            return self.total_owed_to_you - self.total_you_owe


class ParseRequest(BaseModel):
    message: str


class ChatMessageRequest(BaseModel):
    message: str
    username: str | None = None


class ChatReply(BaseModel):
    reply: str
