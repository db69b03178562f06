import random
from datetime import datetime, timedelta
from decimal import Decimal

from app.ledger.balances import find_balance, overview, summarize
from app.models.schemas import UNKNOWN_PERSON, Transaction, TransactionType

BASE = datetime(2024, 1, 1, 12, 0)
_ids = iter(range(1, 10_000))


def make_transaction(**kwargs) -> Transaction:
    base = dict(
        id=next(_ids),
        ledger_id=1,
        created_at=BASE,
        type=TransactionType.CASH_OUT,
        amount=Decimal("100"),
        title="",
        category="Lending",
        payment_mode="Cash",
        person="John",
    )
    base.update(kwargs)
    return Transaction(**base)


def test_lent_then_partially_received():
    txns = [
        make_transaction(person="John", type=TransactionType.CASH_OUT, amount=Decimal("500")),
        make_transaction(
            person="John",
            type=TransactionType.CASH_IN,
            amount=Decimal("200"),
            created_at=BASE + timedelta(days=1),
        ),
    ]

    [john] = summarize(txns)

    assert john.name == "John"
    assert john.balance == Decimal("300")
    assert john.total_lent == Decimal("500")
    assert john.total_received == Decimal("200")
    assert john.last_transaction_date == BASE + timedelta(days=1)


def test_transactions_are_newest_first():
    old = make_transaction(created_at=BASE)
    new = make_transaction(created_at=BASE + timedelta(hours=5))
    middle = make_transaction(created_at=BASE + timedelta(hours=1))

    [john] = summarize([old, new, middle])

    assert [t.id for t in john.transactions] == [new.id, middle.id, old.id]


def test_missing_person_grouped_separately():
    txns = [
        make_transaction(person=None, amount=Decimal("40")),
        make_transaction(person="", amount=Decimal("10")),
        make_transaction(person="John", amount=Decimal("5")),
    ]

    balances = summarize(txns)

    [unknown] = [b for b in balances if b.name is None]
    assert unknown.label == UNKNOWN_PERSON
    assert unknown.balance == Decimal("50")
    assert len(unknown.transactions) == 2
    assert find_balance(balances, UNKNOWN_PERSON) is None


def test_person_named_unknown_is_not_merged_with_missing_person():
    txns = [
        make_transaction(person=None, amount=Decimal("40")),
        make_transaction(person="Unknown", amount=Decimal("7")),
    ]

    balances = summarize(txns)

    assert [(b.name, b.balance) for b in balances] == [
        (None, Decimal("40")),
        ("Unknown", Decimal("7")),
    ]
    assert find_balance(balances, "unknown").balance == Decimal("7")


def test_large_amounts_sum_without_rounding():
    big = Decimal("12345678901234567890123456789.5")
    txns = [
        make_transaction(person="John", amount=big),
        make_transaction(person="John", amount=big),
        make_transaction(person="John", type=TransactionType.CASH_IN, amount=Decimal("0.5")),
        make_transaction(person="Mary", type=TransactionType.CASH_IN, amount=big),
    ]

    balances = summarize(txns)
    john = find_balance(balances, "John")

    assert john.total_lent == Decimal("24691357802469135780246913579.0")
    assert john.balance == Decimal("24691357802469135780246913578.5")
    result = overview(balances)
    assert result.total_you_owe == big
    assert result.net == Decimal("12345678901234567890123456789.0")


def test_sorted_by_absolute_balance():
    txns = [
        make_transaction(person="Small", amount=Decimal("10")),
        make_transaction(person="Owes", type=TransactionType.CASH_IN, amount=Decimal("900")),
        make_transaction(person="Big", amount=Decimal("500")),
    ]

    names = [b.name for b in summarize(txns)]

    assert names == ["Owes", "Big", "Small"]


def test_ties_keep_first_seen_order():
    txns = [
        make_transaction(person="Anna", amount=Decimal("100")),
        make_transaction(person="Ben", type=TransactionType.CASH_IN, amount=Decimal("100")),
        make_transaction(person="Cleo", amount=Decimal("100")),
    ]

    assert [b.name for b in summarize(txns)] == ["Anna", "Ben", "Cleo"]


def test_balance_invariants_hold_exactly():
    rng = random.Random(42)
    people = ["John", "Mary", "Rahul", None]
    txns = [
        make_transaction(
            person=rng.choice(people),
            type=rng.choice(list(TransactionType)),
            amount=Decimal(rng.randint(1, 100_000)) / 100,
            created_at=BASE + timedelta(minutes=rng.randint(0, 10_000)),
        )
        for _ in range(300)
    ]

    balances = summarize(txns)

    for b in balances:
        assert b.balance == b.total_lent - b.total_received
    total_out = sum(t.amount for t in txns if t.type == TransactionType.CASH_OUT)
    total_in = sum(t.amount for t in txns if t.type == TransactionType.CASH_IN)
    assert sum(b.balance for b in balances) == total_out - total_in
    assert sum(len(b.transactions) for b in balances) == len(txns)


def test_summarize_is_idempotent():
    txns = [
        make_transaction(person="John", amount=Decimal("0.1")),
        make_transaction(person="John", amount=Decimal("0.2")),
        make_transaction(person="Mary", type=TransactionType.CASH_IN, amount=Decimal("3")),
    ]

    first = summarize(txns)
    second = summarize(txns)

    assert first == second
    assert find_balance(first, "john").balance == Decimal("0.3")


def test_empty_ledger():
    assert summarize([]) == []
    assert overview([]).net == 0


def test_overview_partitions_balances():
    txns = [
        make_transaction(person="John", amount=Decimal("500")),
        make_transaction(person="Mary", type=TransactionType.CASH_IN, amount=Decimal("300")),
        make_transaction(person="Rahul", amount=Decimal("100")),
        make_transaction(person="Rahul", type=TransactionType.CASH_IN, amount=Decimal("100")),
    ]

    result = overview(summarize(txns))

    assert [b.name for b in result.they_owe_you] == ["John"]
    assert [b.name for b in result.you_owe_them] == ["Mary"]
    assert [b.name for b in result.settled] == ["Rahul"]
    assert result.total_owed_to_you == Decimal("500")
    assert result.total_you_owe == Decimal("300")
    assert result.net == Decimal("200")
