from datetime import date, datetime
from decimal import Decimal

from loguru import logger

from app.config import Settings
from app.db.interface import LedgerStore, StoreError
from app.ledger.balances import find_balance, overview, summarize
from app.ledger.mapper import to_transaction
from app.models.schemas import (
    Intent,
    Ledger,
    LedgerOverview,
    LendingRecord,
    ParsedLending,
    PersonBalance,
    Transaction,
)
from app.parsing.interpreter import describe, parse_lending_message

HELP_MESSAGE = (
    "📒 Lendings bot\n\n"
    "Record money you lend or borrow with a short message:\n"
    "• gave john 500 tomorrow — you lent John ₹500, due tomorrow\n"
    "• got mary 1000 — Mary paid you back ₹1,000\n"
    "• borrowed rahul 2k next week — you borrowed ₹2,000 from Rahul\n"
    "• repaid rahul 500 — you paid Rahul back ₹500\n"
    "• 500 john 15jan — shorthand for lending\n\n"
    "Amounts: 500, ₹1,200, 1.5k, 1L\n"
    "Due dates: today, tomorrow, next week, next month, in 3 days, 15jan, jan 15\n\n"
    "Commands:\n"
    "/balances — Who owes whom\n"
    "/balance <name> — One person's balance\n"
    "/settled — People you're square with\n"
    "/undo — Remove your last entry\n"
    "/help — Show this message"
)

FORMAT_HINT = (
    "❓ Could not understand the message.\n\n"
    "Format: <keyword> <name> <amount> [due date]\n"
    "Example: gave john 500 tomorrow\n\n"
    "Send /help for more info."
)

_INTENT_VERBS: dict[Intent, tuple[str, str]] = {
    Intent.LENT: ("Lent", "to"),
    Intent.REPAID: ("Repaid", "to"),
    Intent.RECEIVED: ("Received", "from"),
    Intent.BORROWED: ("Borrowed", "from"),
}


def format_inr(amount: Decimal) -> str:
    """Format amount in INR style."""
    if amount == amount.to_integral_value():
        return f"₹{int(amount):,}"
    return f"₹{amount:,.2f}"


def format_due(due: date, today: date) -> str:
    label = f"{due.day} {due:%b}"
    if due.year != today.year:
        label += f" {due.year}"
    return label


def format_balance_line(balance: PersonBalance) -> str:
    if balance.balance > 0:
        return f"{balance.label} owes you {format_inr(balance.balance)}"
    if balance.balance < 0:
        return f"You owe {balance.label} {format_inr(balance.balance.copy_abs())}"
    return f"{balance.label} — all settled"


def _balances_summary(summary: LedgerOverview) -> str:
    if not summary.they_owe_you and not summary.you_owe_them:
        return "No open balances! You're all clear."

    lines = ["Open balances:\n"]
    if summary.they_owe_you:
        lines.append("They owe you:")
        for b in summary.they_owe_you:
            lines.append(f"• {b.label} — {format_inr(b.balance)}")
        lines.append(f"Subtotal: {format_inr(summary.total_owed_to_you)}\n")
    if summary.you_owe_them:
        lines.append("You owe:")
        for b in summary.you_owe_them:
            lines.append(f"• {b.label} — {format_inr(b.balance.copy_abs())}")
        lines.append(f"Subtotal: {format_inr(summary.total_you_owe)}\n")

    net = summary.net
    if net > 0:
        lines.append(f"Net: you're up {format_inr(net)}")
    elif net < 0:
        lines.append(f"Net: you owe {format_inr(net.copy_abs())} more")
    else:
        lines.append("Net: balanced")
    return "\n".join(lines)


class LendingService:
    """Glue between chat text, the message interpreter and the ledger store.

    Every chat owns exactly one lendings ledger; the chat id is the owner id.
    """

    def __init__(self, store: LedgerStore, settings: Settings):
        self.store = store
        self.settings = settings

    def ledger_for(self, owner_id: str) -> Ledger:
        return self.store.get_or_create_ledger(
            owner_id,
            self.settings.lendings_ledger_name,
            self.settings.lendings_categories,
            self.settings.lendings_payment_modes,
        )

    def transactions(self, owner_id: str) -> list[Transaction]:
        return self.store.list_transactions(self.ledger_for(owner_id).id)

    def lending_records(self, owner_id: str) -> list[LendingRecord]:
        return self.store.list_lending_records(self.ledger_for(owner_id).id)

    def balances(self, owner_id: str) -> list[PersonBalance]:
        return summarize(self.transactions(owner_id))

    def overview(self, owner_id: str) -> LedgerOverview:
        return overview(self.balances(owner_id))

    def record(self, parsed: ParsedLending, owner_id: str, now: datetime) -> str:
        """Persist a parsed message and compose the reply."""
        try:
            ledger = self.ledger_for(owner_id)
            mapped = to_transaction(
                parsed, ledger.id, payment_mode=self.settings.default_payment_mode
            )
            transaction = self.store.create_transaction(mapped.transaction)
        except StoreError as e:
            logger.error("Failed to record '{}' for {}: {}", describe(parsed), owner_id, e)
            return "❌ Failed to record the entry. Please try again."

        logger.info(
            "Recorded transaction #{} ({}) in ledger #{}",
            transaction.id, describe(parsed), ledger.id,
        )

        if mapped.lending is not None:
            draft = mapped.lending.model_copy(update={"transaction_id": transaction.id})
            try:
                self.store.create_lending_record(draft)
            except StoreError as e:
                logger.warning(
                    "Lending record for transaction #{} not saved: {}", transaction.id, e
                )

        verb, preposition = _INTENT_VERBS[parsed.intent]
        lines = [
            f"✅ Recorded: {verb} {format_inr(parsed.amount)} "
            f"{preposition} {parsed.person_name}"
        ]
        if parsed.intent.creates_debt:
            if parsed.due_date is not None:
                lines.append(f"📅 Due: {format_due(parsed.due_date, now.date())}")
            elif parsed.raw_due_text:
                lines.append(f"📝 Note: {parsed.raw_due_text}")

        try:
            person = find_balance(self.balances(owner_id), parsed.person_name)
        except StoreError as e:
            logger.warning("Could not refresh balance for {}: {}", parsed.person_name, e)
            person = None
        if person is not None:
            lines.append(format_balance_line(person))

        return "\n".join(lines)

    def balances_reply(self, owner_id: str, name: str | None = None) -> str:
        balances = self.balances(owner_id)
        if name:
            person = find_balance(balances, name)
            if person is None:
                return f"No entries for {name}."
            return (
                f"{format_balance_line(person)}\n"
                f"Given: {format_inr(person.total_lent)} · "
                f"Received: {format_inr(person.total_received)} · "
                f"{len(person.transactions)} entries"
            )
        return _balances_summary(overview(balances))

    def settled_reply(self, owner_id: str) -> str:
        settled = self.overview(owner_id).settled
        if not settled:
            return "Nobody is settled yet."
        lines = ["Settled:\n"]
        for i, b in enumerate(settled, 1):
            lines.append(f"{i}. {b.label} — {len(b.transactions)} entries")
        return "\n".join(lines)

    def undo_reply(self, owner_id: str) -> str:
        txns = self.transactions(owner_id)
        if not txns:
            return "Nothing to undo."
        last = txns[0]
        self.store.delete_transaction(last.id)
        logger.info("Undid transaction #{} for {}", last.id, owner_id)
        return f"↩️ Removed: {last.title} — {format_inr(last.amount)}"

    def handle_text(
        self,
        chat_id: str,
        text: str,
        now: datetime,
        username: str | None = None,
    ) -> str:
        """Answer one inbound chat message. Never raises."""
        text = text.strip()
        logger.info("Message from {} ({}): {}", chat_id, username or "-", text)
        try:
            return self._dispatch(chat_id, text, now)
        except Exception:
            logger.exception("Error handling message from {}", chat_id)
            return "Something went wrong. Please try again."

    def _dispatch(self, chat_id: str, text: str, now: datetime) -> str:
        if text.startswith("/"):
            command, _, argument = text.partition(" ")
            command = command.split("@", 1)[0].lower()
            if command in ("/start", "/help"):
                return HELP_MESSAGE
            if command == "/balances":
                return self.balances_reply(chat_id)
            if command == "/balance":
                return self.balances_reply(chat_id, argument.strip() or None)
            if command == "/settled":
                return self.settled_reply(chat_id)
            if command == "/undo":
                return self.undo_reply(chat_id)
            return FORMAT_HINT

        parsed = parse_lending_message(text, now)
        if parsed is None:
            logger.debug("Not a lending message: {!r}", text)
            return FORMAT_HINT
        return self.record(parsed, chat_id, now)
