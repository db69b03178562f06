from datetime import datetime

from fastapi import APIRouter, HTTPException
from loguru import logger

from app.deps import repo, service
from app.models.schemas import (
    ChatMessageRequest,
    ChatReply,
    LedgerOverview,
    LendingRecord,
    ParsedLending,
    ParseRequest,
    PersonBalance,
    Transaction,
)
from app.parsing.interpreter import parse_lending_message

router = APIRouter()


@router.post("/parse", response_model=ParsedLending | None)
def parse_message(request: ParseRequest):
    logger.info("Parsing message: {}", request.message)
    return parse_lending_message(request.message, datetime.now())


@router.post("/chats/{chat_id}/messages", response_model=ChatReply)
def post_message(chat_id: str, request: ChatMessageRequest):
    reply = service.handle_text(
        chat_id, request.message, now=datetime.now(), username=request.username
    )
    return ChatReply(reply=reply)


@router.get("/chats/{chat_id}/balances", response_model=list[PersonBalance])
def list_balances(chat_id: str):
    return service.balances(chat_id)


@router.get("/chats/{chat_id}/overview", response_model=LedgerOverview)
def get_overview(chat_id: str):
    return service.overview(chat_id)


@router.get("/chats/{chat_id}/transactions", response_model=list[Transaction])
def list_transactions(chat_id: str):
    return service.transactions(chat_id)


@router.get("/chats/{chat_id}/lendings", response_model=list[LendingRecord])
def list_lendings(chat_id: str):
    return service.lending_records(chat_id)


@router.delete("/transactions/{transaction_id}")
def delete_transaction(transaction_id: int):
    if not repo.delete_transaction(transaction_id):
        raise HTTPException(status_code=404, detail="Transaction not found")
    logger.info("Deleted transaction #{}", transaction_id)
    return {"detail": "Transaction deleted"}
