"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session
from ledgerly.infrastructure.clients.accounts import AccountClient
from ledgerly.infrastructure.clients.transactions import TransactionClient
from ledgerly.infrastructure.database.session import get_db
from ledgerly.services.debt_service import DebtService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_user_id(x_user_id: str = Header(..., min_length=1, description="Authenticated user identifier")) -> str:
    """Caller identity, resolved upstream by the auth gateway"""
    return x_user_id


def get_account_client() -> AccountClient:
    """Provide Account API client instance"""
    return AccountClient()


def get_transaction_client() -> TransactionClient:
    """Provide Transaction API client instance"""
    return TransactionClient()


def get_debt_service(
    db: Session = Depends(get_db),
    account_client: AccountClient = Depends(get_account_client),
    transaction_client: TransactionClient = Depends(get_transaction_client),
) -> DebtService:
    """Provide debt service bound to the request's session"""
    return DebtService(db, account_client, transaction_client)
