"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from ..models import Account, TransferRecord


# Account schemas
class CreateAccountRequest(BaseModel):
    account_id: int = Field(..., description="Positive account ID chosen by the caller")
    initial_balance: Decimal = Field(..., description="Opening balance (decimal string)")


class AccountResponse(BaseModel):
    account_id: int
    balance: str = Field(..., description="Decimal balance as string")

    @classmethod
    def from_account(cls, account: Account) -> 'AccountResponse':
        return cls(account_id=account.id, balance=str(account.balance))


# Transfer schemas
class TransferMoneyRequest(BaseModel):
    source_account_id: int
    destination_account_id: int
    amount: Decimal = Field(..., description="Amount to move (decimal string)")


class TransferResponse(BaseModel):
    transaction_id: int
    source_account_id: int
    destination_account_id: int
    amount: str = Field(..., description="Decimal amount as string")
    created_at: Optional[str] = None

    @classmethod
    def from_record(cls, record: TransferRecord) -> 'TransferResponse':
        return cls(
            transaction_id=record.id,
            source_account_id=record.source_account_id,
            destination_account_id=record.destination_account_id,
            amount=str(record.amount),
            created_at=record.created_at.isoformat() if record.created_at else None
        )


# Error schemas
class ErrorObject(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    request_id: str
    error: ErrorObject
