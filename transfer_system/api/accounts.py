"""
Account endpoints
"""

from fastapi import APIRouter, Depends, status

from .dependencies import TransferSystem, get_transfer_system
from .schemas import AccountResponse, CreateAccountRequest


router = APIRouter()


@router.post("", status_code=status.HTTP_201_CREATED, response_model=AccountResponse)
def create_account(
    request: CreateAccountRequest,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Create an account with an opening balance"""
    account = system.account_manager.create_account(
        account_id=request.account_id,
        initial_balance=request.initial_balance
    )
    return AccountResponse.from_account(account)


@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Get an account's current balance"""
    account = system.account_manager.get_account(account_id)
    return AccountResponse.from_account(account)
