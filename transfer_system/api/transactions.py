"""
Transfer endpoints

Handlers are plain functions and run on the server's worker thread pool.
"""

from fastapi import APIRouter, Depends

from ..models import TransferRequest
from .dependencies import TransferSystem, get_transfer_system
from .schemas import TransferMoneyRequest, TransferResponse


router = APIRouter()


@router.post("", response_model=TransferResponse)
def transfer_money(
    request: TransferMoneyRequest,
    system: TransferSystem = Depends(get_transfer_system)
):
    """Move funds between two accounts"""
    record = system.transfer_engine.transfer(TransferRequest(
        source_account_id=request.source_account_id,
        destination_account_id=request.destination_account_id,
        amount=request.amount
    ))
    return TransferResponse.from_record(record)
