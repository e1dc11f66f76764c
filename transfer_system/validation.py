"""
Transfer Request Validation

Rejects invalid transfer requests before the ledger store is touched.
Rules are checked in a fixed order and the first failure wins.
"""

from decimal import Decimal

from .errors import ErrorKind, ValidationError
from .models import TransferRequest


# Account IDs are stored as signed 64-bit integers
MAX_ACCOUNT_ID = 2 ** 63 - 1


def is_valid_account_id(account_id: int) -> bool:
    return 0 < account_id <= MAX_ACCOUNT_ID


def validate_transfer(request: TransferRequest) -> None:
    """
    Validate a transfer request.

    Args:
        request: Transfer request to check

    Raises:
        ValidationError: SAME_ACCOUNT, NON_POSITIVE_AMOUNT or INVALID_ACCOUNT_ID
    """
    if request.source_account_id == request.destination_account_id:
        raise ValidationError(
            ErrorKind.SAME_ACCOUNT,
            "source and destination account IDs cannot be the same"
        )

    amount = request.amount
    if not isinstance(amount, Decimal) or not amount.is_finite() or amount <= Decimal('0'):
        raise ValidationError(
            ErrorKind.NON_POSITIVE_AMOUNT,
            "amount should be greater than zero"
        )

    if not (is_valid_account_id(request.source_account_id)
            and is_valid_account_id(request.destination_account_id)):
        raise ValidationError(ErrorKind.INVALID_ACCOUNT_ID, "invalid account IDs")


def validate_new_account(account_id: int, initial_balance: Decimal) -> None:
    """Check an account creation request against the ledger invariants"""
    if not is_valid_account_id(account_id):
        raise ValidationError(
            ErrorKind.INVALID_ACCOUNT_ID,
            f"account ID must be between 1 and {MAX_ACCOUNT_ID}"
        )

    if not initial_balance.is_finite() or initial_balance < Decimal('0'):
        raise ValidationError(
            ErrorKind.NEGATIVE_BALANCE,
            "initial balance must be zero or greater"
        )
