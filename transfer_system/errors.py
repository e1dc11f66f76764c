"""
Error Taxonomy Module

Domain errors raised by the validator, the transfer engine and the account
manager. Each error carries an ErrorKind whose value doubles as the error
code returned to API clients.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Kinds of failure a caller can observe"""
    # Validation (caller error)
    SAME_ACCOUNT = "same_account"
    NON_POSITIVE_AMOUNT = "invalid_amount"
    INVALID_ACCOUNT_ID = "invalid_account_ids"
    NEGATIVE_BALANCE = "invalid_balance"

    # Business rule rejections
    ACCOUNT_NOT_FOUND = "account_not_found"
    ACCOUNT_EXISTS = "account_exists"
    INSUFFICIENT_FUNDS = "insufficient_balance"

    # Infrastructure
    STORE_FAILURE = "internal_error"

    @property
    def code(self) -> str:
        return self.value


class TransferSystemError(Exception):
    """Base class for all domain errors"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.name}, message={self.message!r})"


class ValidationError(TransferSystemError):
    """Structurally or semantically invalid request, rejected before the store is touched"""
    pass


class ExecutionError(TransferSystemError):
    """
    Failure while executing a validated transfer.

    The store is always left unchanged when this is raised. For
    ACCOUNT_NOT_FOUND, ``role`` tells whether the source or the
    destination account was missing.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        account_id: Optional[int] = None,
        role: Optional[str] = None
    ):
        super().__init__(kind, message)
        self.account_id = account_id
        self.role = role


class AccountError(TransferSystemError):
    """Failure while creating or reading a single account"""

    def __init__(self, kind: ErrorKind, message: str, account_id: Optional[int] = None):
        super().__init__(kind, message)
        self.account_id = account_id
