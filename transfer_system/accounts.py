"""
Account Management Module

Creates and reads single accounts. Each operation touches one row, so no
cross-row coordination is needed here.
"""

import logging
from decimal import Decimal
from typing import Optional

from .errors import AccountError, ErrorKind
from .logging_config import log_action
from .models import Account, to_decimal
from .storage import DuplicateAccountError, LedgerStore, StorageError
from .validation import is_valid_account_id, validate_new_account


class AccountManager:
    """Thin pass-through to the ledger store for account creation and lookup"""

    def __init__(self, store: LedgerStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger("transfer_system.accounts")

    def create_account(self, account_id: int, initial_balance: Decimal) -> Account:
        """
        Create a new account

        Args:
            account_id: Caller-chosen positive account ID
            initial_balance: Opening balance, zero or greater

        Returns:
            Created Account

        Raises:
            ValidationError: If the ID or the balance is invalid
            AccountError: ACCOUNT_EXISTS or STORE_FAILURE
        """
        initial_balance = to_decimal(initial_balance)
        validate_new_account(account_id, initial_balance)

        try:
            account = self.store.create_account(account_id, initial_balance)
        except DuplicateAccountError as e:
            raise AccountError(
                ErrorKind.ACCOUNT_EXISTS,
                f"account {account_id} already exists",
                account_id=account_id
            ) from e
        except StorageError as e:
            self.logger.error(f"Create account {account_id} failed: {e}", exc_info=True)
            raise AccountError(
                ErrorKind.STORE_FAILURE, "account could not be created", account_id=account_id
            ) from e

        log_action(
            self.logger, "info", "Account created",
            action="create_account", resource=f"account:{account_id}",
            extra={"account_id": account_id, "initial_balance": str(initial_balance)}
        )
        return account

    def get_account(self, account_id: int) -> Account:
        """Get account by ID, raising AccountError(ACCOUNT_NOT_FOUND) if missing"""
        if not is_valid_account_id(account_id):
            raise AccountError(
                ErrorKind.ACCOUNT_NOT_FOUND,
                f"account {account_id} not found",
                account_id=account_id
            )

        try:
            account = self.store.get_account(account_id)
        except StorageError as e:
            self.logger.error(f"Get account {account_id} failed: {e}", exc_info=True)
            raise AccountError(
                ErrorKind.STORE_FAILURE, "account could not be loaded", account_id=account_id
            ) from e

        if account is None:
            raise AccountError(
                ErrorKind.ACCOUNT_NOT_FOUND,
                f"account {account_id} not found",
                account_id=account_id
            )
        return account
