"""
Atomic Transfer Engine

Moves funds between two accounts as one unit of work: exclusive holds on
both accounts in ascending ID order, a funds check, the paired balance
mutation and the transfer record append all commit together or not at all.
"""

import logging
from typing import Optional, Tuple

from .errors import ErrorKind, ExecutionError
from .logging_config import log_action
from .models import TransferRecord, TransferRequest, add_exact, subtract_exact
from .storage import LedgerStore, StorageError, UnitOfWork
from .validation import validate_transfer


class TransferEngine:
    """
    Executes validated transfers against a ledger store.

    The engine keeps no state between calls and never retries; lock waits
    are left to the store. Callers that want retry on STORE_FAILURE must
    implement it above this boundary.
    """

    def __init__(self, store: LedgerStore, logger: Optional[logging.Logger] = None):
        self.store = store
        self.logger = logger or logging.getLogger("transfer_system.engine")

    def validate(self, request: TransferRequest) -> None:
        """Raise ValidationError if the request is invalid"""
        validate_transfer(request)

    def transfer(self, request: TransferRequest) -> TransferRecord:
        """Validate then execute a transfer"""
        self.validate(request)
        return self.execute(request)

    @staticmethod
    def _lock_order(request: TransferRequest) -> Tuple[int, int]:
        """Hold acquisition order: ascending account ID, whatever the direction"""
        source = request.source_account_id
        destination = request.destination_account_id
        return (source, destination) if source < destination else (destination, source)

    def _acquire_holds(self, uow: UnitOfWork, request: TransferRequest) -> None:
        for account_id in self._lock_order(request):
            if not uow.acquire_account(account_id):
                role = "source" if account_id == request.source_account_id else "destination"
                raise ExecutionError(
                    ErrorKind.ACCOUNT_NOT_FOUND,
                    f"{role} account not found",
                    account_id=account_id,
                    role=role
                )

    def execute(self, request: TransferRequest) -> TransferRecord:
        """
        Execute a transfer that has already passed validation.

        Args:
            request: Validated transfer request

        Returns:
            The persisted TransferRecord, including its store-assigned ID

        Raises:
            ExecutionError: ACCOUNT_NOT_FOUND, INSUFFICIENT_FUNDS or STORE_FAILURE;
                the ledger is unchanged in every case
        """
        source_id = request.source_account_id
        destination_id = request.destination_account_id
        amount = request.amount
        resource = f"transfer:{source_id}->{destination_id}"

        try:
            with self.store.unit_of_work() as uow:
                self._acquire_holds(uow, request)

                source_balance = uow.read_balance(source_id)
                if source_balance < amount:
                    raise ExecutionError(
                        ErrorKind.INSUFFICIENT_FUNDS,
                        "insufficient balance",
                        account_id=source_id,
                        role="source"
                    )

                destination_balance = uow.read_balance(destination_id)
                uow.write_balance(source_id, subtract_exact(source_balance, amount))
                uow.write_balance(destination_id, add_exact(destination_balance, amount))
                record = uow.append_transfer(source_id, destination_id, amount)

        except ExecutionError as e:
            log_action(
                self.logger, "info", f"Transfer rejected: {e.message}",
                action="transfer_rejected", resource=resource,
                extra={"code": e.kind.code, "account_id": e.account_id, "amount": str(amount)}
            )
            raise
        except StorageError as e:
            log_action(
                self.logger, "error", "Transfer failed in ledger store",
                action="transfer_failed", resource=resource,
                extra={"amount": str(amount), "error": str(e)},
                exc_info=True
            )
            raise ExecutionError(ErrorKind.STORE_FAILURE, "transfer could not be completed") from e

        log_action(
            self.logger, "info", "Transfer committed",
            action="transfer_committed", resource=f"transfer:{record.id}",
            extra={
                "transfer_id": record.id,
                "source_account_id": source_id,
                "destination_account_id": destination_id,
                "amount": str(amount)
            }
        )
        return record
