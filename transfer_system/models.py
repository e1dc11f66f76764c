"""
Ledger Data Model

Accounts, transfer requests and the append-only transfer records. All
monetary values are Decimal; floats never enter the ledger.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Context, Decimal, Inexact, InvalidOperation, Rounded
from typing import Any, Dict, Optional


def to_decimal(value: Any) -> Decimal:
    """Convert a stored or user-supplied value to Decimal without going through float"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _exact_context(a: Decimal, b: Decimal) -> Context:
    """
    Decimal context wide enough to hold a + b or a - b without rounding.

    The result spans from the lowest exponent of the operands up to one
    digit above the larger operand's leading digit.
    """
    lowest = min(a.as_tuple().exponent, b.as_tuple().exponent)
    highest = max(a.adjusted(), b.adjusted())
    precision = max(highest - lowest + 2, 28)
    return Context(
        prec=precision,
        Emax=max(highest + 2, 999999),
        Emin=min(lowest, -999999),
        traps=[Inexact, Rounded, InvalidOperation]
    )


def add_exact(a: Decimal, b: Decimal) -> Decimal:
    """Exact a + b, whatever the current Decimal context precision"""
    return _exact_context(a, b).add(a, b)


def subtract_exact(a: Decimal, b: Decimal) -> Decimal:
    """Exact a - b, whatever the current Decimal context precision"""
    return _exact_context(a, b).subtract(a, b)


@dataclass
class Account:
    """A monetary account; balance is never committed negative"""
    id: int
    balance: Decimal
    created_at: Optional[datetime] = None

    def __post_init__(self):
        self.balance = to_decimal(self.balance)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "account_id": self.id,
            "balance": str(self.balance),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class TransferRequest:
    """Request to move ``amount`` from the source to the destination account"""
    source_account_id: int
    destination_account_id: int
    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, 'amount', to_decimal(self.amount))


@dataclass(frozen=True)
class TransferRecord:
    """
    Immutable record of an executed transfer.

    ``id`` is assigned by the store and increases monotonically; the other
    fields are copied verbatim from the validated request.
    """
    id: int
    source_account_id: int
    destination_account_id: int
    amount: Decimal
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['amount'] = str(self.amount)
        if self.created_at:
            result['created_at'] = self.created_at.isoformat()
        return result
