"""
Test suite for transfer request validation

Rules are checked in order: same account, non-positive amount, invalid IDs.
"""

import pytest
from decimal import Decimal

from transfer_system.errors import ErrorKind, ValidationError
from transfer_system.models import TransferRequest
from transfer_system.validation import MAX_ACCOUNT_ID, validate_new_account, validate_transfer


def validation_kind(request: TransferRequest) -> ErrorKind:
    with pytest.raises(ValidationError) as exc_info:
        validate_transfer(request)
    return exc_info.value.kind


class TestValidateTransfer:
    """Test validation rules and their precedence"""

    def test_valid_request(self):
        """Test that a well-formed request passes"""
        validate_transfer(TransferRequest(1, 2, Decimal('0.01')))

    def test_same_account(self):
        """Test same source and destination"""
        assert validation_kind(TransferRequest(3, 3, Decimal('10'))) == ErrorKind.SAME_ACCOUNT

    def test_same_account_wins_over_invalid_amount(self):
        """Test that SAME_ACCOUNT is reported even when the amount is also invalid"""
        assert validation_kind(TransferRequest(3, 3, Decimal('-10'))) == ErrorKind.SAME_ACCOUNT
        assert validation_kind(TransferRequest(0, 0, Decimal('0'))) == ErrorKind.SAME_ACCOUNT

    @pytest.mark.parametrize("amount", ["0", "0.00", "-0.01", "-100"])
    def test_non_positive_amount(self, amount):
        """Test zero and negative amounts"""
        assert validation_kind(TransferRequest(1, 2, Decimal(amount))) == ErrorKind.NON_POSITIVE_AMOUNT

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_amount(self, amount):
        """Test that NaN and infinities are rejected as amounts"""
        assert validation_kind(TransferRequest(1, 2, Decimal(amount))) == ErrorKind.NON_POSITIVE_AMOUNT

    def test_amount_wins_over_invalid_ids(self):
        """Test that NON_POSITIVE_AMOUNT is checked before account IDs"""
        assert validation_kind(TransferRequest(-1, 2, Decimal('0'))) == ErrorKind.NON_POSITIVE_AMOUNT

    @pytest.mark.parametrize("source,destination", [
        (0, 2), (1, 0), (-5, 2), (1, -7), (2 ** 63, 2), (1, 2 ** 70)
    ])
    def test_invalid_account_ids(self, source, destination):
        """Test zero and negative account IDs"""
        kind = validation_kind(TransferRequest(source, destination, Decimal('10')))
        assert kind == ErrorKind.INVALID_ACCOUNT_ID

    def test_request_amount_is_decimal(self):
        """Test that string and float amounts are converted without float error"""
        assert TransferRequest(1, 2, "25.50").amount == Decimal('25.50')
        assert TransferRequest(1, 2, 0.1).amount == Decimal('0.1')


class TestValidateNewAccount:
    """Test account creation checks"""

    def test_valid_account(self):
        validate_new_account(1, Decimal('0'))
        validate_new_account(42, Decimal('100.00'))

    @pytest.mark.parametrize("account_id", [0, -1, 2 ** 63, 2 ** 70])
    def test_invalid_account_id(self, account_id):
        with pytest.raises(ValidationError) as exc_info:
            validate_new_account(account_id, Decimal('10'))
        assert exc_info.value.kind == ErrorKind.INVALID_ACCOUNT_ID

    @pytest.mark.parametrize("balance", ["-0.01", "NaN", "Infinity"])
    def test_invalid_balance(self, balance):
        with pytest.raises(ValidationError) as exc_info:
            validate_new_account(1, Decimal(balance))
        assert exc_info.value.kind == ErrorKind.NEGATIVE_BALANCE

    def test_largest_account_id_accepted(self):
        """Test the signed 64-bit upper bound on account IDs"""
        validate_new_account(MAX_ACCOUNT_ID, Decimal('1'))
        validate_transfer(TransferRequest(1, MAX_ACCOUNT_ID, Decimal('1')))
