"""
Test suite for account management
"""

import pytest
from decimal import Decimal

from transfer_system.accounts import AccountManager
from transfer_system.errors import AccountError, ErrorKind, ValidationError
from transfer_system.storage import InMemoryLedgerStore, StorageError


class BrokenStore(InMemoryLedgerStore):
    """Store whose reads and inserts always fail"""

    def create_account(self, account_id, balance):
        raise StorageError("disk full")

    def get_account(self, account_id):
        raise StorageError("connection lost")


class TestAccountManager:
    """Test account creation and lookup"""

    def setup_method(self):
        """Set up test environment"""
        self.store = InMemoryLedgerStore()
        self.manager = AccountManager(self.store)

    def test_create_account(self):
        """Test creating an account with an opening balance"""
        account = self.manager.create_account(42, Decimal('42.50'))

        assert account.id == 42
        assert account.balance == Decimal('42.50')
        assert self.manager.get_account(42).balance == Decimal('42.50')

    def test_create_account_zero_balance(self):
        account = self.manager.create_account(1, Decimal('0'))
        assert account.balance == Decimal('0')

    def test_create_account_converts_balance(self):
        """Test that string balances are stored as exact decimals"""
        account = self.manager.create_account(7, "10.10")
        assert account.balance == Decimal('10.10')

    def test_create_duplicate_account(self):
        """Test that an existing ID is rejected and left untouched"""
        self.manager.create_account(1, Decimal('100'))

        with pytest.raises(AccountError) as exc_info:
            self.manager.create_account(1, Decimal('5'))

        assert exc_info.value.kind == ErrorKind.ACCOUNT_EXISTS
        assert exc_info.value.account_id == 1
        assert self.manager.get_account(1).balance == Decimal('100')

    def test_create_account_invalid_id(self):
        with pytest.raises(ValidationError) as exc_info:
            self.manager.create_account(0, Decimal('10'))
        assert exc_info.value.kind == ErrorKind.INVALID_ACCOUNT_ID

    def test_create_account_negative_balance(self):
        with pytest.raises(ValidationError) as exc_info:
            self.manager.create_account(1, Decimal('-1'))
        assert exc_info.value.kind == ErrorKind.NEGATIVE_BALANCE
        assert self.store.get_account(1) is None

    def test_create_account_id_too_large(self):
        with pytest.raises(ValidationError) as exc_info:
            self.manager.create_account(2 ** 63, Decimal('10'))
        assert exc_info.value.kind == ErrorKind.INVALID_ACCOUNT_ID

    def test_get_account_id_out_of_range(self):
        """Test that IDs no account can have are reported as not found"""
        for account_id in (0, -3, 2 ** 70):
            with pytest.raises(AccountError) as exc_info:
                self.manager.get_account(account_id)
            assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_FOUND

    def test_get_missing_account(self):
        """Test lookup of an unknown account"""
        with pytest.raises(AccountError) as exc_info:
            self.manager.get_account(999)

        assert exc_info.value.kind == ErrorKind.ACCOUNT_NOT_FOUND
        assert exc_info.value.account_id == 999


class TestAccountStoreFailures:
    """Test that store errors surface as STORE_FAILURE"""

    def setup_method(self):
        self.manager = AccountManager(BrokenStore())

    def test_create_account_store_failure(self):
        with pytest.raises(AccountError) as exc_info:
            self.manager.create_account(1, Decimal('10'))

        assert exc_info.value.kind == ErrorKind.STORE_FAILURE
        assert isinstance(exc_info.value.__cause__, StorageError)
        assert "disk full" not in exc_info.value.message

    def test_get_account_store_failure(self):
        with pytest.raises(AccountError) as exc_info:
            self.manager.get_account(1)

        assert exc_info.value.kind == ErrorKind.STORE_FAILURE
