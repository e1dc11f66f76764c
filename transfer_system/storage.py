"""
Ledger Store Module

Provides the abstract ledger store and its units of work, with
implementations for in-memory (testing), SQLite (single node persistence)
and PostgreSQL (production, row-level locking). Balances and amounts are
always handled as Decimal.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union
import logging
import sqlite3
import threading

from .models import Account, TransferRecord, to_decimal


logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Infrastructure failure inside the ledger store (connectivity, constraints, locks)"""
    pass


class DuplicateAccountError(StorageError):
    """An account with the same ID already exists"""
    pass


class LockTimeoutError(StorageError):
    """An exclusive hold could not be acquired within the configured lock timeout"""
    pass


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


class UnitOfWork(ABC):
    """
    One atomic unit of work against the ledger store.

    Exclusive holds taken with acquire_account() are kept until the unit of
    work commits or rolls back, and are released together. Writes are only
    visible to other units of work after commit; a rollback discards all of
    them.
    """

    def __init__(self):
        self._balances: Dict[int, Decimal] = {}
        self._finished = False

    @property
    def held_accounts(self) -> List[int]:
        """Account IDs held by this unit of work, in acquisition order"""
        return list(self._balances)

    @property
    def is_finished(self) -> bool:
        return self._finished

    def acquire_account(self, account_id: int) -> bool:
        """
        Take an exclusive hold on an account row.

        Blocks while another unit of work holds the row.

        Returns:
            False if the account does not exist, True once the hold is taken
        """
        self._require_active()
        if account_id in self._balances:
            return True

        balance = self._lock_row(account_id)
        if balance is None:
            return False

        self._balances[account_id] = to_decimal(balance)
        return True

    def read_balance(self, account_id: int) -> Decimal:
        """Read the balance of a held account, including this unit of work's own writes"""
        self._require_hold(account_id)
        return self._balances[account_id]

    def write_balance(self, account_id: int, balance: Decimal) -> None:
        """Overwrite the balance of a held account"""
        self._require_hold(account_id)
        if balance < Decimal('0'):
            raise StorageError(f"balance of account {account_id} cannot be negative")

        self._update_row(account_id, balance)
        self._balances[account_id] = balance

    def append_transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount: Decimal
    ) -> TransferRecord:
        """Append a transfer record; the store assigns its ID"""
        self._require_active()
        return self._insert_transfer(source_account_id, destination_account_id, amount)

    def commit(self) -> None:
        """Make every write of this unit of work durable and visible at once"""
        self._require_active()
        self._commit()
        self._finished = True

    def rollback(self) -> None:
        """Discard every write of this unit of work (no-op once finished)"""
        if self._finished:
            return
        try:
            self._rollback()
        finally:
            self._finished = True

    def close(self) -> None:
        """Roll back if still active and release all holds and resources"""
        try:
            self.rollback()
        finally:
            self._release()

    def _require_active(self) -> None:
        if self._finished:
            raise StorageError("unit of work is already finished")

    def _require_hold(self, account_id: int) -> None:
        self._require_active()
        if account_id not in self._balances:
            raise StorageError(f"account {account_id} is not held by this unit of work")

    @abstractmethod
    def _lock_row(self, account_id: int) -> Optional[Decimal]:
        """Acquire the row hold and return the committed balance, or None if missing"""
        pass

    @abstractmethod
    def _update_row(self, account_id: int, balance: Decimal) -> None:
        pass

    @abstractmethod
    def _insert_transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount: Decimal
    ) -> TransferRecord:
        pass

    @abstractmethod
    def _commit(self) -> None:
        pass

    @abstractmethod
    def _rollback(self) -> None:
        pass

    @abstractmethod
    def _release(self) -> None:
        pass


class LedgerStore(ABC):
    """Abstract interface for ledger store backends"""

    dialect = "abstract"

    @abstractmethod
    def _begin(self) -> UnitOfWork:
        """Open a new unit of work"""
        pass

    @contextmanager
    def unit_of_work(self) -> Iterator[UnitOfWork]:
        """
        Context manager for one atomic unit of work.

        Commits when the block exits normally, rolls back when it raises.
        Holds are released in both cases.
        """
        uow = self._begin()
        try:
            yield uow
            uow.commit()
        except Exception:
            uow.rollback()
            raise
        finally:
            uow.close()

    @abstractmethod
    def create_account(self, account_id: int, balance: Decimal) -> Account:
        """Insert a new account row"""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Load the committed state of an account"""
        pass

    @abstractmethod
    def get_transfer(self, transfer_id: int) -> Optional[TransferRecord]:
        """Load a committed transfer record"""
        pass

    @abstractmethod
    def list_accounts(self) -> List[Account]:
        """Load all accounts ordered by ID"""
        pass

    @abstractmethod
    def list_transfers(self, account_id: Optional[int] = None) -> List[TransferRecord]:
        """Load committed transfers ordered by ID, optionally for one account"""
        pass

    def close(self) -> None:
        """Close store connections (default no-op)"""
        pass


class InMemoryUnitOfWork(UnitOfWork):
    """Unit of work over InMemoryLedgerStore; writes are staged until commit"""

    def __init__(self, store: 'InMemoryLedgerStore'):
        super().__init__()
        self.store = store
        self._held_locks: List[threading.Lock] = []
        self._staged_balances: Dict[int, Decimal] = {}
        self._staged_transfers: List[TransferRecord] = []

    def _lock_row(self, account_id: int) -> Optional[Decimal]:
        row_lock = self.store._row_lock(account_id)
        if row_lock is None:
            return None

        timeout = self.store.lock_timeout
        if timeout is None:
            acquired = row_lock.acquire()
        else:
            acquired = row_lock.acquire(timeout=timeout)
        if not acquired:
            raise LockTimeoutError(f"timed out waiting for a hold on account {account_id}")
        self._held_locks.append(row_lock)

        # Only the hold owner writes the row, so the committed balance is stable now
        return self.store._committed_balance(account_id)

    def _update_row(self, account_id: int, balance: Decimal) -> None:
        self._staged_balances[account_id] = balance

    def _insert_transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount: Decimal
    ) -> TransferRecord:
        record = TransferRecord(
            id=self.store._allocate_transfer_id(),
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            amount=amount,
            created_at=datetime.now(timezone.utc)
        )
        self._staged_transfers.append(record)
        return record

    def _commit(self) -> None:
        self.store._apply(self._staged_balances, self._staged_transfers)
        self._staged_balances = {}
        self._staged_transfers = []

    def _rollback(self) -> None:
        self._staged_balances = {}
        self._staged_transfers = []

    def _release(self) -> None:
        while self._held_locks:
            self._held_locks.pop().release()


class InMemoryLedgerStore(LedgerStore):
    """
    In-memory ledger store for testing and single-process use.

    Every account row has its own exclusive lock, so units of work touching
    disjoint accounts run in parallel while those sharing an account
    serialize on it.
    """

    dialect = "memory"
    unit_of_work_class = InMemoryUnitOfWork

    def __init__(self, lock_timeout: Optional[float] = None):
        self.lock_timeout = lock_timeout
        self._accounts: Dict[int, Account] = {}
        self._transfers: Dict[int, TransferRecord] = {}
        self._row_locks: Dict[int, threading.Lock] = {}
        self._next_transfer_id = 1
        self._lock = threading.RLock()

    def _begin(self) -> UnitOfWork:
        return self.unit_of_work_class(self)

    def _row_lock(self, account_id: int) -> Optional[threading.Lock]:
        with self._lock:
            return self._row_locks.get(account_id)

    def _committed_balance(self, account_id: int) -> Decimal:
        with self._lock:
            return self._accounts[account_id].balance

    def _allocate_transfer_id(self) -> int:
        with self._lock:
            transfer_id = self._next_transfer_id
            self._next_transfer_id += 1
            return transfer_id

    def _apply(self, balances: Dict[int, Decimal], transfers: List[TransferRecord]) -> None:
        """Apply staged writes in one step so readers never see half a transfer"""
        with self._lock:
            for account_id, balance in balances.items():
                account = self._accounts[account_id]
                self._accounts[account_id] = Account(account.id, balance, account.created_at)
            for record in transfers:
                self._transfers[record.id] = record

    def create_account(self, account_id: int, balance: Decimal) -> Account:
        with self._lock:
            if account_id in self._accounts:
                raise DuplicateAccountError(f"account {account_id} already exists")
            account = Account(account_id, balance, datetime.now(timezone.utc))
            self._accounts[account_id] = account
            self._row_locks[account_id] = threading.Lock()
            return Account(account.id, account.balance, account.created_at)

    def get_account(self, account_id: int) -> Optional[Account]:
        with self._lock:
            account = self._accounts.get(account_id)
            if account:
                return Account(account.id, account.balance, account.created_at)
            return None

    def get_transfer(self, transfer_id: int) -> Optional[TransferRecord]:
        with self._lock:
            return self._transfers.get(transfer_id)

    def list_accounts(self) -> List[Account]:
        with self._lock:
            return [
                Account(account.id, account.balance, account.created_at)
                for _, account in sorted(self._accounts.items())
            ]

    def list_transfers(self, account_id: Optional[int] = None) -> List[TransferRecord]:
        with self._lock:
            records = [record for _, record in sorted(self._transfers.items())]
        if account_id is None:
            return records
        return [
            record for record in records
            if account_id in (record.source_account_id, record.destination_account_id)
        ]


class SQLiteUnitOfWork(UnitOfWork):
    """Unit of work over SQLiteLedgerStore, opened with BEGIN IMMEDIATE"""

    def __init__(self, store: 'SQLiteLedgerStore'):
        super().__init__()
        self.store = store
        self._connection = store._connection
        self._has_lock = False

    def begin(self) -> None:
        self.store._acquire()
        self._has_lock = True
        try:
            # IMMEDIATE takes the database write lock up front; it covers every row
            self._connection.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as e:
            self._finished = True
            self._release()
            raise StorageError(f"could not begin transaction: {e}") from e

    def _execute(self, sql: str, params: Sequence = ()) -> sqlite3.Cursor:
        try:
            return self._connection.execute(sql, params)
        except (sqlite3.Error, OverflowError) as e:
            raise StorageError(str(e)) from e

    def _lock_row(self, account_id: int) -> Optional[Decimal]:
        row = self._execute(
            "SELECT balance FROM accounts WHERE id = ?", (account_id,)
        ).fetchone()
        if row is None:
            return None
        return Decimal(row['balance'])

    def _update_row(self, account_id: int, balance: Decimal) -> None:
        self._execute(
            "UPDATE accounts SET balance = ? WHERE id = ?", (str(balance), account_id)
        )

    def _insert_transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount: Decimal
    ) -> TransferRecord:
        now = datetime.now(timezone.utc)
        cursor = self._execute("""
            INSERT INTO transfers (source_account_id, destination_account_id, amount, created_at)
            VALUES (?, ?, ?, ?)
        """, (source_account_id, destination_account_id, str(amount), now.isoformat()))
        return TransferRecord(
            id=cursor.lastrowid,
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            amount=amount,
            created_at=now
        )

    def _commit(self) -> None:
        self._execute("COMMIT")

    def _rollback(self) -> None:
        if not self._connection.in_transaction:
            return
        try:
            self._connection.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.warning(f"SQLite rollback failed: {e}")

    def _release(self) -> None:
        if self._has_lock:
            self._has_lock = False
            self.store._lock.release()


class SQLiteLedgerStore(LedgerStore):
    """
    SQLite ledger store for single node persistence.

    One connection is shared by all threads. A unit of work holds the store
    lock from BEGIN IMMEDIATE until commit or rollback, so units of work are
    serialized; the database write lock stands in for row-level holds.
    """

    dialect = "sqlite"
    placeholder = "?"

    def __init__(self, db_path: Union[str, Path] = ":memory:", lock_timeout: Optional[float] = None):
        self.db_path = str(db_path)
        self.lock_timeout = lock_timeout
        # isolation_level=None: transactions are opened explicitly by units of work
        self._connection = sqlite3.connect(
            self.db_path,
            check_same_thread=False,
            isolation_level=None,
            timeout=lock_timeout if lock_timeout is not None else 30.0
        )
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()

        with self._lock:
            self._connection.execute("PRAGMA foreign_keys = ON")
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
                self._connection.execute("PRAGMA synchronous = NORMAL")

    def _acquire(self) -> None:
        if self.lock_timeout is None:
            self._lock.acquire()
        elif not self._lock.acquire(timeout=self.lock_timeout):
            raise LockTimeoutError("timed out waiting for the SQLite write lock")

    def _begin(self) -> UnitOfWork:
        uow = SQLiteUnitOfWork(self)
        uow.begin()
        return uow

    def _query(self, sql: str, params: Sequence = ()) -> List[sqlite3.Row]:
        with self._lock:
            try:
                return self._connection.execute(sql, params).fetchall()
            except (sqlite3.Error, OverflowError) as e:
                raise StorageError(str(e)) from e

    def fetch_all(self, sql: str, params: Sequence = ()) -> List[Dict[str, Any]]:
        """Run a query and return rows as dictionaries"""
        return [dict(row) for row in self._query(sql, params)]

    def execute_statements(self, statements: Sequence[Tuple[str, Sequence]]) -> None:
        """Run several statements in one transaction"""
        with self._lock:
            try:
                self._connection.execute("BEGIN IMMEDIATE")
                for sql, params in statements:
                    self._connection.execute(sql, params)
                self._connection.execute("COMMIT")
            except (sqlite3.Error, OverflowError) as e:
                if self._connection.in_transaction:
                    self._connection.execute("ROLLBACK")
                raise StorageError(str(e)) from e

    @staticmethod
    def _account_from_row(row: sqlite3.Row) -> Account:
        return Account(
            id=row['id'],
            balance=Decimal(row['balance']),
            created_at=_parse_timestamp(row['created_at'])
        )

    @staticmethod
    def _transfer_from_row(row: sqlite3.Row) -> TransferRecord:
        return TransferRecord(
            id=row['id'],
            source_account_id=row['source_account_id'],
            destination_account_id=row['destination_account_id'],
            amount=Decimal(row['amount']),
            created_at=_parse_timestamp(row['created_at'])
        )

    def create_account(self, account_id: int, balance: Decimal) -> Account:
        now = datetime.now(timezone.utc)
        with self._lock:
            try:
                self._connection.execute(
                    "INSERT INTO accounts (id, balance, created_at) VALUES (?, ?, ?)",
                    (account_id, str(balance), now.isoformat())
                )
            except sqlite3.IntegrityError as e:
                if "UNIQUE" in str(e) or "PRIMARY KEY" in str(e):
                    raise DuplicateAccountError(f"account {account_id} already exists") from e
                raise StorageError(str(e)) from e
            except (sqlite3.Error, OverflowError) as e:
                raise StorageError(str(e)) from e
        return Account(account_id, balance, now)

    def get_account(self, account_id: int) -> Optional[Account]:
        rows = self._query(
            "SELECT id, balance, created_at FROM accounts WHERE id = ?", (account_id,)
        )
        if rows:
            return self._account_from_row(rows[0])
        return None

    def get_transfer(self, transfer_id: int) -> Optional[TransferRecord]:
        rows = self._query("""
            SELECT id, source_account_id, destination_account_id, amount, created_at
            FROM transfers WHERE id = ?
        """, (transfer_id,))
        if rows:
            return self._transfer_from_row(rows[0])
        return None

    def list_accounts(self) -> List[Account]:
        rows = self._query("SELECT id, balance, created_at FROM accounts ORDER BY id")
        return [self._account_from_row(row) for row in rows]

    def list_transfers(self, account_id: Optional[int] = None) -> List[TransferRecord]:
        if account_id is None:
            rows = self._query("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transfers ORDER BY id
            """)
        else:
            rows = self._query("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transfers
                WHERE source_account_id = ? OR destination_account_id = ?
                ORDER BY id
            """, (account_id, account_id))
        return [self._transfer_from_row(row) for row in rows]

    def close(self) -> None:
        with self._lock:
            if self._connection:
                self._connection.close()
                self._connection = None


class PostgreSQLUnitOfWork(UnitOfWork):
    """Unit of work over PostgreSQLLedgerStore using SELECT ... FOR UPDATE row holds"""

    def __init__(self, store: 'PostgreSQLLedgerStore'):
        super().__init__()
        self.store = store
        self._connection = None

    def begin(self) -> None:
        self._connection = self.store._checkout()
        if self.store.lock_timeout is not None:
            timeout_ms = int(self.store.lock_timeout * 1000)
            try:
                self._execute("SET LOCAL lock_timeout = %s", (f"{timeout_ms}ms",))
            except StorageError:
                self._finished = True
                self._release()
                raise

    def _execute(self, sql: str, params: Sequence = ()):
        cursor = self._connection.cursor()
        try:
            cursor.execute(sql, params)
            return cursor
        except self.store.psycopg2.Error as e:
            cursor.close()
            raise self.store._translate_error(e) from e

    def _lock_row(self, account_id: int) -> Optional[Decimal]:
        cursor = self._execute(
            "SELECT balance FROM accounts WHERE id = %s FOR UPDATE", (account_id,)
        )
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        if row is None:
            return None
        return row['balance']

    def _update_row(self, account_id: int, balance: Decimal) -> None:
        self._execute(
            "UPDATE accounts SET balance = %s WHERE id = %s", (balance, account_id)
        ).close()

    def _insert_transfer(
        self,
        source_account_id: int,
        destination_account_id: int,
        amount: Decimal
    ) -> TransferRecord:
        cursor = self._execute("""
            INSERT INTO transfers (source_account_id, destination_account_id, amount)
            VALUES (%s, %s, %s)
            RETURNING id, created_at
        """, (source_account_id, destination_account_id, amount))
        try:
            row = cursor.fetchone()
        finally:
            cursor.close()
        return TransferRecord(
            id=row['id'],
            source_account_id=source_account_id,
            destination_account_id=destination_account_id,
            amount=amount,
            created_at=row['created_at']
        )

    def _commit(self) -> None:
        try:
            self._connection.commit()
        except self.store.psycopg2.Error as e:
            raise self.store._translate_error(e) from e

    def _rollback(self) -> None:
        if self._connection is None or self._connection.closed:
            return
        try:
            self._connection.rollback()
        except self.store.psycopg2.Error as e:
            logger.warning(f"PostgreSQL rollback failed: {e}")

    def _release(self) -> None:
        if self._connection is not None:
            connection, self._connection = self._connection, None
            self.store._checkin(connection)


class PostgreSQLLedgerStore(LedgerStore):
    """PostgreSQL ledger store with ACID transactions and row-level exclusive holds"""

    dialect = "postgresql"
    placeholder = "%s"

    def __init__(
        self,
        connection_string: str,
        min_connections: int = 1,
        max_connections: int = 10,
        lock_timeout: Optional[float] = None
    ):
        try:
            import psycopg2
            import psycopg2.extras
            import psycopg2.pool
            self.psycopg2 = psycopg2
            self.extras = psycopg2.extras
        except ImportError:
            raise ImportError("psycopg2 is required for PostgreSQL storage. Install with: pip install psycopg2-binary")

        self.connection_string = connection_string
        self.lock_timeout = lock_timeout
        # Callers wait for a free connection instead of failing on an exhausted pool
        self._slots = threading.BoundedSemaphore(max_connections)
        try:
            self._pool = psycopg2.pool.ThreadedConnectionPool(
                min_connections,
                max_connections,
                connection_string,
                cursor_factory=psycopg2.extras.RealDictCursor
            )
        except psycopg2.Error as e:
            raise StorageError(f"could not connect to PostgreSQL: {e}") from e

    def _translate_error(self, error: Exception) -> StorageError:
        pgcode = getattr(error, 'pgcode', None)
        if pgcode == '23505':
            return DuplicateAccountError(str(error).strip())
        if pgcode == '55P03':
            return LockTimeoutError(str(error).strip())
        return StorageError(str(error).strip())

    def _checkout(self):
        self._slots.acquire()
        try:
            connection = self._pool.getconn()
            connection.autocommit = False
            return connection
        except self.psycopg2.Error as e:
            self._slots.release()
            raise self._translate_error(e) from e
        except Exception:
            self._slots.release()
            raise

    def _checkin(self, connection) -> None:
        try:
            self._pool.putconn(connection, close=bool(connection.closed))
        finally:
            self._slots.release()

    @contextmanager
    def _connection_scope(self):
        """Borrow a connection for a short statement sequence outside a unit of work"""
        connection = self._checkout()
        try:
            yield connection
            connection.commit()
        except self.psycopg2.Error as e:
            if not connection.closed:
                connection.rollback()
            raise self._translate_error(e) from e
        except Exception:
            if not connection.closed:
                connection.rollback()
            raise
        finally:
            self._checkin(connection)

    def _begin(self) -> UnitOfWork:
        uow = PostgreSQLUnitOfWork(self)
        uow.begin()
        return uow

    def fetch_all(self, sql: str, params: Sequence = ()) -> List[Dict[str, Any]]:
        """Run a statement in its own transaction and return rows as dictionaries"""
        with self._connection_scope() as connection:
            cursor = connection.cursor()
            try:
                cursor.execute(sql, params)
                if cursor.description is None:
                    return []
                return [dict(row) for row in cursor.fetchall()]
            finally:
                cursor.close()

    def execute_statements(self, statements: Sequence[Tuple[str, Sequence]]) -> None:
        """Run several statements in one transaction"""
        with self._connection_scope() as connection:
            cursor = connection.cursor()
            try:
                for sql, params in statements:
                    cursor.execute(sql, params)
            finally:
                cursor.close()

    @staticmethod
    def _account_from_row(row: Dict[str, Any]) -> Account:
        return Account(id=row['id'], balance=row['balance'], created_at=row['created_at'])

    @staticmethod
    def _transfer_from_row(row: Dict[str, Any]) -> TransferRecord:
        return TransferRecord(
            id=row['id'],
            source_account_id=row['source_account_id'],
            destination_account_id=row['destination_account_id'],
            amount=row['amount'],
            created_at=row['created_at']
        )

    def create_account(self, account_id: int, balance: Decimal) -> Account:
        rows = self.fetch_all("""
            INSERT INTO accounts (id, balance)
            VALUES (%s, %s)
            RETURNING id, balance, created_at
        """, (account_id, balance))
        return self._account_from_row(rows[0])

    def get_account(self, account_id: int) -> Optional[Account]:
        rows = self.fetch_all(
            "SELECT id, balance, created_at FROM accounts WHERE id = %s", (account_id,)
        )
        if rows:
            return self._account_from_row(rows[0])
        return None

    def get_transfer(self, transfer_id: int) -> Optional[TransferRecord]:
        rows = self.fetch_all("""
            SELECT id, source_account_id, destination_account_id, amount, created_at
            FROM transfers WHERE id = %s
        """, (transfer_id,))
        if rows:
            return self._transfer_from_row(rows[0])
        return None

    def list_accounts(self) -> List[Account]:
        rows = self.fetch_all("SELECT id, balance, created_at FROM accounts ORDER BY id")
        return [self._account_from_row(row) for row in rows]

    def list_transfers(self, account_id: Optional[int] = None) -> List[TransferRecord]:
        if account_id is None:
            rows = self.fetch_all("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transfers ORDER BY id
            """)
        else:
            rows = self.fetch_all("""
                SELECT id, source_account_id, destination_account_id, amount, created_at
                FROM transfers
                WHERE source_account_id = %s OR destination_account_id = %s
                ORDER BY id
            """, (account_id, account_id))
        return [self._transfer_from_row(row) for row in rows]

    def close(self) -> None:
        if self._pool:
            self._pool.closeall()
            self._pool = None


def create_store(
    database_url: str,
    lock_timeout: Optional[float] = None,
    min_connections: int = 1,
    max_connections: int = 10
) -> LedgerStore:
    """
    Build a ledger store from a database URL.

    Supported schemes: ``memory://``, ``sqlite:///<path>`` and
    ``postgresql://`` (or ``postgres://``).
    """
    if database_url.startswith("memory://"):
        return InMemoryLedgerStore(lock_timeout=lock_timeout)

    if database_url.startswith("sqlite://"):
        path = database_url[len("sqlite:///"):] if database_url.startswith("sqlite:///") else ""
        return SQLiteLedgerStore(path or ":memory:", lock_timeout=lock_timeout)

    if database_url.startswith(("postgresql://", "postgres://")):
        return PostgreSQLLedgerStore(
            database_url,
            min_connections=min_connections,
            max_connections=max_connections,
            lock_timeout=lock_timeout
        )

    raise ValueError(f"Unsupported database URL: {database_url}")
