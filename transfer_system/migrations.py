"""
Database Migration System

Simple migration system that provisions the ledger schema (accounts and
transfers) without external dependencies. Supports both PostgreSQL and
SQLite backends; the in-memory store needs no schema.
"""

from typing import Dict, List, Optional, Any
from datetime import datetime, timezone
import logging

from .storage import LedgerStore


logger = logging.getLogger(__name__)

SUPPORTED_DIALECTS = ("sqlite", "postgresql")


class Migration:
    """Represents a single database migration with SQL per dialect"""

    def __init__(
        self,
        version: int,
        name: str,
        up_sql: Dict[str, List[str]],
        down_sql: Optional[Dict[str, List[str]]] = None
    ):
        self.version = version
        self.name = name
        self.up_sql = up_sql
        self.down_sql = down_sql or {}
        self.applied_at: Optional[datetime] = None

    def up_statements(self, dialect: str) -> List[str]:
        return self.up_sql.get(dialect, [])

    def down_statements(self, dialect: str) -> List[str]:
        return self.down_sql.get(dialect, [])

    def __str__(self) -> str:
        return f"Migration v{self.version:03d}: {self.name}"

    def __repr__(self) -> str:
        return f"Migration(version={self.version}, name='{self.name}')"


class MigrationManager:
    """Manages database migrations for SQL ledger stores"""

    def __init__(self, store: LedgerStore):
        if store.dialect not in SUPPORTED_DIALECTS:
            raise ValueError(f"Migrations are not supported for the {store.dialect} store")

        self.store = store
        self.dialect = store.dialect
        self.migrations: List[Migration] = []
        self._migration_table = "schema_migrations"
        self._init_migrations()
        self._ensure_migration_table()

    def _init_migrations(self) -> None:
        """Initialize built-in migrations"""

        # v001: Accounts with a non-negative balance
        self.add_migration(1, "Create accounts table", {
            "sqlite": ["""
                CREATE TABLE IF NOT EXISTS accounts (
                    id INTEGER PRIMARY KEY CHECK (id > 0),
                    balance TEXT NOT NULL CHECK (CAST(balance AS REAL) >= 0),
                    created_at TEXT NOT NULL
                )
            """],
            "postgresql": ["""
                CREATE TABLE IF NOT EXISTS accounts (
                    id BIGINT PRIMARY KEY CHECK (id > 0),
                    balance NUMERIC NOT NULL CHECK (balance >= 0),
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
                )
            """],
        }, {
            "sqlite": ["DROP TABLE IF EXISTS accounts"],
            "postgresql": ["DROP TABLE IF EXISTS accounts"],
        })

        # v002: Append-only transfer log
        self.add_migration(2, "Create transfers table", {
            "sqlite": ["""
                CREATE TABLE IF NOT EXISTS transfers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    source_account_id INTEGER NOT NULL REFERENCES accounts(id),
                    destination_account_id INTEGER NOT NULL REFERENCES accounts(id),
                    amount TEXT NOT NULL CHECK (CAST(amount AS REAL) > 0),
                    created_at TEXT NOT NULL,
                    CHECK (source_account_id <> destination_account_id)
                )
            """],
            "postgresql": ["""
                CREATE TABLE IF NOT EXISTS transfers (
                    id BIGSERIAL PRIMARY KEY,
                    source_account_id BIGINT NOT NULL REFERENCES accounts(id),
                    destination_account_id BIGINT NOT NULL REFERENCES accounts(id),
                    amount NUMERIC NOT NULL CHECK (amount > 0),
                    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
                    CHECK (source_account_id <> destination_account_id)
                )
            """],
        }, {
            "sqlite": ["DROP TABLE IF EXISTS transfers"],
            "postgresql": ["DROP TABLE IF EXISTS transfers"],
        })

        # v003: Per-account transfer lookups
        index_up = [
            "CREATE INDEX IF NOT EXISTS idx_transfers_source ON transfers(source_account_id)",
            "CREATE INDEX IF NOT EXISTS idx_transfers_destination ON transfers(destination_account_id)",
        ]
        index_down = [
            "DROP INDEX IF EXISTS idx_transfers_source",
            "DROP INDEX IF EXISTS idx_transfers_destination",
        ]
        self.add_migration(
            3, "Index transfers by account",
            {"sqlite": index_up, "postgresql": index_up},
            {"sqlite": index_down, "postgresql": index_down}
        )

    def _ensure_migration_table(self) -> None:
        """Ensure the migration tracking table exists"""
        self.store.execute_statements([(f"""
            CREATE TABLE IF NOT EXISTS {self._migration_table} (
                version INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                applied_at TEXT NOT NULL
            )
        """, ())])

    def add_migration(
        self,
        version: int,
        name: str,
        up_sql: Dict[str, List[str]],
        down_sql: Optional[Dict[str, List[str]]] = None
    ) -> None:
        """Add a migration to the manager"""
        if any(m.version == version for m in self.migrations):
            raise ValueError(f"Migration version {version} is already registered")
        migration = Migration(version, name, up_sql, down_sql)
        self.migrations.append(migration)
        # Keep migrations sorted by version
        self.migrations.sort(key=lambda m: m.version)

    def get_current_version(self) -> int:
        """Get the current database version"""
        rows = self.store.fetch_all(
            f"SELECT MAX(version) AS version FROM {self._migration_table}"
        )
        if not rows or rows[0]["version"] is None:
            return 0
        return int(rows[0]["version"])

    def get_applied_migrations(self) -> List[Dict[str, Any]]:
        """Get list of applied migrations"""
        return self.store.fetch_all(
            f"SELECT version, name, applied_at FROM {self._migration_table} ORDER BY version"
        )

    def get_pending_migrations(self, target_version: Optional[int] = None) -> List[Migration]:
        """Get list of pending migrations"""
        current_version = self.get_current_version()
        max_version = target_version or max((m.version for m in self.migrations), default=0)

        return [
            migration for migration in self.migrations
            if current_version < migration.version <= max_version
        ]

    def migrate_up(self, target_version: Optional[int] = None) -> List[Migration]:
        """Apply pending migrations up to target version, each in its own transaction"""
        pending = self.get_pending_migrations(target_version)
        applied = []

        if not pending:
            logger.info("No pending migrations to apply")
            return applied

        logger.info(f"Applying {len(pending)} pending migrations")
        placeholder = self.store.placeholder

        for migration in pending:
            logger.info(f"Applying {migration}")
            applied_at = datetime.now(timezone.utc)
            statements = [(sql, ()) for sql in migration.up_statements(self.dialect)]
            statements.append((
                f"INSERT INTO {self._migration_table} (version, name, applied_at) "
                f"VALUES ({placeholder}, {placeholder}, {placeholder})",
                (migration.version, migration.name, applied_at.isoformat())
            ))
            self.store.execute_statements(statements)

            migration.applied_at = applied_at
            applied.append(migration)

        logger.info(f"Database now at version {self.get_current_version()}")
        return applied

    def migrate_down(self, target_version: int = 0) -> List[Migration]:
        """Revert applied migrations above target version, newest first"""
        current_version = self.get_current_version()
        to_revert = [
            migration for migration in reversed(self.migrations)
            if target_version < migration.version <= current_version
        ]
        placeholder = self.store.placeholder

        for migration in to_revert:
            logger.info(f"Reverting {migration}")
            statements = [(sql, ()) for sql in migration.down_statements(self.dialect)]
            statements.append((
                f"DELETE FROM {self._migration_table} WHERE version = {placeholder}",
                (migration.version,)
            ))
            self.store.execute_statements(statements)
            migration.applied_at = None

        return to_revert
