"""
Application wiring and request dependencies
"""

import logging
from typing import Optional

from fastapi import Request

from ..accounts import AccountManager
from ..config import TransferSystemConfig, load_config
from ..engine import TransferEngine
from ..logging_config import get_logger
from ..migrations import MigrationManager, SUPPORTED_DIALECTS
from ..storage import LedgerStore, create_store


class TransferSystem:
    """Transfer system with all components initialized from one configuration"""

    def __init__(
        self,
        config: Optional[TransferSystemConfig] = None,
        logger: Optional[logging.Logger] = None,
        store: Optional[LedgerStore] = None
    ):
        self.config = config or load_config()
        self.logger = logger or get_logger("transfer_system")

        # Initialize storage
        self.store = store or create_store(
            self.config.database_url,
            lock_timeout=self.config.lock_timeout_seconds,
            min_connections=self.config.database_pool_min_size,
            max_connections=self.config.database_pool_max_size
        )
        if self.config.auto_migrate and self.store.dialect in SUPPORTED_DIALECTS:
            MigrationManager(self.store).migrate_up()

        # Initialize core components
        self.account_manager = AccountManager(self.store, self.logger.getChild("accounts"))
        self.transfer_engine = TransferEngine(self.store, self.logger.getChild("engine"))

    def close(self) -> None:
        self.store.close()


def get_transfer_system(request: Request) -> TransferSystem:
    """FastAPI dependency returning the system attached to the application"""
    return request.app.state.system
