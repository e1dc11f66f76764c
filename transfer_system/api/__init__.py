"""
Transfer System API Application Factory
"""

from typing import Optional

from fastapi import FastAPI
import uvicorn

from .. import __version__
from ..config import TransferSystemConfig, load_config
from ..logging_config import setup_logging
from .accounts import router as accounts_router
from .dependencies import TransferSystem, get_transfer_system
from .errors import register_exception_handlers
from .middleware import RequestContextMiddleware
from .transactions import router as transactions_router


def create_app(
    system: Optional[TransferSystem] = None,
    config: Optional[TransferSystemConfig] = None
) -> FastAPI:
    """Create and configure the FastAPI application"""
    if system is None:
        config = config or load_config()
        log_format = "text" if config.is_development else config.log_format
        logger = setup_logging(config.log_level, log_format)
        system = TransferSystem(config, logger=logger)

    app = FastAPI(
        title="Transfer System API",
        description="Accounts and atomic fund transfers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.system = system

    app.add_middleware(RequestContextMiddleware, logger=system.logger.getChild("api"))
    register_exception_handlers(app)

    # Include routers
    app.include_router(accounts_router, prefix="/api/v1/accounts", tags=["Accounts"])
    app.include_router(transactions_router, prefix="/api/v1/transactions", tags=["Transactions"])

    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "transfer_system_api",
            "version": __version__,
            "store": system.store.dialect
        }

    return app


def run_server(config: Optional[TransferSystemConfig] = None) -> None:
    """Run the API server with uvicorn"""
    config = config or load_config()
    app = create_app(config=config)
    try:
        uvicorn.run(
            app,
            host=config.api_host,
            port=config.api_port,
            log_level=config.log_level.lower(),
            access_log=False
        )
    finally:
        app.state.system.close()


__all__ = ["create_app", "run_server", "TransferSystem", "get_transfer_system"]
