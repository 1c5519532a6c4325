"""
FastAPI application factory.

``create_app`` wires configuration, the session factory, middleware,
exception handlers and routers.  Tests pass their own config and session
factory; ``main`` builds both from ``get_active_config()``.
"""

from __future__ import annotations

from fastapi import FastAPI
from sqlalchemy.orm import Session, sessionmaker

from donation_api.errors import register_exception_handlers
from donation_api.middleware import RequestIDMiddleware
from donation_api.routes import ALL_ROUTERS
from donation_config import PlatformConfig, get_active_config
from donation_config.bridges import configure_logging_from_config, init_engine_from_config
from donation_kernel import __version__
from donation_kernel.db import create_tables, get_session_factory
from donation_kernel.logging_config import get_logger

logger = get_logger("api.app")


def create_app(
    config: PlatformConfig | None = None,
    session_factory: sessionmaker[Session] | None = None,
) -> FastAPI:
    """
    Build the HTTP application.

    When ``session_factory`` is omitted the global engine is initialized
    from ``config.database`` and its tables are created.
    """
    config = config or get_active_config()
    if session_factory is None:
        init_engine_from_config(config)
        create_tables()
        session_factory = get_session_factory()

    app = FastAPI(title="Donation Platform", version=__version__)
    app.state.config = config
    app.state.session_factory = session_factory

    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)
    for router in ALL_ROUTERS:
        app.include_router(router)

    @app.get("/health", tags=["Health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    logger.info("app_created", extra={"config_id": config.config_id})
    return app


def main() -> None:  # pragma: no cover
    import uvicorn

    config = get_active_config()
    configure_logging_from_config(config)
    uvicorn.run(create_app(config), host="0.0.0.0", port=8000, log_config=None)


if __name__ == "__main__":  # pragma: no cover
    main()
