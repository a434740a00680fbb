"""Storefront FastAPI application.

Single web server for all bounded contexts. Handlers run synchronously per
request; every business failure surfaces as a ``StorefrontError`` and is
rendered as ``{"error": {"kind", "message", "details"}}``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice.api import admin_router
from catalogue.api import product_router
from identity.api import admin_user_router, auth_router
from identity.tokens import IdentityVerifier
from ordering.api import admin_order_router, cart_router, order_router
from ordering.pricing import PricingPolicy
from shared.config import Config
from shared.exceptions import StorefrontError
from shared.logging import add_context, clear_context, configure_logging
from shared.store import Store, setup_db

logger = structlog.get_logger(__name__)


def create_app(config: Config | None = None, store: Store | None = None) -> FastAPI:
    """Build the application around an explicit configuration and store.

    When no store is given one is created from ``config.database_url`` and
    its schema is created if missing.
    """
    config = config or Config.from_env()
    if store is None:
        store = Store(config.database_url)
        setup_db(store)

    app = FastAPI(
        title="Storefront API",
        description="E-commerce storefront — accounts, catalogue, cart, orders and back-office",
    )

    app.state.config = config
    app.state.store = store
    app.state.verifier = IdentityVerifier.from_config(config)
    app.state.pricing_policy = PricingPolicy.from_config(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind a request id and path to every log line emitted for this request."""
        clear_context()
        add_context(request_id=request.headers.get("X-Request-ID") or str(uuid4()), path=request.url.path)
        response = await call_next(request)
        clear_context()
        return response

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError):
        logger.info(
            "request_rejected",
            method=request.method,
            path=request.url.path,
            kind=exc.kind,
            status_code=exc.status_code,
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_order_router)
    app.include_router(admin_user_router)
    app.include_router(admin_router)

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "environment": config.environment})

    return app


configure_logging()
app = create_app()
