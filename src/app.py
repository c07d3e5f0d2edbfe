"""Storefront FastAPI application.

Multi-domain web server that processes commands synchronously via HTTP.
Each request is wrapped in the correct domain context based on URL prefix.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

import asyncio

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from identity.domain import identity
from shared.auth import build_authenticator
from shared.cache import build_caches
from shared.errors import register_exception_handlers
from shared.logging import get_logger
from shared.monitoring import build_reporter
from shared.ratelimit import build_rate_limiter
from shared.requests import request_id_middleware
from shared.settings import Settings
from storefront.domain import storefront

logger = get_logger(__name__)

# Domains are initialized at module level so uvicorn workers share them.
# PROTEAN_ENV selects the domain.toml overlay.
storefront.init()
identity.init()

_ROUTE_DOMAIN_MAP = {
    "/products": storefront,
    "/categories": storefront,
    "/cart": storefront,
    "/orders": storefront,
    "/customers": identity,
    "/contact": identity,
}


def _resolve_domain(path: str):
    """Return the domain for the given request path, or None."""
    for prefix, domain in _ROUTE_DOMAIN_MAP.items():
        if path.startswith(prefix):
            return domain
    return None


async def domain_context_middleware(request: Request, call_next):
    """Push the correct Protean domain context for each request."""
    domain = _resolve_domain(request.url.path)
    if domain is not None:
        with domain.domain_context():
            response = await call_next(request)
        return response
    # No domain match: health check, docs
    return await call_next(request)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application and the collaborators it shares across requests."""
    from identity.api import contact_router, customer_router
    from identity.contact import build_email_sender
    from storefront.api import cart_router, category_router, order_router, product_router
    from storefront.checkout.placement import OrderPlacement
    from storefront.checkout.transaction import TransactionFactory

    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Storefront API",
        description="Catalogue, cart, checkout and customer accounts",
    )

    app.state.settings = settings
    app.state.authenticator = build_authenticator()
    app.state.rate_limiter = build_rate_limiter()
    app.state.caches = build_caches(default_ttl=settings.cache_ttl)
    app.state.reporter = build_reporter()
    app.state.email_sender = build_email_sender()
    # One lock serializes every write to the store within this process
    app.state.write_lock = asyncio.Lock()
    app.state.transactions = TransactionFactory()
    app.state.placement = OrderPlacement(
        app.state.transactions,
        settings,
        caches=app.state.caches,
        reporter=app.state.reporter,
        lock=app.state.write_lock,
    )

    # Last added runs first: request ids wrap the domain context
    app.middleware("http")(domain_context_middleware)
    app.middleware("http")(request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(product_router)
    app.include_router(category_router)
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(customer_router)
    app.include_router(contact_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "environment": settings.environment,
                "domains": {
                    "storefront": {"name": storefront.name},
                    "identity": {"name": identity.name},
                },
            }
        )

    logger.info("Application created", environment=settings.environment)
    return app


app = create_app()
