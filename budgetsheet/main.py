import logging

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import errors
from .core.config import Settings, get_settings
from .core.logging import init_logging, request_context_middleware
from .core.security import IdentityCache, get_current_identity
from .routers import (
    auth,
    budget,
    budget_goals,
    categories,
    currency,
    health,
    savings_goals,
    transactions,
)

API_PREFIX = "/api"


def create_app(settings_override: Settings | None = None) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., memory backend). Falls back to cached
    get_settings().
    """
    settings = settings_override or get_settings()
    settings.init_post_load()
    # Initialize logging early
    init_logging(debug=settings.debug)
    if settings.bypass_auth and not settings.dev_bypass_active:
        logging.getLogger("budgetsheet").warning(
            "bypass_auth ignored in production environment"
        )

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.identity_cache = IdentityCache(settings.identity_cache_ttl_seconds)
    # memory backend: one in-process store per caller email
    app.state.memory_stores = {}

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error handlers
    app.add_exception_handler(errors.BudgetSheetError, errors.budgetsheet_error_handler)
    app.add_exception_handler(StarletteHTTPException, errors.http_error_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers. auth, currency and health are public.
    protected = [Depends(get_current_identity)]
    app.include_router(health.router, prefix=API_PREFIX)
    app.include_router(auth.router, prefix=API_PREFIX)
    app.include_router(currency.router, prefix=API_PREFIX)
    app.include_router(categories.router, prefix=API_PREFIX, dependencies=protected)
    app.include_router(transactions.router, prefix=API_PREFIX, dependencies=protected)
    app.include_router(budget_goals.router, prefix=API_PREFIX, dependencies=protected)
    app.include_router(savings_goals.router, prefix=API_PREFIX, dependencies=protected)
    app.include_router(budget.router, prefix=API_PREFIX, dependencies=protected)

    @app.get("/")
    async def root():
        return {"message": "Budget Sheet API", "version": settings.version}

    return app


app = create_app()
