from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI

from estatehub.db.init_db import init_db
from estatehub.db.session import engine
from estatehub.errors import register_exception_handlers
from estatehub.gateway import check_policy_coverage
from estatehub.logging_config import configure_app_logging
from estatehub.policy import ScopingPolicy
from estatehub.routers import auth, health, maintenance, messages, notifications, payments, properties, units, users
from estatehub.security.dependencies import enforce_authentication
from estatehub.security.tokens import TokenConfig, TokenService
from estatehub.settings import get_settings

logger = logging.getLogger(__name__)


def create_app(*, init_database: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level)
        logger.info("App startup beginning")

        policy = ScopingPolicy.from_yaml(settings.resolved_policy_path())
        check_policy_coverage(policy)
        app.state.policy = policy
        logger.info("Loaded scoping policy: %s", settings.resolved_policy_path())

        app.state.token_service = TokenService(TokenConfig.from_settings(settings))

        if init_database:
            init_db(engine, settings)
            logger.info("Database initialized (tables ensured)")

        yield
        # Shutdown: nothing held between requests.

    # Global dependency: every route is authenticated unless the rule table marks it public.
    app = FastAPI(title="estatehub", dependencies=[Depends(enforce_authentication)], lifespan=lifespan)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(properties.router)
    app.include_router(units.router)
    app.include_router(payments.router)
    app.include_router(maintenance.router)
    app.include_router(messages.router)
    app.include_router(notifications.router)

    return app


app = create_app()
