import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Callable

from fastapi import FastAPI

from .config import Settings, get_settings
from .database import Database
from .services import ClaimIssuer, SignInGate
from .utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def attach_services(
    app: FastAPI,
    database: Database,
    settings: Settings,
    clock: Callable[[], datetime] = utcnow,
) -> None:
    """Bind the store handle and the services built on it to ``app.state``."""
    app.state.settings = settings
    app.state.database = database
    app.state.claim_issuer = ClaimIssuer(
        database,
        claim_ttl=timedelta(minutes=settings.claim_ttl_minutes),
        clock=clock,
    )
    app.state.sign_in_gate = SignInGate(
        database,
        gated_provider=settings.gated_provider,
        grace=timedelta(minutes=settings.consume_grace_minutes),
        clock=clock,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    settings = getattr(app.state, "settings", None) or get_settings()
    database = Database.from_settings(settings)
    attach_services(app, database, settings)
    logger.info(f"Invite gate started ({settings.environment})")

    yield

    # Shutdown
    await database.dispose()
