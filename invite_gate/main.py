import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .common import lifespan
from .config import Settings, get_settings
from .routers.invite_endpoints import router as InviteEndpoints
from .routers.sign_in_gate_endpoints import router as SignInGateEndpoints
from .routers.db_endpoints import router as DbEndpoints


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level)

    app = FastAPI(title="Invite Gate", lifespan=lifespan)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(InviteEndpoints)
    app.include_router(SignInGateEndpoints)
    app.include_router(DbEndpoints)
    return app


app = create_app()
