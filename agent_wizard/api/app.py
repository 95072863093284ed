from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agent_wizard.api.agents import router as agents_router
from agent_wizard.wizard import AgentCreationService, build_agent_creation_service

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization"]
CORS_MAX_AGE = 3600


def create_app(service: AgentCreationService | None = None) -> FastAPI:
    """Build the wizard API.

    Without an injected ``service`` one is built at startup from ``configs/config.yaml`` and
    the environment. The session store is cleared at shutdown either way.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "wizard_service", None) is None:
            app.state.wizard_service = build_agent_creation_service()
            logger.info("Wizard service started")
        yield
        app.state.wizard_service.store.clear()
        logger.info("Wizard sessions cleared")

    app = FastAPI(title="Agent Wizard", lifespan=lifespan)
    app.state.wizard_service = service
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        max_age=CORS_MAX_AGE,
    )
    app.include_router(agents_router, tags=["agents"])

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
