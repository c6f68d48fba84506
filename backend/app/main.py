"""PromptAtrium API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PromptAtriumError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: cleaner startup/shutdown pairing
    - Error handlers live in api/error_handlers.py; this module only wires the app
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.infrastructure import database
from app.infrastructure.observability import setup_logging
from app.config import get_settings
from app.api.error_handlers import register_error_handlers
from app.api.routes import (
    achievements, admin, character_presets, collections, communities, credits,
    disputes, health, integrations, invites, marketplace, notes, prompt_miner,
    prompts, quick_prompt, tools, users, webhooks,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager = database.init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("PromptAtrium API started")
    yield
    await manager.dispose()
    logger.info("PromptAtrium API shutting down")


app = FastAPI(
    title="PromptAtrium API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(communities.router)
app.include_router(invites.router)
app.include_router(prompts.router)
app.include_router(collections.router)
app.include_router(character_presets.router)
app.include_router(credits.router)
app.include_router(achievements.router)
app.include_router(marketplace.router)
app.include_router(disputes.router)
app.include_router(admin.router)
app.include_router(webhooks.router)
app.include_router(prompt_miner.router)
app.include_router(quick_prompt.router)
app.include_router(tools.router)
app.include_router(notes.router)
app.include_router(integrations.router)

# React build served in production; mounted after API routes so /api/* wins
if os.path.isdir("static"):
    app.mount("/", StaticFiles(directory="static", html=True), name="static")
