import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portal import __version__
from portal.adapters.sqlite.migrator import MigrationError, SQLiteMigrator
from portal.api.deps import get_settings
from portal.app_shell.config import ConfigError, validate_ops_rules
from portal.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError, ConfigError, MigrationError) as e:
        logger.critical("Startup failed: %s", e)
        raise

    yield
    # Shutdown cleanup if needed


app = FastAPI(
    title="Community Portal API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from portal.api.routes import (  # noqa: E402
    communities,
    invites,
    members,
    notifications,
)

app.include_router(invites.router, prefix="/api/invites", tags=["Invites"])
app.include_router(communities.router, prefix="/api/communities", tags=["Communities"])
app.include_router(members.router, prefix="/api/members", tags=["Members"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
