import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI

from people_finder import __version__
from people_finder.api.deps import get_registry, get_rules, get_settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules on startup (fail-fast)
    try:
        get_rules()
        print(f"INFO: Rules loaded from {settings.rules_path}")
    except Exception as e:
        print(f"CRITICAL: Rules load failed: {e}", file=sys.stderr)
        sys.exit(1)

    yield

    # Stop every live machine so no timer thread outlives the app
    get_registry().close_all()


app = FastAPI(
    title="People Finder API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from people_finder.api.routes import people  # noqa: E402

app.include_router(people.router, prefix="/api", tags=["People"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
