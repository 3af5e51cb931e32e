"""FastAPI application entry point."""
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import models
from .auth import router as auth_router
from .config import get_settings
from .database import engine
from .errors import register_exception_handlers
from .logging_config import setup_logging
from .routers.consumption import router as consumption_router
from .routers.distributors import router as distributors_router
from .routers.properties import router as properties_router
from .routers.users import router as users_router

settings = get_settings()
setup_logging(settings.log_level)
log = structlog.get_logger(__name__)

app = FastAPI(title="LumiTrack Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(distributors_router)
app.include_router(properties_router)
app.include_router(consumption_router)


@app.on_event("startup")
async def on_startup() -> None:
    """Ensure database tables exist."""

    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    log.info("startup_complete", database=engine.url.render_as_string(hide_password=True))


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    """Simple readiness probe for uptime checks."""

    return {"status": "ok"}
