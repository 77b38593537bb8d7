"""Event Registrations Web Service."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.errors import (
    RegistrationError,
    registration_error_handler,
    request_validation_handler,
)
from app.core.scheduler import shutdown_scheduler, start_scheduler
from app.routes import events, notifications, realtime, registrations, users

# Configure logging
log_dir = Path.home() / ".logs" / "registrations"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Event Registrations service")
    create_db_and_tables()
    start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("Event Registrations service shut down")


app = FastAPI(
    title=settings.app_name,
    description="Event registration, approval and participation history service",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RegistrationError, registration_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)

# Include routers
app.include_router(users.router)
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(notifications.router)
app.include_router(realtime.router)


@app.get("/")
async def root(request: Request):
    """Redirect root to the API docs."""
    rp = request.scope.get("root_path", "")
    return RedirectResponse(f"{rp}/docs")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}
