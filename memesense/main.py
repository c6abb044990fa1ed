"""MemeSense - Backend API"""
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import router as api_router
from .config import API_HOST, API_PORT
from .services import SessionService, close_classifier, get_classifier

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - classifier setup, sessions and cleanup."""
    logger.info("server_starting", version=__version__)

    classifier = get_classifier()
    app.state.session_service = SessionService(classifier)
    logger.info("classifier_initialized", classifier=classifier.name)

    yield

    # Cleanup
    await app.state.session_service.shutdown()
    await close_classifier()
    logger.info("server_stopping")


app = FastAPI(
    title="MemeSense",
    description="Content-safety classification of images",
    version=__version__,
    lifespan=lifespan,
)

# CORS for local frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


def run() -> None:
    """Serve the API (console script entry point)."""
    uvicorn.run(app, host=API_HOST, port=API_PORT)
