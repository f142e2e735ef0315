# covershift/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from covershift.core.config import get_settings
from covershift.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from covershift.models import profile as _profile_models  # noqa: F401
from covershift.models import job as _job_models  # noqa: F401
from covershift.models import availability as _availability_models  # noqa: F401
from covershift.models import notification as _notification_models  # noqa: F401

# Routers
from covershift.routers.availability import router as availability_router
from covershift.routers.gate import router as gate_router
from covershift.routers.jobs import router as jobs_router
from covershift.routers.notifications import router as notifications_router
from covershift.routers.profiles import router as profiles_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
    """
    logger.info("Startup: connecting to the database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "CoverShift API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://[::1]:3000",
    settings.APP_ORIGIN,
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=sorted(set(origins)),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(profiles_router, prefix=settings.API_V1_STR)
app.include_router(gate_router, prefix=settings.API_V1_STR)
app.include_router(jobs_router, prefix=settings.API_V1_STR)
app.include_router(availability_router, prefix=settings.API_V1_STR)
app.include_router(notifications_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "covershift-backend"}
