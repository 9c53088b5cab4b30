from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from scheduler.base.config import settings
from scheduler.base.error_handlers import register_exception_handlers
from scheduler.base.logging_config import app_logger as logger
from scheduler.routers import appointments
from scheduler.routers.appointments import get_slot_engine


# --- Startup: build the calendar once before serving traffic ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    engine = app.dependency_overrides.get(get_slot_engine, get_slot_engine)()
    engine.initialize()
    logger.info(f"🗓️ Calendar ready: {len(engine)} slots, environment={settings.ENVIRONMENT}")
    if settings.SHOW_CALENDAR_ON_CHANGE:
        engine.show_calendar()
    yield


# --- FastAPI app instance ---
app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# --- CORS config ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Prometheus metrics ---
Instrumentator().instrument(app).expose(app)

# --- Logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"📥 {request.method} request to {request.url}")
    response = await call_next(request)
    logger.info(f"📤 Response: {response.status_code} for {request.url}")
    return response

# --- Exception handlers ---
register_exception_handlers(app)

# --- API Routers ---
app.include_router(appointments.router, prefix="/api/scheduler", tags=["Scheduler"])

# --- System endpoints ---
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}

@app.get("/version", tags=["System"])
def version_check():
    return {
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "slot_duration_minutes": settings.SLOT_DURATION_MINUTES,
        "day_start": settings.DAY_START.strftime("%H:%M"),
        "day_end": settings.DAY_END.strftime("%H:%M"),
        "horizon_days": settings.HORIZON_DAYS,
    }
