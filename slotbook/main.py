from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request, Security, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator

from slotbook.base.config import settings
from slotbook.base.error_handlers import register_exception_handlers
from slotbook.base.logging_config import app_logger as logger
from slotbook.db.session import init_db
from slotbook.routers import scheduling

# --- API key header config ---
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(key: str = Security(api_key_header)):
    if settings.ENABLE_API_KEY_SECURITY and key != settings.API_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or missing API key")


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info(f"[Startup] {settings.PROJECT_NAME} ready (calendar backend: {settings.CALENDAR_BACKEND})")
    yield


# --- FastAPI app instance ---
app = FastAPI(
    title="Slotbook Scheduling API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# --- CORS config ---
origins = [
    "http://localhost:3000",     # Local frontend dev
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- Prometheus metrics ---
Instrumentator().instrument(app).expose(app)


# --- Logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"[Request] {request.method} {request.url.path}")
    response = await call_next(request)
    logger.info(f"[Response] {response.status_code} for {request.url.path}")
    return response


# --- Exception handlers ---
register_exception_handlers(app)

# --- API Routers ---
app.include_router(
    scheduling.router,
    prefix="/scheduling",
    dependencies=[Depends(verify_api_key)],
)


# --- System endpoints ---
@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}


@app.get("/version", tags=["System"])
def version_check():
    return {
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
        "calendar_backend": settings.CALENDAR_BACKEND,
    }
