from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from finance_tracker.config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from finance_tracker.database import create_tables, dispose_engine, get_session_factory
from finance_tracker.errors import NotFoundError, StoreUnavailable, ValidationError
from finance_tracker.routes import api_router
from finance_tracker.services.seed_service import seed_demo_data
from finance_tracker.services.validation import describe_errors
from finance_tracker.stores.json_store import JsonFileStore
from finance_tracker.stores.sql_store import SqlRecordStore

logger = logging.getLogger(__name__)


def _seed_demo_data(app: FastAPI) -> None:
    json_store = getattr(app.state, "json_store", None)
    if json_store is not None:
        seed_demo_data(json_store)
        return
    db = get_session_factory()()
    try:
        seed_demo_data(SqlRecordStore(db))
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.storage_backend == "json":
        logger.info(f"Using JSON file storage at {settings.data_file}")
        app.state.json_store = JsonFileStore(settings.data_file)
    elif settings.auto_create_tables:
        # Guarded dev helper; prefer running scripts/reset_database.py
        logger.warning("AUTO_CREATE_TABLES is enabled; creating tables via SQLAlchemy metadata.")
        create_tables()

    if settings.seed_demo_data:
        _seed_demo_data(app)

    yield

    dispose_engine()


app = FastAPI(
    title="Finance Tracker API",
    description="API for tracking income, expenses, budgets and running balances",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.api_docs_enabled else None,
    redoc_url="/redoc" if settings.api_docs_enabled else None,
    openapi_url="/openapi.json" if settings.api_docs_enabled else None,
)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=describe_errors(exc.errors()).to_dict())


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"message": exc.message})


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable):
    logger.error(f"Store unavailable for {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=503, content={"message": exc.message})


# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api")


@app.get("/")
def root():
    payload = {"message": "Finance Tracker API"}
    if settings.api_docs_enabled:
        payload["docs"] = "/docs"
    return payload


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "healthy"}
