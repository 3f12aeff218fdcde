import logging
import random
import time
import traceback
import uuid
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from drumfeed.api.schemas import (
    HealthResponse,
    IndexResponse,
    MessageResponse,
    SnapshotResponse,
)
from drumfeed.config import ServiceSettings, load_settings
from drumfeed.errors import InvalidCountError, SnapshotGenerationError
from drumfeed.store.snapshot_store import SnapshotStore
from drumfeed.telemetry import (
    emit_exception_telemetry,
    emit_snapshot_telemetry,
    init_telemetry,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

access_logger = logging.getLogger("drumfeed.access")
logger = logging.getLogger("drumfeed.api")

tags_metadata = [
    {
        "name": "Records",
        "description": "Drum record snapshots. Each call **evolves** the stored snapshot.",
    },
    {
        "name": "System",
        "description": "Health checks, reset and capability description.",
    },
]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def configure_logging(settings: ServiceSettings):
    logging.basicConfig(
        filename=settings.request_log_file,
        level=getattr(logging, settings.log_level, logging.INFO),
        format=LOG_FORMAT,
    )


def parse_count(raw: str, max_records: int) -> int:
    """Accepts decimal integers in [1, max_records]; anything else is rejected."""
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidCountError(raw, max_records)
    # Bounded before int() so huge digit strings never get converted
    if len(raw.lstrip("0")) > len(str(max_records)):
        raise InvalidCountError(raw, max_records)
    count = int(raw)
    if count < 1 or count > max_records:
        raise InvalidCountError(raw, max_records)
    return count


def create_app(
    settings: Optional[ServiceSettings] = None,
    store: Optional[SnapshotStore] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """
    Composition root.

    Owns the one SnapshotStore and the one random.Random for this
    process. The store's lock serializes every read -> evolve -> write,
    and every use of `rng` happens inside it.
    """
    settings = settings or load_settings()
    store = store if store is not None else SnapshotStore()
    rng = rng or random.Random(settings.random_seed)

    configure_logging(settings)
    init_telemetry()

    app = FastAPI(
        title="Oracle Data Provider",
        description="""
    **Mock drum record feed** for downstream testing.

    * **First call:** synthesizes N fresh drum records.
    * **Later calls:** evolve the stored snapshot (records dropped, added and edited).
    * **Reset:** clears the stored snapshot.
    """,
        version="1.0.0",
        openapi_tags=tags_metadata,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.rng = rng

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length", "X-Request-Id"],
        max_age=settings.cors_max_age,
        allow_credentials=True,
    )

    # --- MIDDLEWARE: ACCESS LOG ---
    @app.middleware("http")
    async def access_log_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        client = request.client.host if request.client else "-"
        access_logger.info(
            f"METHOD={request.method} PATH={request.url.path} "
            f"STATUS={response.status_code} CLIENT={client} "
            f"DURATION={process_time:.4f}s"
        )
        return response

    # --- ERROR HANDLERS ---
    @app.exception_handler(InvalidCountError)
    async def invalid_count_handler(request: Request, exc: InvalidCountError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(SnapshotGenerationError)
    async def generation_error_handler(request: Request, exc: SnapshotGenerationError):
        logger.error(f"GENERATION_ERROR: {exc}")
        emit_exception_telemetry(exc, failure_stage="generation")
        content = {"error": "Failed to generate drum records"}
        if not settings.is_production:
            content["details"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = "Not Found" if exc.status_code == 404 else str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"status": exc.status_code, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        timestamp = utc_timestamp()

        logger.error(f"[Error ID: {error_id}] {exc}")
        if settings.is_development:
            logger.error(f"[Error ID: {error_id}] Stack trace:\n{traceback.format_exc()}")
        emit_exception_telemetry(exc, failure_stage="unhandled")

        if settings.is_production:
            error = {"message": "Internal Server Error", "id": error_id, "timestamp": timestamp}
        else:
            error = {
                "message": str(exc),
                "stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
                "id": error_id,
                "timestamp": timestamp,
            }
        return JSONResponse(status_code=500, content={"error": error})

    # --- ENDPOINTS ---
    # Fixed paths are registered before /{count} so they win the match.

    @app.get("/", response_model=IndexResponse, tags=["System"])
    def index():
        return {
            "message": "Oracle Data Provider API",
            "endpoints": {
                "GET /{N}": "Get N drum records with random modifications",
                "DELETE /reset": "Clear the stored snapshot",
                "GET /health": "Service status and stored record count",
                "Examples": [
                    "GET /10 - Returns 10 drum records",
                    "GET /50 - Returns 50 drum records",
                ],
            },
        }

    @app.get("/health", response_model=HealthResponse, tags=["System"])
    def health():
        return {
            "status": "healthy",
            "storedRecordsCount": store.size(),
            "timestamp": utc_timestamp(),
        }

    @app.delete("/reset", response_model=MessageResponse, tags=["System"])
    def reset():
        store.reset()
        return {"message": "Stored records cleared"}

    @app.get("/{count}", response_model=SnapshotResponse, tags=["Records"])
    def get_records(count: str):
        """
        Returns `count` drum records. The first call synthesizes them;
        later calls evolve the stored snapshot toward `count`.
        """
        target = parse_count(count, settings.max_records_per_request)

        start_time = time.perf_counter()
        result = store.advance(target, rng)
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        emit_snapshot_telemetry(
            generation_latency_ms=latency_ms,
            record_count=len(result.records),
            snapshot_mode=result.mode,
        )

        return {
            "count": len(result.records),
            "timestamp": result.generated_at.isoformat().replace("+00:00", "Z"),
            "data": [record.to_wire() for record in result.records],
        }

    return app


app = create_app()
