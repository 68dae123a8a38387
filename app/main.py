from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError
import time
from loguru import logger
import uuid
from redis.asyncio import Redis
from prometheus_client import Counter, Histogram, generate_latest
from prometheus_client.openmetrics.exposition import CONTENT_TYPE_LATEST
from fastapi.responses import Response

from app.api import placeholders
from app.api.v1 import auth, registration, professionals
from app.core.config import settings
from app.db.redis import get_pool, close_pool
from app.schemas.common import ApiError, ErrorDetail

REQUEST_COUNT = Counter(
    "app_request_count",
    "Application Request Count",
    ["app_name", "method", "endpoint", "http_status"]
)
REQUEST_LATENCY = Histogram(
    "app_request_latency_seconds",
    "Application Request Latency",
    ["app_name", "method", "endpoint"]
)

APP_LABEL = "gemstone-system"

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for gemstone records, professional profiles and marketplace listings",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _route_label(request: Request) -> str:
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    with logger.contextualize(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"{request.method} {request.url.path} failed: {str(e)}")
            response = JSONResponse(
                status_code=500,
                content=ApiError(message="Internal Server Error").model_dump()
            )

        elapsed = time.perf_counter() - started
        endpoint = _route_label(request)
        REQUEST_LATENCY.labels(APP_LABEL, request.method, endpoint).observe(elapsed)
        REQUEST_COUNT.labels(APP_LABEL, request.method, endpoint, response.status_code).inc()
        logger.info(f"[{request_id}] {request.method} {request.url.path} -> {response.status_code} in {elapsed:.4f}s")

    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    error = ApiError(message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=error.model_dump(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        ErrorDetail(field=".".join(str(part) for part in err["loc"] if part != "body"), message=err["msg"])
        for err in exc.errors()
    ]
    error = ApiError(message="Validation failed", errors=errors)
    return JSONResponse(status_code=422, content=error.model_dump())


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.error(f"Integrity error on {request.method} {request.url.path}: {str(exc.orig)}")
    error = ApiError(
        message="Database constraint violated",
        errors=[ErrorDetail(field="database", message=str(exc.orig))],
    )
    return JSONResponse(status_code=409, content=error.model_dump())


app.include_router(
    placeholders.router,
    prefix="/api",
    tags=["placeholders"]
)

app.include_router(
    auth.router,
    prefix=f"{settings.API_V1_STR}/auth",
    tags=["authentication"]
)

app.include_router(
    registration.router,
    prefix=f"{settings.API_V1_STR}/registration",
    tags=["registration"]
)

app.include_router(
    professionals.router,
    prefix=f"{settings.API_V1_STR}/professionals",
    tags=["professionals"]
)


@app.get("/api/health")
async def health_check():
    return {"status": "ok"}


@app.get("/metrics")
async def metrics():
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@app.on_event("startup")
async def check_redis():
    logger.info(f"Connecting to Redis at {settings.REDIS_HOST}:{settings.REDIS_PORT}...")
    client = Redis(connection_pool=get_pool())
    try:
        await client.ping()
        logger.info("Connected to Redis")
    except Exception as e:
        logger.error(f"Failed to connect to Redis: {str(e)}")
        if settings.ENVIRONMENT == "production":
            raise
        logger.warning("Continuing startup without Redis; rate limits and logout will answer 503")
    finally:
        await client.aclose(close_connection_pool=False)


@app.on_event("shutdown")
async def shutdown_redis_pool():
    await close_pool()
    logger.info("Redis connection pool closed")
