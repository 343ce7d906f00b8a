# taskflow/main.py  (엔트리포인트)
from dotenv import load_dotenv

# db.session이 import 시점에 DATABASE_URL을 읽으므로 가장 먼저 .env 로딩
load_dotenv()

import logging  # noqa: E402
import time  # noqa: E402
import traceback  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from sqlalchemy.exc import IntegrityError  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from taskflow.core.config import settings  # noqa: E402
from taskflow.core.errors import TaskflowError  # noqa: E402
from taskflow.core.logging_config import setup_logging  # noqa: E402
from taskflow.db.session import create_all_tables  # noqa: E402
from taskflow.routers import auth, health, task  # noqa: E402
from taskflow.schemas.common import envelope, error_envelope  # noqa: E402

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.db_auto_create:
        create_all_tables()
        logger.info("tables created (DB_AUTO_CREATE)")
    logger.info("TaskFlow API started (env=%s)", settings.env)
    yield
    logger.info("TaskFlow API stopped")


app = FastAPI(
    title="TaskFlow API",
    version=settings.app_version,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def access_log_middleware(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
    )
    return response


# ──────────────────────────────────────────────────────────────────────────────
# 에러 핸들러: 모든 응답을 {error, message} 형태로
# ──────────────────────────────────────────────────────────────────────────────
@app.exception_handler(TaskflowError)
async def taskflow_error_handler(request: Request, exc: TaskflowError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


def _flatten_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        msg = err.get("msg", "invalid value")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return ", ".join(messages) or "invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content=error_envelope(_flatten_validation_errors(exc)))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        message = f"route not found: {request.url.path}"
    else:
        message = str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(message),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=400, content=error_envelope("duplicate data"))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    extra = {}
    if settings.is_dev:
        extra["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse(status_code=500, content=error_envelope("internal server error", **extra))


# 라우터 등록
app.include_router(health.router)
app.include_router(auth.auth_router)
app.include_router(task.router)


@app.get("/")
def root():
    return envelope(
        "welcome to the TaskFlow API",
        {
            "version": settings.app_version,
            "endpoints": {"auth": "/api/auth", "tasks": "/api/tasks", "health": "/api/health"},
        },
    )


def run() -> None:
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
