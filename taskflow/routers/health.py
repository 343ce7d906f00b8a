# taskflow/routers/health.py
import logging

from fastapi import APIRouter
from sqlmodel import text

from taskflow.core.clock import as_utc, utcnow
from taskflow.core.errors import TaskflowError
from taskflow.db import session as db_session
from taskflow.schemas.common import envelope

log = logging.getLogger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("")
def health_app():
    return envelope(
        "server is running",
        {"status": "OK", "timestamp": as_utc(utcnow()).isoformat()},
    )


@router.get("/db")
def health_db():
    # Migration is a deployment concern. Runtime only verifies DB connectivity.
    try:
        with db_session.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        log.exception("database health check failed")
        raise TaskflowError("database connection failed")
    return envelope("database is reachable", {"status": "OK"})
