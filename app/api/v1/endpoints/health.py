import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import redis

from app.db.dependencies import get_db
from app.core.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    database: str
    redis: str


@router.get("", response_model=HealthResponse)
def health_check(db: Session = Depends(get_db)):
    """Check health of the database and the Celery broker."""
    settings = get_settings()

    # Database check
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"

    # Redis check
    try:
        r = redis.from_url(settings.redis_url, socket_connect_timeout=2)
        r.ping()
        redis_status = "healthy"
    except redis.RedisError as e:
        redis_status = f"unhealthy: {str(e)}"

    if db_status != "healthy" or redis_status != "healthy":
        logger.warning(f"Health check degraded: database={db_status} redis={redis_status}")

    return HealthResponse(
        status="healthy" if db_status == redis_status == "healthy" else "degraded",
        database=db_status,
        redis=redis_status,
    )


@router.get("/ready", response_model=dict)
def readiness_check(db: Session = Depends(get_db)):
    """Kubernetes readiness probe."""
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ready"}
    except SQLAlchemyError:
        return {"status": "not_ready"}


@router.get("/live", response_model=dict)
def liveness_check():
    """Kubernetes liveness probe."""
    return {"status": "alive"}
