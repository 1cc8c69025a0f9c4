"""
Health Check Endpoints

- /health/live - Liveness check (is process running)
- /health/ready - Readiness check (can we reach the database)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from sqlalchemy import text
from datetime import datetime, timezone
import time

from ..database import get_db

router = APIRouter(prefix="/health", tags=["Health"])


def get_db_health(db: Session) -> dict:
    """Check database connectivity and latency"""
    try:
        start = time.time()
        db.execute(text("SELECT 1"))
        latency_ms = (time.time() - start) * 1000
        return {
            "status": "up",
            "latency_ms": round(latency_ms, 2),
            "type": db.get_bind().dialect.name
        }
    except Exception as e:
        return {
            "status": "down",
            "error": str(e)[:100]
        }


@router.get("")
@router.get("/")
def simple_health_check():
    return {"status": "healthy"}


@router.get("/live")
def liveness_check():
    """Liveness probe - is the process running?"""
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """Readiness probe - 503 when the database is unreachable"""
    db_health = get_db_health(db)

    if db_health["status"] == "up":
        return {
            "status": "ready",
            "database": db_health,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return JSONResponse(
        status_code=503,
        content={
            "error": "database_unavailable",
            "status": "not_ready",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    )
