# Health probes for load balancers and container orchestration
import os
import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from svgshare.core.database import get_db
from svgshare.core.storage import get_local_storage_root, is_oss_configured

router = APIRouter()


def _timed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _check_database(db: Session) -> dict:
    start = time.perf_counter()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        return {"status": f"unhealthy: {e}", "latency_ms": _timed_ms(start)}
    return {"status": "healthy", "latency_ms": _timed_ms(start)}


def _check_storage() -> dict:
    if is_oss_configured():
        # Bucket access is only exercised by real uploads
        return {"backend": "oss", "status": "configured"}

    root = get_local_storage_root()
    if root.exists() and not os.access(root, os.W_OK):
        return {"backend": "local", "status": f"unhealthy: {root} is not writable"}
    return {"backend": "local", "status": "healthy"}


@router.get("")
async def health_check(db: Session = Depends(get_db)):
    """Database and storage status; 200 even when degraded so monitors can read the body."""
    start = time.perf_counter()
    checks = {
        "database": _check_database(db),
        "storage": _check_storage(),
    }
    healthy = all(not check["status"].startswith("unhealthy") for check in checks.values())
    return {
        "status": "healthy" if healthy else "degraded",
        "timestamp": time.time(),
        "checks": checks,
        "latency_ms": _timed_ms(start),
    }


@router.get("/ready")
async def readiness_check(db: Session = Depends(get_db)):
    if _check_database(db)["status"] != "healthy":
        raise HTTPException(status_code=503, detail="Service not ready")
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    return {"alive": True}
