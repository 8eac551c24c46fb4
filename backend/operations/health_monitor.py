# backend/operations/health_monitor.py

# Liveness check for the voting station: database round trip and free disk.

import shutil
from typing import Dict

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from backend import db


def _check_db() -> Dict:
    try:
        db.session.execute(text("SELECT 1"))
        return {"ok": True, "detail": "database ok"}
    except SQLAlchemyError as e:
        db.session.rollback()
        return {"ok": False, "error": e.__class__.__name__}


def _check_disk(min_free_gb: float, path: str = ".") -> Dict:
    try:
        total, used, free = shutil.disk_usage(path)
    except OSError as e:
        return {"ok": False, "error": e.__class__.__name__, "min_required_gb": min_free_gb}
    free_gb = free / (1024**3)
    return {"ok": free_gb >= min_free_gb, "free_gb": round(free_gb, 2), "min_required_gb": min_free_gb}


def check_health(min_free_gb: float = 0.1) -> Dict:
    """Aggregate overall system health."""
    database = _check_db()
    disk = _check_disk(min_free_gb)
    return {"db": database, "disk": disk, "overall_ok": database["ok"] and disk["ok"]}
