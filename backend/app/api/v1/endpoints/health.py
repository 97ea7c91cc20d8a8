from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.api.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health")

STARTED_AT = time.monotonic()


@router.get("")
def health(db: Session = Depends(get_db)):
    db_status = "connected"
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.warning("Health check: database unreachable", exc_info=True)
        db_status = "disconnected"

    return {
        "status": "ok",
        "database": db_status,
        "uptime": round(time.monotonic() - STARTED_AT, 3),
    }
