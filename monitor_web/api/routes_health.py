from __future__ import annotations

import time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.orm import Session

from monitor_web.db.session import get_db

router = APIRouter(tags=["health"])


def _check_db(db: Session) -> bool:
    db.execute(text("SELECT 1"))
    return True


@router.get("/healthz")
def healthz(db: Annotated[Session, Depends(get_db)]) -> dict[str, object]:
    """Readiness probe: the alert store must answer a trivial query."""
    start = time.time()
    try:
        _check_db(db)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=503, detail="Database connectivity check failed") from exc
    return {"status": "ok", "db": True, "latency_ms": int((time.time() - start) * 1000)}


@router.get("/live")
def live() -> dict[str, str]:
    """Liveness endpoint (no dependencies)."""
    return {"status": "alive"}
