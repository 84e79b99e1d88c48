# taskhub/routers/ops.py
# PURPOSE: /health, /live, /ready probes for orchestrators and load balancers.

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import store_db
from ..db import get_db

router = APIRouter(tags=["ops"], include_in_schema=False)


@router.get("/health")
def health():
    """Simple healthcheck endpoint."""
    return {"status": "ok"}


@router.get("/live")
def live():
    return {"status": "live"}


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    # 503 through the StorageUnavailable handler when the DB is down
    store_db.ping(db)
    return {"status": "ready"}
