from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from casebank.api.deps import db_session
from casebank.repositories.stored_file_repository import StoredFileRepository

router = APIRouter(tags=["health"])
PROBE_COUNTER = Counter("casebank_health_checks_total", "Health checks served", ["check"])
STAGED_FILES_GAUGE = Gauge("casebank_staged_files", "Restored files still waiting to be relinked")


@router.get("/health/live")
async def health_live():
    PROBE_COUNTER.labels(check="live").inc()
    return {"status": "ok"}


@router.get("/health/ready")
async def health_ready(db: AsyncSession = Depends(db_session)):
    """Ready once the database answers; also reports the staged file backlog."""
    PROBE_COUNTER.labels(check="ready").inc()
    staged = await StoredFileRepository(db).count_all_staged()
    STAGED_FILES_GAUGE.set(staged)
    return {"status": "ready", "stagedFiles": staged}


@router.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    return PlainTextResponse(generate_latest().decode("utf-8"), media_type=CONTENT_TYPE_LATEST)
