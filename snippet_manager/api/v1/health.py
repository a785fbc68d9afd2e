import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from snippet_manager.api.deps import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    summary="Health check",
    description="Report service liveness and database connectivity.",
)
async def health_check(db: AsyncSession = Depends(get_db_session)):
    db_status = "connected"
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error("Health check: database unreachable: %s", e)
        db_status = f"error: {e}"

    return {"status": "ok", "database": db_status}
