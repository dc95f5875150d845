"""Health checks for the scheduling API and the stores it books against"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session
import logging

from fieldbook.config.database import get_db
from fieldbook.config.redis import get_redis

logger = logging.getLogger(__name__)
health_router = APIRouter()

SERVICE_NAME = "fieldbook-scheduling"


def check_database(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
        return "healthy"
    except Exception as e:
        logger.warning(f"Database health check failed: {e}")
        return f"unhealthy: {e}"


async def check_booking_locks() -> str:
    try:
        redis_client = await get_redis()
        await redis_client.ping()
        return "healthy"
    except Exception as e:
        logger.warning(f"Redis health check failed: {e}")
        return f"unhealthy: {e}"


@health_router.get("/")
async def health_check():
    """Liveness only"""
    return {"status": "healthy", "service": SERVICE_NAME}


@health_router.get("/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """
    Availability reads need the database; bookings additionally need Redis
    for the per-business lock. A 503 is returned only when reads are down.
    """
    database = check_database(db)
    booking_locks = await check_booking_locks()

    can_read = database == "healthy"
    can_book = can_read and booking_locks == "healthy"

    body = {
        "service": SERVICE_NAME,
        "checks": {"database": database, "booking_locks": booking_locks},
        "availability": "up" if can_read else "down",
        "bookings": "up" if can_book else "down",
        "overall": "healthy" if can_book else "degraded",
    }
    return JSONResponse(status_code=200 if can_read else 503, content=body)
