# ============================================================================
# FILE: fieldbook/api/v1/dashboard/time_blocks.py
# Time block management - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import Optional
from uuid import UUID
import logging

from fieldbook.config.database import get_db
from fieldbook.schemas.scheduling import TimeBlockCreate, TimeBlockUpdate, TimeBlockResponse
from fieldbook.services.business.business_service import BusinessService
from fieldbook.services.time_block.time_block_service import TimeBlockService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dashboard-time-blocks"])


def _require_business(db: Session, business_id: UUID):
    if not BusinessService.get_business(db, business_id):
        raise HTTPException(status_code=404, detail="Business not found")


@router.get("/businesses/{business_id}/time-blocks")
def list_time_blocks(
        business_id: UUID,
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        db: Session = Depends(get_db)
):
    """
    Time blocks for the business.
    With start_date and end_date, recurring blocks are expanded into occurrences.
    """
    _require_business(db, business_id)

    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="end_date must not be before start_date")

    blocks = TimeBlockService.list_time_blocks(db, business_id, start_date, end_date)
    return {
        "business_id": str(business_id),
        "expanded": bool(start_date and end_date),
        "blocks": blocks,
    }


@router.post("/businesses/{business_id}/time-blocks", response_model=TimeBlockResponse, status_code=201)
def create_time_block(
        business_id: UUID,
        data: TimeBlockCreate,
        db: Session = Depends(get_db)
):
    _require_business(db, business_id)

    try:
        block = TimeBlockService.create_time_block(db, business_id, data)
    except Exception as e:
        logger.error(f"Error creating time block: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create time block")

    return TimeBlockResponse(**block.to_dict())


@router.patch("/businesses/{business_id}/time-blocks/{block_id}", response_model=TimeBlockResponse)
def update_time_block(
        business_id: UUID,
        block_id: UUID,
        data: TimeBlockUpdate,
        db: Session = Depends(get_db)
):
    try:
        block = TimeBlockService.update_time_block(db, business_id, block_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating time block {block_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update time block")

    if not block:
        raise HTTPException(status_code=404, detail="Time block not found")

    return TimeBlockResponse(**block.to_dict())


@router.delete("/businesses/{business_id}/time-blocks/{block_id}")
def delete_time_block(
        business_id: UUID,
        block_id: UUID,
        db: Session = Depends(get_db)
):
    if not TimeBlockService.delete_time_block(db, business_id, block_id):
        raise HTTPException(status_code=404, detail="Time block not found")

    return {"deleted": True, "id": str(block_id)}
