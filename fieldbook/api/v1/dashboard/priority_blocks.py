# ============================================================================
# FILE: fieldbook/api/v1/dashboard/priority_blocks.py
# Priority block management - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
import logging

from fieldbook.config.database import get_db
from fieldbook.schemas.scheduling import (
    PriorityBlockCreate,
    PriorityBlockUpdate,
    PriorityBlockResponse,
)
from fieldbook.services.business.business_service import BusinessService
from fieldbook.services.priority_block.priority_block_service import PriorityBlockService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["dashboard-priority-blocks"])


@router.get("/businesses/{business_id}/priority-blocks", response_model=List[PriorityBlockResponse])
def list_priority_blocks(
        business_id: UUID,
        db: Session = Depends(get_db)
):
    if not BusinessService.get_business(db, business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    blocks = PriorityBlockService.list_priority_blocks(db, business_id)
    return [PriorityBlockResponse(**block.to_dict()) for block in blocks]


@router.post(
    "/businesses/{business_id}/priority-blocks",
    response_model=PriorityBlockResponse,
    status_code=201
)
def create_priority_block(
        business_id: UUID,
        data: PriorityBlockCreate,
        db: Session = Depends(get_db)
):
    """Reserve a weekly window for a customer segment"""
    if not BusinessService.get_business(db, business_id):
        raise HTTPException(status_code=404, detail="Business not found")

    try:
        block = PriorityBlockService.create_priority_block(db, business_id, data)
    except Exception as e:
        logger.error(f"Error creating priority block: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create priority block")

    return PriorityBlockResponse(**block.to_dict())


@router.patch(
    "/businesses/{business_id}/priority-blocks/{block_id}",
    response_model=PriorityBlockResponse
)
def update_priority_block(
        business_id: UUID,
        block_id: UUID,
        data: PriorityBlockUpdate,
        db: Session = Depends(get_db)
):
    try:
        block = PriorityBlockService.update_priority_block(db, business_id, block_id, data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Error updating priority block {block_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to update priority block")

    if not block:
        raise HTTPException(status_code=404, detail="Priority block not found")

    return PriorityBlockResponse(**block.to_dict())


@router.delete("/businesses/{business_id}/priority-blocks/{block_id}")
def delete_priority_block(
        business_id: UUID,
        block_id: UUID,
        db: Session = Depends(get_db)
):
    if not PriorityBlockService.delete_priority_block(db, business_id, block_id):
        raise HTTPException(status_code=404, detail="Priority block not found")

    return {"deleted": True, "id": str(block_id)}
