# fieldbook/services/priority_block/priority_block_service.py
"""Service for managing priority time blocks"""
from typing import List, Optional
from uuid import uuid4
from sqlalchemy.orm import Session
import logging

from fieldbook.models.priority_block import PriorityTimeBlock
from fieldbook.schemas.scheduling import PriorityBlockCreate, PriorityBlockUpdate
from fieldbook.services.availability.hours import parse_time_of_day
from fieldbook.utils.ids import to_uuid

logger = logging.getLogger(__name__)


class PriorityBlockService:
    """Handles priority block operations"""

    @staticmethod
    def list_priority_blocks(db: Session, business_id) -> List[PriorityTimeBlock]:
        return db.query(PriorityTimeBlock).filter(
            PriorityTimeBlock.business_id == to_uuid(business_id)
        ).order_by(PriorityTimeBlock.created_at.desc()).all()

    @staticmethod
    def get_priority_block(db: Session, business_id, block_id) -> Optional[PriorityTimeBlock]:
        return db.query(PriorityTimeBlock).filter(
            PriorityTimeBlock.id == to_uuid(block_id),
            PriorityTimeBlock.business_id == to_uuid(business_id)
        ).first()

    @staticmethod
    def create_priority_block(db: Session, business_id, data: PriorityBlockCreate) -> PriorityTimeBlock:
        block = PriorityTimeBlock(
            id=uuid4(),
            business_id=to_uuid(business_id),
            name=data.name,
            days=[day.value for day in data.days],
            start_time=data.start_time,
            end_time=data.end_time,
            priority_for=data.priority_for.value,
            fallback_hours=data.fallback_hours,
            enabled=data.enabled,
        )

        db.add(block)
        db.commit()
        db.refresh(block)

        logger.info(
            f"Created priority block {block.id} for business {business_id}: "
            f"{block.priority_for} on {block.days} {block.start_time}-{block.end_time}"
        )
        return block

    @staticmethod
    def update_priority_block(
            db: Session,
            business_id,
            block_id,
            data: PriorityBlockUpdate
    ) -> Optional[PriorityTimeBlock]:
        """
        Apply a partial update. Returns None when the block does not exist.
        Raises ValueError when the merged window is invalid.
        """
        block = PriorityBlockService.get_priority_block(db, business_id, block_id)
        if not block:
            return None

        updates = data.model_dump(exclude_unset=True)
        for field, value in updates.items():
            if value is None:
                continue
            if field == "days":
                value = [day.value for day in value]
            elif field == "priority_for":
                value = value.value
            setattr(block, field, value)

        if parse_time_of_day(block.start_time) >= parse_time_of_day(block.end_time):
            db.rollback()
            raise ValueError("start_time must be before end_time")

        db.commit()
        db.refresh(block)

        logger.info(f"Updated priority block {block.id}: {sorted(updates)}")
        return block

    @staticmethod
    def delete_priority_block(db: Session, business_id, block_id) -> bool:
        block = PriorityBlockService.get_priority_block(db, business_id, block_id)
        if not block:
            return False

        db.delete(block)
        db.commit()

        logger.info(f"Deleted priority block {block_id} for business {business_id}")
        return True
