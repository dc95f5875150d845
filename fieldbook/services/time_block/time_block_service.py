# fieldbook/services/time_block/time_block_service.py
"""Service for managing time blocks (personal time, holidays, blackouts)"""
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional
from uuid import uuid4
from sqlalchemy.orm import Session
import logging

from fieldbook.config.settings import get_settings
from fieldbook.models.time_block import TimeBlock
from fieldbook.schemas.scheduling import TimeBlockCreate, TimeBlockUpdate
from fieldbook.services.availability.recurrence import expand_block
from fieldbook.utils.ids import to_uuid

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "type", "start_time", "end_time", "is_recurring")


class TimeBlockService:
    """Handles time block operations"""

    @staticmethod
    def list_time_blocks(
            db: Session,
            business_id,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None
    ) -> List[Dict[str, Any]]:
        """
        Stored blocks for the business, ordered by start.

        With both bounds, recurring blocks are expanded into their occurrences
        between the start of `start_date` and the end of `end_date`.
        """
        rows = db.query(TimeBlock).filter(
            TimeBlock.business_id == to_uuid(business_id)
        ).order_by(TimeBlock.start_time.asc()).all()

        if not (start_date and end_date):
            return [row.to_dict() for row in rows]

        window_start = datetime.combine(start_date, time.min)
        window_end = datetime.combine(end_date, time.min) + timedelta(days=1)
        max_occurrences = get_settings().MAX_RECURRENCE_OCCURRENCES

        expanded = []
        for row in rows:
            try:
                occurrences = expand_block(row.to_definition(), window_start, window_end, max_occurrences)
            except (ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed time block {row.id}: {e}")
                continue

            for occurrence in occurrences:
                expanded.append({
                    "id": occurrence.occurrence_id,
                    "original_id": occurrence.block_id,
                    "title": occurrence.title,
                    "type": occurrence.kind.value,
                    "start_time": occurrence.start.isoformat(),
                    "end_time": occurrence.end.isoformat(),
                    "is_recurring_instance": occurrence.is_recurring_instance,
                })

        expanded.sort(key=lambda o: o["start_time"])
        return expanded

    @staticmethod
    def get_time_block(db: Session, business_id, block_id) -> Optional[TimeBlock]:
        return db.query(TimeBlock).filter(
            TimeBlock.id == to_uuid(block_id),
            TimeBlock.business_id == to_uuid(business_id)
        ).first()

    @staticmethod
    def create_time_block(db: Session, business_id, data: TimeBlockCreate) -> TimeBlock:
        """Create a new time block"""
        block = TimeBlock(
            id=uuid4(),
            business_id=to_uuid(business_id),
            title=data.title,
            description=data.description,
            type=data.type.value,
            start_time=data.start_time.replace(tzinfo=None),
            end_time=data.end_time.replace(tzinfo=None),
            is_recurring=data.is_recurring,
            recurrence_pattern=data.recurrence_pattern.value if data.recurrence_pattern else None,
            recurrence_end_date=data.recurrence_end_date,
            recurrence_count=data.recurrence_count,
        )

        db.add(block)
        db.commit()
        db.refresh(block)

        logger.info(f"Created time block {block.id} for business {business_id}: {block.title}")
        return block

    @staticmethod
    def update_time_block(
            db: Session,
            business_id,
            block_id,
            data: TimeBlockUpdate
    ) -> Optional[TimeBlock]:
        """
        Apply a partial update. Returns None when the block does not exist.
        Raises ValueError when the merged block is invalid.
        """
        block = TimeBlockService.get_time_block(db, business_id, block_id)
        if not block:
            return None

        updates = data.model_dump(exclude_unset=True)
        for field, value in updates.items():
            # null only clears the optional columns
            if value is None and field in REQUIRED_FIELDS:
                continue
            if field in ("start_time", "end_time") and value is not None:
                value = value.replace(tzinfo=None)
            if hasattr(value, "value"):
                value = value.value
            setattr(block, field, value)

        if block.end_time <= block.start_time:
            db.rollback()
            raise ValueError("end_time must be after start_time")
        if block.is_recurring and not block.recurrence_pattern:
            db.rollback()
            raise ValueError("recurring blocks need a recurrence_pattern")
        if not block.is_recurring:
            block.recurrence_pattern = None
            block.recurrence_end_date = None
            block.recurrence_count = None

        db.commit()
        db.refresh(block)

        logger.info(f"Updated time block {block.id}: {sorted(updates)}")
        return block

    @staticmethod
    def delete_time_block(db: Session, business_id, block_id) -> bool:
        block = TimeBlockService.get_time_block(db, business_id, block_id)
        if not block:
            return False

        db.delete(block)
        db.commit()

        logger.info(f"Deleted time block {block_id} for business {business_id}")
        return True
