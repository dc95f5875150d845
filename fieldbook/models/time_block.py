# fieldbook/models/time_block.py
"""
Time blocks - owner-defined unavailable time (personal, holiday, blackout).
Recurring blocks are stored once; occurrences are computed on read.
"""
from sqlalchemy import Column, String, Integer, Text, Date, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from fieldbook.models.base import Base
from fieldbook.services.availability.recurrence import (
    BlockKind,
    RecurrencePattern,
    RecurrenceRule,
    TimeBlockDefinition,
)


class TimeBlock(Base):
    __tablename__ = "time_blocks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(20), nullable=False, default=BlockKind.UNAVAILABLE.value)

    # First occurrence, naive business-local time
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    # Recurrence
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(String(10), nullable=True)  # daily, weekly, monthly, yearly
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_count = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<TimeBlock(id={self.id}, title={self.title}, recurring={self.is_recurring})>"

    def to_definition(self) -> TimeBlockDefinition:
        """
        Convert the stored row into the engine's TimeBlockDefinition.

        Raises ValueError for rows whose type or recurrence metadata is unusable.
        """
        recurrence = None
        if self.is_recurring:
            if not self.recurrence_pattern:
                raise ValueError(f"Time block {self.id} is recurring but has no pattern")
            recurrence = RecurrenceRule(
                pattern=RecurrencePattern(self.recurrence_pattern),
                end_date=self.recurrence_end_date,
                count=self.recurrence_count,
            )

        return TimeBlockDefinition(
            id=str(self.id),
            title=self.title,
            start=self.start_time,
            end=self.end_time,
            kind=BlockKind(self.type or BlockKind.UNAVAILABLE.value),
            description=self.description,
            recurrence=recurrence,
        )

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "title": self.title,
            "description": self.description,
            "type": self.type,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "is_recurring": self.is_recurring,
            "recurrence_pattern": self.recurrence_pattern,
            "recurrence_end_date": self.recurrence_end_date.isoformat() if self.recurrence_end_date else None,
            "recurrence_count": self.recurrence_count,
        }
