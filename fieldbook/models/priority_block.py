# fieldbook/models/priority_block.py
"""
Priority time blocks - weekly windows held for a customer segment until
`fallback_hours` before each slot, then released to everyone.
"""
from sqlalchemy import Column, String, Integer, DateTime, Boolean, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
from fieldbook.config.settings import get_settings
from fieldbook.models.base import Base
from fieldbook.services.availability.constraints import PriorityReservation
from fieldbook.services.availability.hours import Weekday, parse_time_of_day
from fieldbook.services.availability.segments import CustomerSegment


class PriorityTimeBlock(Base):
    __tablename__ = "priority_time_blocks"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    days = Column(JSON, nullable=False, default=list)  # ["monday", "tuesday", ...]
    start_time = Column(String(5), nullable=False)  # HH:MM format
    end_time = Column(String(5), nullable=False)  # HH:MM format
    priority_for = Column(String(30), nullable=False)  # new, returning, vip
    fallback_hours = Column(Integer, nullable=False, default=24)
    enabled = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<PriorityTimeBlock(id={self.id}, name={self.name}, for={self.priority_for})>"

    def to_reservation(self) -> PriorityReservation:
        """Raises ValueError when days, times or segment are malformed."""
        return PriorityReservation(
            weekdays=frozenset(Weekday(str(day).lower()) for day in (self.days or [])),
            start_time=parse_time_of_day(self.start_time),
            end_time=parse_time_of_day(self.end_time),
            segment=CustomerSegment.parse(self.priority_for),
            fallback_hours=(
                get_settings().DEFAULT_PRIORITY_FALLBACK_HOURS
                if self.fallback_hours is None else self.fallback_hours
            ),
            enabled=bool(self.enabled),
            name=self.name,
            id=str(self.id),
        )

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "name": self.name,
            "days": list(self.days or []),
            "start_time": self.start_time,
            "end_time": self.end_time,
            "priority_for": self.priority_for,
            "fallback_hours": self.fallback_hours,
            "enabled": self.enabled,
        }
