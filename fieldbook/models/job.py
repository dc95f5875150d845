# ===== fieldbook/models/job.py =====
from sqlalchemy import Column, String, Integer, Text, DateTime, Boolean, Numeric, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
import uuid
import enum
from fieldbook.models.base import Base


class JobStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Job(Base):
    """A booked appointment. Only `scheduled` jobs with a set time consume capacity."""
    __tablename__ = "jobs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)
    client_id = Column(UUID(as_uuid=True), ForeignKey("clients.id"), nullable=True, index=True)

    # Customer info (kept even when no client row matched)
    customer_name = Column(String, nullable=True)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # Scheduling - naive, business-local wall clock
    scheduled_at = Column(DateTime, nullable=False, index=True)
    # False for jobs booked for a day without a specific time
    time_is_set = Column(Boolean, nullable=False, default=True)
    estimated_duration = Column(Integer, nullable=True)  # minutes
    estimated_cost = Column(Numeric(10, 2), nullable=True)

    service_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)

    # scheduled, in_progress, completed, cancelled
    status = Column(String, nullable=False, default=JobStatus.SCHEDULED.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Job(id={self.id}, scheduled_at={self.scheduled_at}, status={self.status})>"

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "client_id": str(self.client_id) if self.client_id else None,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "customer_phone": self.customer_phone,
            "scheduled_at": self.scheduled_at.isoformat() if self.scheduled_at else None,
            "time_is_set": self.time_is_set,
            "estimated_duration": self.estimated_duration,
            "estimated_cost": float(self.estimated_cost) if self.estimated_cost is not None else None,
            "service_name": self.service_name,
            "notes": self.notes,
            "status": self.status,
        }
