# fieldbook/models/business.py
"""
Business (tenant) and its team roster
"""
from sqlalchemy import Column, String, Boolean, DateTime, JSON, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import uuid
from fieldbook.models.base import Base


class Business(Base):
    __tablename__ = "businesses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)

    # IANA name; only used to read "now" in business-local time
    timezone = Column(String(50), default="UTC")

    # {"monday": {"open": "09:00", "close": "17:00", "closed": false}, ...}
    # NULL means "use the default schedule"
    business_hours = Column(JSON, nullable=True)

    team_members = relationship("TeamMember", back_populates="business", cascade="all, delete-orphan")

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True)

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "timezone": self.timezone,
            "business_hours": self.business_hours,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "is_active": self.is_active,
        }


class TeamMember(Base):
    """A worker who can run a job; roster size drives concurrent capacity"""
    __tablename__ = "team_members"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)

    business = relationship("Business", back_populates="team_members")

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<TeamMember(business_id={self.business_id}, name={self.name})>"
