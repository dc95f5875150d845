# fieldbook/services/business/business_service.py
"""Service for business scheduling configuration"""
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
import logging

from fieldbook.models.business import Business
from fieldbook.schemas.scheduling import BusinessHoursUpdate
from fieldbook.services.availability.constraints import ConstraintAggregator
from fieldbook.services.availability.hours import DEFAULT_OPERATING_HOURS, OperatingHours, Weekday
from fieldbook.services.availability.reader import SqlSchedulingReader
from fieldbook.utils.ids import to_uuid

logger = logging.getLogger(__name__)


class BusinessService:
    """Handles business-related operations"""

    @staticmethod
    def get_business(db: Session, business_id) -> Optional[Business]:
        return db.query(Business).filter(
            Business.id == to_uuid(business_id),
            Business.is_active == True
        ).first()

    @staticmethod
    def get_worker_capacity(db: Session, business_id) -> int:
        """Concurrent jobs the business can run: team members + owner, at least 1"""
        return ConstraintAggregator(SqlSchedulingReader(db)).resolve_capacity(business_id)

    @staticmethod
    def get_business_hours(db: Session, business_id) -> Optional[Dict[str, Any]]:
        """Effective seven-day schedule. Returns None when the business does not exist."""
        business = BusinessService.get_business(db, business_id)
        if not business:
            return None

        hours = OperatingHours.from_config(business.business_hours, default=DEFAULT_OPERATING_HOURS)
        return {
            "business_id": str(business.id),
            "is_default": not business.business_hours,
            "worker_capacity": BusinessService.get_worker_capacity(db, business.id),
            "business_hours": hours.to_config(),
        }

    @staticmethod
    def update_business_hours(
            db: Session,
            business_id,
            hours: BusinessHoursUpdate
    ) -> Optional[Business]:
        """Store all seven days; days left out of the update are stored closed."""
        business = BusinessService.get_business(db, business_id)
        if not business:
            return None

        stored = {}
        for weekday in Weekday:
            day = getattr(hours, weekday.value)
            if day is None or day.closed:
                stored[weekday.value] = {"open": None, "close": None, "closed": True}
            else:
                stored[weekday.value] = {"open": day.open, "close": day.close, "closed": False}

        business.business_hours = stored
        db.commit()
        db.refresh(business)

        logger.info(f"Updated business hours for {business_id}")
        return business
