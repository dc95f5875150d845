# ===== fieldbook/services/availability/reader.py =====
"""SQLAlchemy-backed SchedulingReader: read-only, always filtered by business"""
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import or_
from sqlalchemy.orm import Session

from fieldbook.config.settings import get_settings
from fieldbook.models.business import Business, TeamMember
from fieldbook.models.client import Client
from fieldbook.models.job import Job, JobStatus
from fieldbook.models.priority_block import PriorityTimeBlock
from fieldbook.models.time_block import TimeBlock
from fieldbook.services.availability.constraints import ExistingBooking, PriorityReservation
from fieldbook.services.availability.recurrence import TimeBlockDefinition
from fieldbook.utils.ids import to_uuid

logger = logging.getLogger(__name__)


class SqlSchedulingReader:
    """Reads one tenant's scheduling inputs from the database"""

    def __init__(self, db: Session, default_job_duration_minutes: Optional[int] = None):
        self.db = db
        self.default_job_duration_minutes = (
            default_job_duration_minutes or get_settings().DEFAULT_JOB_DURATION_MINUTES
        )

    def get_business(self, business_id) -> Optional[Business]:
        return self.db.query(Business).filter(Business.id == to_uuid(business_id)).first()

    def get_business_hours_config(self, business_id) -> Optional[Dict[str, Any]]:
        business = self.get_business(business_id)
        if not business:
            logger.warning(f"Business {business_id} not found, using default hours")
            return None
        return business.business_hours

    def list_time_blocks(self, business_id) -> List[TimeBlockDefinition]:
        rows = self.db.query(TimeBlock).filter(
            TimeBlock.business_id == to_uuid(business_id)
        ).order_by(TimeBlock.start_time.asc()).all()

        definitions = []
        for row in rows:
            try:
                definitions.append(row.to_definition())
            except ValueError as e:
                logger.warning(f"Skipping malformed time block {row.id}: {e}")
        return definitions

    def list_priority_reservations(self, business_id) -> List[PriorityReservation]:
        rows = self.db.query(PriorityTimeBlock).filter(
            PriorityTimeBlock.business_id == to_uuid(business_id),
            PriorityTimeBlock.enabled == True
        ).all()

        reservations = []
        for row in rows:
            try:
                reservations.append(row.to_reservation())
            except ValueError as e:
                logger.warning(f"Skipping malformed priority block {row.id}: {e}")
        return reservations

    def list_scheduled_bookings(
            self,
            business_id,
            window_start: datetime,
            window_end: datetime
    ) -> List[ExistingBooking]:
        # Jobs booked for a day without a time of day hold no capacity
        jobs = self.db.query(Job).filter(
            Job.business_id == to_uuid(business_id),
            Job.status == JobStatus.SCHEDULED.value,
            Job.time_is_set == True,
            Job.scheduled_at >= window_start,
            Job.scheduled_at < window_end
        ).order_by(Job.scheduled_at.asc()).all()

        bookings = []
        for job in jobs:
            duration = job.estimated_duration or self.default_job_duration_minutes
            if duration < 0:
                logger.warning(f"Skipping malformed job {job.id}: negative duration {duration}")
                continue
            bookings.append(ExistingBooking(
                start=job.scheduled_at,
                duration_minutes=duration,
                job_id=str(job.id),
            ))
        return bookings

    def count_team_members(self, business_id) -> int:
        return self.db.query(TeamMember).filter(
            TeamMember.business_id == to_uuid(business_id),
            TeamMember.is_active == True
        ).count()

    def find_client(
            self,
            business_id,
            customer_email: Optional[str],
            customer_phone: Optional[str]
    ) -> Optional[Client]:
        conditions = []
        if customer_email:
            conditions.append(Client.email == customer_email.strip())
        if customer_phone:
            conditions.append(Client.phone == customer_phone.strip())
        if not conditions:
            return None

        return self.db.query(Client).filter(
            Client.business_id == to_uuid(business_id),
            or_(*conditions)
        ).order_by(Client.created_at.asc()).first()

    def find_completed_job_values(
            self,
            business_id,
            customer_email: Optional[str],
            customer_phone: Optional[str]
    ) -> Optional[List[Any]]:
        client = self.find_client(business_id, customer_email, customer_phone)
        if not client:
            return None

        rows = self.db.query(Job.estimated_cost).filter(
            Job.business_id == to_uuid(business_id),
            Job.client_id == client.id,
            Job.status == JobStatus.COMPLETED.value
        ).all()
        return [row[0] for row in rows]
