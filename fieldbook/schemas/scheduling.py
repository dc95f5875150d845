"""
Pydantic schemas for scheduling: availability, bookings, time blocks,
priority blocks and business hours
"""
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime

from fieldbook.config.settings import get_settings
from fieldbook.services.availability.hours import Weekday, parse_time_of_day
from fieldbook.services.availability.recurrence import BlockKind, RecurrencePattern
from fieldbook.services.availability.segments import CustomerSegment


def _check_time_of_day(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    return parse_time_of_day(value).strftime("%H:%M")


# ============================================================================
# Availability
# ============================================================================

class AvailabilityResponse(BaseModel):
    business_id: str
    date: str
    duration_minutes: int
    slots: List[str]


class SlotCheckRequest(BaseModel):
    """A specific start time the customer wants to book"""
    date: str = Field(..., description="YYYY-MM-DD, business local")
    time: str = Field(..., description="HH:MM, business local, 24h")
    duration_minutes: int = Field(60, ge=1, le=24 * 60)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class SlotCheckResponse(BaseModel):
    business_id: str
    date: str
    time: str
    duration_minutes: int
    available: bool


class BookingRequest(SlotCheckRequest):
    customer_name: Optional[str] = Field(None, max_length=200)
    service_name: Optional[str] = Field(None, max_length=200)
    estimated_cost: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None


class BookingResponse(BaseModel):
    id: str
    business_id: str
    client_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    scheduled_at: str
    estimated_duration: Optional[int] = None
    estimated_cost: Optional[float] = None
    service_name: Optional[str] = None
    status: str


# ============================================================================
# Time Blocks
# ============================================================================

class TimeBlockCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    start_time: datetime
    end_time: datetime
    type: BlockKind = BlockKind.UNAVAILABLE
    description: Optional[str] = None
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    recurrence_count: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def check_block(self):
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        if self.is_recurring and self.recurrence_pattern is None:
            raise ValueError("recurring blocks need a recurrence_pattern")
        if not self.is_recurring:
            self.recurrence_pattern = None
            self.recurrence_end_date = None
            self.recurrence_count = None
        return self


class TimeBlockUpdate(BaseModel):
    """All fields optional - the merged block is validated by the service"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    type: Optional[BlockKind] = None
    description: Optional[str] = None
    is_recurring: Optional[bool] = None
    recurrence_pattern: Optional[RecurrencePattern] = None
    recurrence_end_date: Optional[date] = None
    recurrence_count: Optional[int] = Field(None, ge=1)


class TimeBlockResponse(BaseModel):
    id: str
    business_id: str
    title: str
    description: Optional[str] = None
    type: str
    start_time: str
    end_time: str
    is_recurring: bool
    recurrence_pattern: Optional[str] = None
    recurrence_end_date: Optional[str] = None
    recurrence_count: Optional[int] = None


class TimeBlockOccurrenceResponse(BaseModel):
    id: str
    original_id: str
    title: str
    type: str
    start_time: str
    end_time: str
    is_recurring_instance: bool


# ============================================================================
# Priority Blocks
# ============================================================================

class PriorityBlockCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    days: List[Weekday] = Field(..., min_length=1)
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    priority_for: CustomerSegment
    fallback_hours: int = Field(
        default_factory=lambda: get_settings().DEFAULT_PRIORITY_FALLBACK_HOURS, ge=0
    )
    enabled: bool = True

    @field_validator("days", mode="before")
    @classmethod
    def lowercase_days(cls, v):
        if isinstance(v, list):
            return [d.lower() if isinstance(d, str) else d for d in v]
        return v

    @field_validator("priority_for", mode="before")
    @classmethod
    def parse_segment(cls, v):
        try:
            return CustomerSegment.parse(v)
        except ValueError:
            raise ValueError("priority_for must be one of: new, returning, vip")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return _check_time_of_day(v)

    @model_validator(mode="after")
    def check_window(self):
        if parse_time_of_day(self.start_time) >= parse_time_of_day(self.end_time):
            raise ValueError("start_time must be before end_time")
        return self


class PriorityBlockUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    days: Optional[List[Weekday]] = Field(None, min_length=1)
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    priority_for: Optional[CustomerSegment] = None
    fallback_hours: Optional[int] = Field(None, ge=0)
    enabled: Optional[bool] = None

    @field_validator("days", mode="before")
    @classmethod
    def lowercase_days(cls, v):
        if isinstance(v, list):
            return [d.lower() if isinstance(d, str) else d for d in v]
        return v

    @field_validator("priority_for", mode="before")
    @classmethod
    def parse_segment(cls, v):
        if v is None:
            return v
        try:
            return CustomerSegment.parse(v)
        except ValueError:
            raise ValueError("priority_for must be one of: new, returning, vip")

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v):
        return _check_time_of_day(v)


class PriorityBlockResponse(BaseModel):
    id: str
    business_id: str
    name: str
    days: List[str]
    start_time: str
    end_time: str
    priority_for: str
    fallback_hours: int
    enabled: bool


# ============================================================================
# Business Hours
# ============================================================================

class DayHoursSchema(BaseModel):
    open: Optional[str] = None
    close: Optional[str] = None
    closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def validate_time(cls, v):
        return _check_time_of_day(v)

    @model_validator(mode="after")
    def check_day(self):
        if self.closed:
            return self
        if not self.open or not self.close:
            raise ValueError("open days need both open and close")
        if parse_time_of_day(self.open) >= parse_time_of_day(self.close):
            raise ValueError("open must be before close")
        return self


class BusinessHoursUpdate(BaseModel):
    """A missing or null day is stored as closed"""
    monday: Optional[DayHoursSchema] = None
    tuesday: Optional[DayHoursSchema] = None
    wednesday: Optional[DayHoursSchema] = None
    thursday: Optional[DayHoursSchema] = None
    friday: Optional[DayHoursSchema] = None
    saturday: Optional[DayHoursSchema] = None
    sunday: Optional[DayHoursSchema] = None


class BusinessHoursResponse(BaseModel):
    business_id: str
    is_default: bool
    worker_capacity: int
    business_hours: Dict[str, Dict[str, Any]]
