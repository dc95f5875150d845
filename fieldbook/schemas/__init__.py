# fieldbook/schemas/__init__.py
from .scheduling import (
    AvailabilityResponse,
    SlotCheckRequest,
    SlotCheckResponse,
    BookingRequest,
    BookingResponse,
)

from .scheduling import (
    TimeBlockCreate,
    TimeBlockUpdate,
    TimeBlockResponse,
    TimeBlockOccurrenceResponse,
    PriorityBlockCreate,
    PriorityBlockUpdate,
    PriorityBlockResponse,
    DayHoursSchema,
    BusinessHoursUpdate,
    BusinessHoursResponse,
)
