# ===== fieldbook/services/availability/segments.py =====
"""Customer segments used for priority reservation eligibility (never persisted)"""
from decimal import Decimal
from enum import Enum
from typing import Iterable, Optional, Union

Number = Union[int, float, Decimal]


class CustomerSegment(str, Enum):
    NEW = "new"
    RETURNING = "returning"
    VIP = "vip"

    @classmethod
    def parse(cls, value: Union[str, "CustomerSegment"]) -> "CustomerSegment":
        """Accept "vip" as well as the older "vip_customers" spelling."""
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        if normalized.endswith("_customers"):
            normalized = normalized[: -len("_customers")]
        return cls(normalized)


def classify_segment(
        completed_job_values: Optional[Iterable[Optional[Number]]],
        vip_threshold: Number
) -> CustomerSegment:
    """
    Classify a customer from the values of their completed jobs.

    None means no matching customer was found.
    """
    if completed_job_values is None:
        return CustomerSegment.NEW

    values = [Decimal(str(v or 0)) for v in completed_job_values]
    if sum(values, Decimal(0)) > Decimal(str(vip_threshold)):
        return CustomerSegment.VIP
    if values:
        return CustomerSegment.RETURNING
    return CustomerSegment.NEW
