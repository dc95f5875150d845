# fieldbook/models/__init__.py
from .base import Base
from .business import Business, TeamMember
from .client import Client
from .job import Job, JobStatus
from .time_block import TimeBlock
from .priority_block import PriorityTimeBlock

__all__ = [
    "Base",
    "Business",
    "TeamMember",
    "Client",
    "Job",
    "JobStatus",
    "TimeBlock",
    "PriorityTimeBlock",
]
