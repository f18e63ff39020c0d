"""Document models."""

from jobboard.models.job import ExperienceLevel, JobStatus, JobType, WorkLocation
from jobboard.models.user import full_name, public_user, role_fields

__all__ = [
    "ExperienceLevel",
    "JobStatus",
    "JobType",
    "WorkLocation",
    "full_name",
    "public_user",
    "role_fields",
]
