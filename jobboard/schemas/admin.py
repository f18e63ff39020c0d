"""Admin schemas."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from jobboard.core.security import Role
from jobboard.models.job import JobStatus


class RoleUpdate(BaseModel):
    role: Role


class JobStatusUpdate(BaseModel):
    status: JobStatus


class SweepReportResponse(BaseModel):
    deleted: int
    errored: int
    skipped: int
    moved: int


class UserDeletionResponse(BaseModel):
    message: str
    applications_removed: int
    jobs_deleted: int
    files_deleted: int


class SchedulerJobInfo(BaseModel):
    id: str
    name: str
    next_run_time: Optional[str] = None
    trigger: str


class SchedulerStatusResponse(BaseModel):
    enabled: bool
    running: bool
    total_jobs: int
    jobs: List[SchedulerJobInfo]


class StatsResponse(BaseModel):
    users: Dict[str, int]
    jobs: Dict[str, Any]
    applications: Dict[str, int]
    recent_users: List[Dict[str, Any]]
    recent_jobs: List[Dict[str, Any]]
