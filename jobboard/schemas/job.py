"""Job schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from jobboard.models.job import ExperienceLevel, JobStatus, JobType, WorkLocation


class JobCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=256)
    company: str = Field(..., min_length=2, max_length=256)
    description: str = Field(..., min_length=2, max_length=1024)
    requirements: str = Field(..., min_length=2, max_length=1024)
    location: str = Field(..., min_length=2, max_length=256)
    salary: Optional[str] = Field(default=None, max_length=256)
    job_type: JobType
    work_location: WorkLocation = WorkLocation.ON_SITE
    experience_level: ExperienceLevel = ExperienceLevel.MID
    contact_email: EmailStr


class JobUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=2, max_length=256)
    company: Optional[str] = Field(default=None, min_length=2, max_length=256)
    description: Optional[str] = Field(default=None, min_length=2, max_length=1024)
    requirements: Optional[str] = Field(default=None, min_length=2, max_length=1024)
    location: Optional[str] = Field(default=None, min_length=2, max_length=256)
    salary: Optional[str] = Field(default=None, max_length=256)
    job_type: Optional[JobType] = None
    work_location: Optional[WorkLocation] = None
    experience_level: Optional[ExperienceLevel] = None
    contact_email: Optional[EmailStr] = None
    status: Optional[JobStatus] = None


class JobResponse(BaseModel):
    id: str
    title: str
    company: str
    description: str
    requirements: str
    location: str
    salary: Optional[str] = None
    job_type: JobType
    work_location: WorkLocation
    experience_level: ExperienceLevel
    contact_email: str
    posted_by: str
    application_count: int = 0
    is_active: bool = True
    status: JobStatus = JobStatus.ACTIVE
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    has_applied: Optional[bool] = None
    is_saved: Optional[bool] = None


class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
