"""Job posting endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from jobboard.api.v1.files import download_response
from jobboard.api.v1.helpers import job_response, job_responses, user_response
from jobboard.core.deps import (
    CurrentUser,
    get_admin_service,
    get_current_user,
    get_job_store,
    get_optional_user,
    get_upload_pipeline,
    get_user_store,
    require_role,
)
from jobboard.core.errors import Forbidden, NotFound
from jobboard.core.security import Role
from jobboard.models.job import JobType
from jobboard.schemas.job import JobCreate, JobListResponse, JobResponse, JobUpdate
from jobboard.schemas.user import UserResponse
from jobboard.services.admin_service import AdminService
from jobboard.services.job_store import JobStore
from jobboard.services.upload_service import UploadPipeline, UploadPurpose
from jobboard.services.user_store import UserStore
from jobboard.utils.validators import parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_job(jobs: JobStore, job_id: str) -> dict:
    job = await jobs.get(parse_object_id(job_id))
    if not job:
        raise NotFound("Job not found")
    return job


def _ensure_owner(job: dict, user: CurrentUser) -> None:
    if not user.is_admin and str(job["posted_by"]) != user.id:
        raise Forbidden("Access denied. You can only manage your own job postings.")


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    payload: JobCreate,
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
):
    job = await jobs.create(payload.model_dump(mode="json"), current_user.object_id)
    return job_response(job)


@router.get("", response_model=JobListResponse)
async def list_jobs(
    job_type: Optional[JobType] = Query(None, alias="jobType"),
    location: Optional[str] = Query(None, max_length=256),
    company: Optional[str] = Query(None, max_length=256),
    search: Optional[str] = Query(None, max_length=256),
    jobs: JobStore = Depends(get_job_store),
):
    """List active jobs with optional filters."""
    docs = await jobs.search(
        job_type=job_type.value if job_type else None,
        location=location,
        company=company,
        search=search,
    )
    return JobListResponse(jobs=job_responses(docs), total=len(docs))


@router.get("/my-listings", response_model=List[JobResponse])
async def my_listings(
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
):
    return job_responses(await jobs.list_by_poster(current_user.object_id))


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(
    job_id: str,
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    jobs: JobStore = Depends(get_job_store),
    users: UserStore = Depends(get_user_store),
):
    job = await _load_job(jobs, job_id)
    viewer = await users.get_by_id(current_user.object_id) if current_user else None
    return job_response(job, viewer)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: str,
    payload: JobUpdate,
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
):
    job = await _load_job(jobs, job_id)
    _ensure_owner(job, current_user)
    updated = await jobs.update(job["_id"], payload.model_dump(mode="json", exclude_unset=True, exclude_none=True))
    if not updated:
        raise NotFound("Job not found")
    return job_response(updated)


@router.delete("/{job_id}")
async def delete_job(
    job_id: str,
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
    admin: AdminService = Depends(get_admin_service),
):
    job = await _load_job(jobs, job_id)
    _ensure_owner(job, current_user)
    await admin.delete_job(job["_id"])
    return {"message": "Job deleted successfully"}


@router.post("/{job_id}/apply")
async def apply_for_job(
    job_id: str,
    current_user: CurrentUser = Depends(require_role(Role.JOBSEEKER)),
    jobs: JobStore = Depends(get_job_store),
    users: UserStore = Depends(get_user_store),
):
    """Apply for a job. Applying twice is a conflict."""
    job = await _load_job(jobs, job_id)
    if not job.get("is_active", True):
        raise Forbidden("This job is no longer accepting applications")

    await jobs.add_applicant(job["_id"], current_user.object_id)
    await users.add_applied_job(current_user.object_id, job["_id"])
    logger.info(f"User {current_user.id} applied for job {job_id}")
    return {"message": "Application submitted successfully"}


@router.post("/{job_id}/save")
async def toggle_save_job(
    job_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    jobs: JobStore = Depends(get_job_store),
    users: UserStore = Depends(get_user_store),
):
    job = await _load_job(jobs, job_id)
    saved = await users.toggle_saved_job(current_user.object_id, job["_id"])
    return {
        "message": "Job saved successfully" if saved else "Job removed from saved jobs",
        "saved": saved,
    }


@router.get("/{job_id}/applicants", response_model=List[UserResponse])
async def get_applicants(
    job_id: str,
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
    users: UserStore = Depends(get_user_store),
):
    job = await _load_job(jobs, job_id)
    _ensure_owner(job, current_user)
    return [user_response(doc) for doc in await users.list_by_ids(job.get("applicants", []))]


@router.get("/{job_id}/applicants/{applicant_id}/resume")
async def download_applicant_resume(
    job_id: str,
    applicant_id: str,
    current_user: CurrentUser = Depends(require_role(Role.RECRUITER)),
    jobs: JobStore = Depends(get_job_store),
    users: UserStore = Depends(get_user_store),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Download the resume of someone who applied to one of your postings."""
    job = await _load_job(jobs, job_id)
    _ensure_owner(job, current_user)

    applicant_oid = parse_object_id(applicant_id)
    if applicant_oid not in job.get("applicants", []):
        raise NotFound("Applicant not found for this job")

    applicant = await users.get_by_id(applicant_oid)
    if not applicant:
        raise NotFound("Applicant not found")
    return download_response(await pipeline.resolve_download(applicant, UploadPurpose.RESUME))
