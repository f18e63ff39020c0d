"""Admin endpoints: user and job management, stats and maintenance."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from jobboard.api.v1.helpers import job_response, job_responses, user_response
from jobboard.core.deps import (
    CurrentUser,
    get_admin_service,
    get_file_sweeper,
    get_job_store,
    get_user_store,
    require_admin,
)
from jobboard.core.scheduler import get_scheduler_status
from jobboard.core.security import Role
from jobboard.schemas.admin import (
    JobStatusUpdate,
    RoleUpdate,
    SchedulerStatusResponse,
    StatsResponse,
    SweepReportResponse,
    UserDeletionResponse,
)
from jobboard.schemas.job import JobResponse
from jobboard.schemas.user import UserResponse
from jobboard.services.admin_service import AdminService
from jobboard.services.file_sweeper import OrphanFileSweeper
from jobboard.services.job_store import JobStore
from jobboard.services.user_store import UserStore
from jobboard.utils.validators import parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    role: Optional[Role] = Query(None),
    users: UserStore = Depends(get_user_store),
):
    return [user_response(doc) for doc in await users.list_users(role=role)]


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def change_user_role(
    user_id: str,
    payload: RoleUpdate,
    current_user: CurrentUser = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
):
    updated = await admin.change_role(current_user.id, parse_object_id(user_id), payload.role)
    return user_response(updated)


@router.put("/users/{user_id}/status", response_model=UserResponse)
async def toggle_user_status(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
):
    """Activate or deactivate a user."""
    updated = await admin.toggle_status(current_user.id, parse_object_id(user_id))
    return user_response(updated)


@router.delete("/users/{user_id}", response_model=UserDeletionResponse)
async def delete_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_admin),
    admin: AdminService = Depends(get_admin_service),
):
    """Delete a user with their applications, postings and files."""
    summary = await admin.delete_user(current_user.id, parse_object_id(user_id))
    return UserDeletionResponse(message="User deleted successfully", **summary)


@router.get("/jobs", response_model=List[JobResponse])
async def list_all_jobs(jobs: JobStore = Depends(get_job_store)):
    return job_responses(await jobs.search(active_only=False))


@router.put("/jobs/{job_id}/status", response_model=JobResponse)
async def set_job_status(
    job_id: str,
    payload: JobStatusUpdate,
    admin: AdminService = Depends(get_admin_service),
):
    return job_response(await admin.set_job_status(parse_object_id(job_id), payload.status))


@router.delete("/jobs/{job_id}")
async def delete_job(
    job_id: str,
    admin: AdminService = Depends(get_admin_service),
):
    await admin.delete_job(parse_object_id(job_id))
    return {"message": "Job deleted successfully"}


@router.get("/stats", response_model=StatsResponse)
async def get_stats(admin: AdminService = Depends(get_admin_service)):
    stats = await admin.stats()
    stats["recent_users"] = [user_response(doc).model_dump(mode="json") for doc in stats["recent_users"]]
    stats["recent_jobs"] = [job_response(doc).model_dump(mode="json") for doc in stats["recent_jobs"]]
    return stats


@router.post("/maintenance/file-sweep", response_model=SweepReportResponse)
async def run_file_sweep_now(
    current_user: CurrentUser = Depends(require_admin),
    sweeper: OrphanFileSweeper = Depends(get_file_sweeper),
):
    """Run the orphan file sweep immediately."""
    logger.info(f"File sweep triggered manually by {current_user.id}")
    report = await sweeper.run()
    return SweepReportResponse(**report.to_dict())


@router.get("/scheduler", response_model=SchedulerStatusResponse)
async def scheduler_status(request: Request):
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        return SchedulerStatusResponse(enabled=False, running=False, total_jobs=0, jobs=[])
    return SchedulerStatusResponse(enabled=True, **get_scheduler_status(scheduler))
