"""Response helpers shared by the v1 routers."""

from typing import Iterable, List, Optional

from jobboard.models.job import public_job
from jobboard.models.user import public_user
from jobboard.schemas.job import JobResponse
from jobboard.schemas.user import UserResponse


def user_response(doc: dict) -> UserResponse:
    return UserResponse(**public_user(doc))


def job_response(doc: dict, viewer: Optional[dict] = None) -> JobResponse:
    response = JobResponse(**public_job(doc))
    if viewer is not None:
        response.has_applied = doc["_id"] in viewer.get("applied_jobs", [])
        response.is_saved = doc["_id"] in viewer.get("saved_jobs", [])
    return response


def job_responses(docs: Iterable[dict]) -> List[JobResponse]:
    return [job_response(doc) for doc in docs]
