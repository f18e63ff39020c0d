"""User account endpoints: registration, login, profiles and job activity."""

import logging
from typing import List

from bson import ObjectId
from fastapi import APIRouter, Depends, Request, status

from jobboard.api.v1.helpers import job_responses, user_response
from jobboard.core.deps import (
    CurrentUser,
    get_current_user,
    get_job_store,
    get_token_service,
    get_user_store,
    require_self_or_admin,
)
from jobboard.core.errors import Forbidden, NotFound, Unauthenticated
from jobboard.core.limiter import AUTH_RATE_LIMIT, limiter
from jobboard.core.security import Role, TokenService, get_password_hash, verify_password
from jobboard.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from jobboard.schemas.job import JobResponse
from jobboard.schemas.user import UserResponse, UserUpdate
from jobboard.services.job_store import JobStore
from jobboard.services.user_store import UserStore
from jobboard.utils.validators import parse_object_id

logger = logging.getLogger(__name__)

router = APIRouter()


async def _load_user(users: UserStore, user_id: ObjectId) -> dict:
    doc = await users.get_by_id(user_id)
    if not doc:
        raise NotFound("User not found")
    return doc


async def apply_user_update(
    users: UserStore, target_id: ObjectId, payload: UserUpdate, actor: CurrentUser
) -> dict:
    """Apply a profile update on behalf of `actor`, enforcing role-change rules."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)

    if "role" in changes:
        if not actor.is_admin:
            raise Forbidden("Only admins can change user roles")
        if actor.id == str(target_id) and changes["role"] != Role.ADMIN:
            raise Forbidden("You cannot remove your own admin privileges")

    password = changes.pop("password", None)
    updated = await users.update(target_id, changes)
    if not updated:
        raise NotFound("User not found")
    if password:
        await users.set_password(target_id, get_password_hash(password))
    return updated


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
):
    """Register a new jobseeker or recruiter and return an access token."""
    doc = await users.create(
        name=payload.name.model_dump(),
        email=payload.email,
        password_hash=get_password_hash(payload.password),
        role=payload.role,
        bio=payload.bio,
        profession=payload.profession,
    )
    return AuthResponse(
        message="User registered successfully",
        token=tokens.issue(doc),
        user=user_response(doc),
    )


@router.post("/login", response_model=AuthResponse)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    users: UserStore = Depends(get_user_store),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with email and password."""
    doc = await users.get_by_email(payload.email)
    if not doc or not verify_password(payload.password, doc.get("password_hash", "")):
        raise Unauthenticated("Invalid email or password")
    if not doc.get("is_active", True):
        raise Unauthenticated("Account has been deactivated")

    logger.info(f"User {doc['_id']} logged in")
    return AuthResponse(
        message="Login successful",
        token=tokens.issue(doc),
        user=user_response(doc),
    )


@router.post("/logout")
async def logout(current_user: CurrentUser = Depends(get_current_user)):
    """
    Logout endpoint.

    Tokens are stateless; the client discards its token.
    """
    return {"message": "Logged out successfully"}


@router.get("/check-auth")
async def check_auth(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    doc = await _load_user(users, current_user.object_id)
    return {"authenticated": True, "user": user_response(doc)}


@router.get("/profile/me", response_model=UserResponse)
async def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    return user_response(await _load_user(users, current_user.object_id))


@router.put("/profile/me", response_model=UserResponse)
async def update_my_profile(
    payload: UserUpdate,
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    updated = await apply_user_update(users, current_user.object_id, payload, current_user)
    return user_response(updated)


@router.get("/jobs/saved", response_model=List[JobResponse])
async def get_my_saved_jobs(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
):
    doc = await _load_user(users, current_user.object_id)
    return job_responses(await jobs.list_by_ids(doc.get("saved_jobs", [])))


@router.get("/jobs/applied", response_model=List[JobResponse])
async def get_my_applied_jobs(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
):
    doc = await _load_user(users, current_user.object_id)
    return job_responses(await jobs.list_by_ids(doc.get("applied_jobs", [])))


@router.get("/jobs/activity")
async def get_my_job_activity(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
):
    """Saved and applied jobs, plus postings for recruiters."""
    doc = await _load_user(users, current_user.object_id)
    saved = job_responses(await jobs.list_by_ids(doc.get("saved_jobs", [])))
    applied = job_responses(await jobs.list_by_ids(doc.get("applied_jobs", [])))
    activity = {
        "saved_jobs": saved,
        "applied_jobs": applied,
        "counts": {"saved": len(saved), "applied": len(applied)},
    }
    if current_user.role in (Role.RECRUITER, Role.ADMIN):
        posted = job_responses(await jobs.list_by_poster(current_user.object_id))
        activity["posted_jobs"] = posted
        activity["counts"]["posted"] = len(posted)
    return activity


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    current_user: CurrentUser = Depends(require_self_or_admin),
    users: UserStore = Depends(get_user_store),
):
    return user_response(await _load_user(users, parse_object_id(user_id)))


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    current_user: CurrentUser = Depends(require_self_or_admin),
    users: UserStore = Depends(get_user_store),
):
    updated = await apply_user_update(users, parse_object_id(user_id), payload, current_user)
    return user_response(updated)


@router.get("/{user_id}/saved-jobs", response_model=List[JobResponse])
async def get_saved_jobs(
    user_id: str,
    current_user: CurrentUser = Depends(require_self_or_admin),
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
):
    doc = await _load_user(users, parse_object_id(user_id))
    return job_responses(await jobs.list_by_ids(doc.get("saved_jobs", [])))


@router.get("/{user_id}/applied-jobs", response_model=List[JobResponse])
async def get_applied_jobs(
    user_id: str,
    current_user: CurrentUser = Depends(require_self_or_admin),
    users: UserStore = Depends(get_user_store),
    jobs: JobStore = Depends(get_job_store),
):
    doc = await _load_user(users, parse_object_id(user_id))
    return job_responses(await jobs.list_by_ids(doc.get("applied_jobs", [])))
