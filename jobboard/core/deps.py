"""
Dependency functions for FastAPI routes.

Authentication runs as a chain of dependencies:
    extract_token -> TokenService.verify -> load user -> role gate
Any failure raises before the route body runs.
"""

from enum import Enum
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, Request
from pydantic import BaseModel, ConfigDict

from jobboard.core.audit import record_auth_event
from jobboard.core.errors import Forbidden, Unauthenticated
from jobboard.core.security import Role, TokenError, TokenExpired, TokenService
from jobboard.services.admin_service import AdminService
from jobboard.services.file_sweeper import OrphanFileSweeper
from jobboard.services.job_store import JobStore
from jobboard.services.upload_service import UploadPipeline
from jobboard.services.user_store import UserStore


class AuthRejection(str, Enum):
    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    UNKNOWN_SUBJECT = "unknown_subject"
    DEACTIVATED = "deactivated"
    FORBIDDEN = "forbidden"


class CurrentUser(BaseModel):
    """The authenticated user attached to a request."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: Role
    is_admin: bool
    email: str
    name: dict
    is_active: bool = True
    profile_picture: Optional[str] = None
    resume: Optional[str] = None

    @classmethod
    def from_document(cls, doc: dict) -> "CurrentUser":
        role = Role(doc["role"])
        return cls(
            id=str(doc["_id"]),
            role=role,
            is_admin=role == Role.ADMIN,
            email=doc["email"],
            name=doc.get("name") or {},
            is_active=doc.get("is_active", True),
            profile_picture=doc.get("profile_picture"),
            resume=doc.get("resume"),
        )

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.id)


# Services live on app.state, built once in the lifespan

def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store


def get_job_store(request: Request) -> JobStore:
    return request.app.state.job_store


def get_upload_pipeline(request: Request) -> UploadPipeline:
    return request.app.state.upload_pipeline


def get_admin_service(request: Request) -> AdminService:
    return request.app.state.admin_service


def get_file_sweeper(request: Request) -> OrphanFileSweeper:
    return request.app.state.file_sweeper


def extract_token(request: Request) -> Optional[str]:
    """Token from `x-auth-token`, falling back to `Authorization: Bearer`."""
    token = request.headers.get("x-auth-token", "").strip()
    if token:
        return token

    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return None


def _unauthenticated(request: Request, reason: AuthRejection, message: str,
                     user_id: Optional[str] = None) -> Unauthenticated:
    record_auth_event(request, "rejected", reason=reason.value, user_id=user_id)
    return Unauthenticated(message)


async def get_current_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    users: UserStore = Depends(get_user_store),
) -> CurrentUser:
    """Authenticate the request and return the loaded user."""
    token = extract_token(request)
    if not token:
        raise _unauthenticated(request, AuthRejection.NO_TOKEN, "No token, authorization denied")

    try:
        claims = tokens.verify(token)
    except TokenExpired:
        raise _unauthenticated(request, AuthRejection.INVALID_TOKEN, "Token has expired")
    except TokenError:
        raise _unauthenticated(request, AuthRejection.INVALID_TOKEN, "Token is not valid")

    try:
        doc = await users.get_by_id(ObjectId(claims.subject))
    except InvalidId:
        doc = None
    if not doc:
        raise _unauthenticated(
            request, AuthRejection.UNKNOWN_SUBJECT, "User not found", user_id=claims.subject
        )
    if not doc.get("is_active", True):
        raise _unauthenticated(
            request, AuthRejection.DEACTIVATED, "Account has been deactivated", user_id=claims.subject
        )

    user = CurrentUser.from_document(doc)
    request.state.user = user
    record_auth_event(request, "admitted", user_id=user.id, role=user.role.value)
    return user


async def get_optional_user(
    request: Request,
    tokens: TokenService = Depends(get_token_service),
    users: UserStore = Depends(get_user_store),
) -> Optional[CurrentUser]:
    """Like get_current_user, but anonymous requests get None."""
    if extract_token(request) is None:
        return None
    return await get_current_user(request, tokens, users)


ROLE_DENIED_MESSAGES = {
    Role.RECRUITER: "Access denied. Recruiters only.",
    Role.JOBSEEKER: "Access denied. Job seekers only.",
    Role.ADMIN: "Access denied. Admin privileges required.",
}


def _forbidden(request: Request, user: CurrentUser, message: str) -> Forbidden:
    record_auth_event(
        request, "rejected", reason=AuthRejection.FORBIDDEN.value, user_id=user.id, role=user.role.value
    )
    return Forbidden(message)


def require_role(*allowed_roles: Role):
    """
    Gate a route on the user's role.

    Admins pass every role gate.

    Usage:
        @router.post("/jobs", dependencies=[Depends(require_role(Role.RECRUITER))])
    """
    allowed = {Role(role) for role in allowed_roles}
    if len(allowed) == 1:
        message = ROLE_DENIED_MESSAGES[next(iter(allowed))]
    else:
        message = "Access denied. Required role: " + " or ".join(sorted(r.value for r in allowed))

    async def role_checker(
        request: Request,
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.is_admin or current_user.role in allowed:
            return current_user
        raise _forbidden(request, current_user, message)

    return role_checker


async def require_admin(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    if not current_user.is_admin:
        raise _forbidden(request, current_user, ROLE_DENIED_MESSAGES[Role.ADMIN])
    return current_user


async def require_self_or_admin(
    user_id: str,
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
) -> CurrentUser:
    """Admit the user named by the `user_id` path parameter, or any admin."""
    if current_user.is_admin or current_user.id == user_id:
        return current_user
    raise _forbidden(request, current_user, "Access denied. You can only access your own account.")
