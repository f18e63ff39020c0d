"""User schemas."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from jobboard.core.security import Role
from jobboard.utils.validators import validate_password_strength


class NameSchema(BaseModel):
    first: str = Field(..., min_length=2, max_length=256)
    middle: str = Field(default="", max_length=256)
    last: str = Field(..., min_length=2, max_length=256)


def check_password(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    ok, errors = validate_password_strength(value)
    if not ok:
        raise ValueError("; ".join(errors))
    return value


class UserResponse(BaseModel):
    """Public view of a user (never includes the password hash)."""

    id: str
    name: NameSchema
    email: str
    role: Role
    is_admin: bool
    is_active: bool = True
    profile_picture: Optional[str] = None
    resume: Optional[str] = None
    bio: Optional[str] = None
    profession: Optional[str] = None
    saved_jobs: List[str] = Field(default_factory=list)
    applied_jobs: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdate(BaseModel):
    """Partial profile update. Only admins may change `role`."""

    name: Optional[NameSchema] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, max_length=72)
    bio: Optional[str] = Field(default=None, max_length=1024)
    profession: Optional[str] = Field(default=None, max_length=256)
    role: Optional[Role] = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        return check_password(value)
