"""Authentication schemas."""

from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from jobboard.schemas.user import NameSchema, UserResponse, check_password


class RegisterRequest(BaseModel):
    """Register request schema. Admin accounts cannot self-register."""

    name: NameSchema
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    role: Literal["jobseeker", "recruiter"] = "jobseeker"
    bio: Optional[str] = Field(default=None, max_length=1024)
    profession: Optional[str] = Field(default=None, max_length=256)

    @field_validator("password")
    @classmethod
    def password_strength(cls, value):
        return check_password(value)


class LoginRequest(BaseModel):
    """Login request schema."""

    email: EmailStr
    password: str


class AuthResponse(BaseModel):
    message: str
    token: str
    token_type: str = "bearer"
    user: UserResponse
