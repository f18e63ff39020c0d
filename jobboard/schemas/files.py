"""Upload schemas."""

from typing import Optional

from pydantic import BaseModel


class UploadResponse(BaseModel):
    message: str
    path: str
    url: Optional[str] = None
    size: int
    content_type: str
    replaced: bool


class ProfileFilesResponse(BaseModel):
    profile_picture: Optional[str] = None
    profile_picture_url: Optional[str] = None
    resume: Optional[str] = None
    has_resume: bool = False
