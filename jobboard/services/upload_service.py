"""
Upload pipeline for profile pictures and resumes.

An upload is validated against a fixed per-purpose policy, written under
the purpose directory with a generated name, then committed to the owner's
user document. The previous file (if any) is removed after the commit.
"""

import os
import re
import secrets
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import structlog
from pymongo.errors import PyMongoError
from starlette.datastructures import UploadFile

from jobboard.core.errors import (
    NotFound,
    PersistenceFailed,
    UploadRejected,
    UploadRejectReason,
)
from jobboard.models.user import full_name
from jobboard.services.file_storage import (
    PROFILES_DIR,
    RESUMES_DIR,
    DeleteOutcome,
    FileStorage,
)
from jobboard.services.user_store import UserStore

logger = structlog.get_logger(__name__)

MB = 1024 * 1024


class UploadPurpose(str, Enum):
    AVATAR = "avatar"
    RESUME = "resume"


@dataclass(frozen=True)
class UploadPolicy:
    purpose: UploadPurpose
    label: str
    form_fields: tuple
    mime_types: frozenset
    extensions: tuple
    max_bytes: int
    subdir: str
    identity_field: str

    @property
    def filename_pattern(self) -> re.Pattern:
        exts = "|".join(re.escape(ext.lstrip(".")) for ext in self.extensions)
        return re.compile(rf"^[A-Za-z0-9 _.()\-]+\.({exts})$", re.IGNORECASE)


UPLOAD_POLICIES = {
    UploadPurpose.AVATAR: UploadPolicy(
        purpose=UploadPurpose.AVATAR,
        label="profile picture",
        form_fields=("profilePicture", "avatar"),
        mime_types=frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"}),
        extensions=(".jpg", ".jpeg", ".png", ".gif", ".webp"),
        max_bytes=5 * MB,
        subdir=PROFILES_DIR,
        identity_field="profile_picture",
    ),
    UploadPurpose.RESUME: UploadPolicy(
        purpose=UploadPurpose.RESUME,
        label="resume",
        form_fields=("resume",),
        mime_types=frozenset({
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        }),
        extensions=(".pdf", ".doc", ".docx"),
        max_bytes=10 * MB,
        subdir=RESUMES_DIR,
        identity_field="resume",
    ),
}

# Content types used when serving stored files back
MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


@dataclass
class IncomingFile:
    """One file part of a multipart request, already read into memory."""

    field_name: str
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class UploadResult:
    purpose: UploadPurpose
    path: str
    url: Optional[str]
    size: int
    content_type: str
    replaced: bool


@dataclass
class DownloadTarget:
    path: Path
    media_type: str
    filename: str


async def read_upload_files(form_items: Iterable[tuple], read_limit: int) -> List[IncomingFile]:
    """
    Read the file parts of a parsed form.

    At most `read_limit` bytes are read per file; a file that reaches the
    limit is reported with that size and rejected by the size check.
    """
    files = []
    for field_name, value in form_items:
        if not isinstance(value, UploadFile):
            continue
        data = await value.read(read_limit)
        await value.close()
        files.append(
            IncomingFile(
                field_name=field_name,
                filename=value.filename or "",
                content_type=(value.content_type or "").lower(),
                data=data,
            )
        )
    return files


def generate_filename(purpose: UploadPurpose, owner_id: str, extension: str) -> str:
    """Destination basename: {purpose}-{ownerId}-{timestampMs}-{random}{ext}."""
    timestamp = int(time.time() * 1000)
    suffix = secrets.randbelow(10**9)
    return f"{purpose.value}-{owner_id}-{timestamp}-{suffix}{extension.lower()}"


def validate_upload(incoming: IncomingFile, policy: UploadPolicy) -> str:
    """
    Check size, content type and filename against a policy.

    Returns the lower-cased extension on success.
    """
    if incoming.size > policy.max_bytes:
        raise UploadRejected(
            UploadRejectReason.TOO_LARGE,
            f"File too large. Maximum size allowed is {policy.max_bytes // MB}MB",
        )
    if incoming.content_type not in policy.mime_types:
        raise UploadRejected(
            UploadRejectReason.INVALID_TYPE,
            f"Invalid file type for {policy.label}. Allowed: {', '.join(policy.extensions)}",
        )
    if not policy.filename_pattern.match(incoming.filename):
        raise UploadRejected(
            UploadRejectReason.INVALID_FILENAME,
            "Invalid filename. Use letters, digits, spaces, dots, dashes, underscores or parentheses",
        )
    return os.path.splitext(incoming.filename)[1].lower()


class UploadPipeline:
    """Validated, purpose-scoped file uploads bound to a user's document."""

    def __init__(self, storage: FileStorage, users: UserStore):
        self.storage = storage
        self.users = users

    @staticmethod
    def policy(purpose: UploadPurpose) -> UploadPolicy:
        return UPLOAD_POLICIES[purpose]

    def _select(self, files: Sequence[IncomingFile], policy: UploadPolicy) -> IncomingFile:
        if not files:
            raise UploadRejected(
                UploadRejectReason.MISSING_FILE,
                f"No {policy.label} file uploaded",
            )
        if len(files) > 1:
            raise UploadRejected(UploadRejectReason.UNKNOWN_FIELD, "Too many files uploaded")
        incoming = files[0]
        if incoming.field_name not in policy.form_fields:
            raise UploadRejected(UploadRejectReason.UNKNOWN_FIELD, "Unexpected field in upload")
        return incoming

    async def upload(
        self, owner_id: str, files: Sequence[IncomingFile], purpose: UploadPurpose
    ) -> UploadResult:
        policy = self.policy(purpose)
        incoming = self._select(files, policy)
        extension = validate_upload(incoming, policy)

        relative = f"{policy.subdir}/{generate_filename(purpose, owner_id, extension)}"
        await self.storage.write(relative, incoming.data)

        try:
            before = await self.users.set_file_path(owner_id, policy.identity_field, relative)
        except PyMongoError as e:
            await self._discard(relative)
            logger.error("upload_commit_failed", owner_id=owner_id, purpose=purpose.value, error=str(e))
            raise PersistenceFailed(f"Failed to save {policy.label}") from e

        if before is None:
            await self._discard(relative)
            logger.error("upload_commit_failed", owner_id=owner_id, purpose=purpose.value, error="user missing")
            raise PersistenceFailed(f"Failed to save {policy.label}")

        replaced = False
        previous = before.get(policy.identity_field)
        if previous and previous != relative:
            outcome = await self.storage.safe_delete(previous)
            replaced = outcome is DeleteOutcome.DELETED
            if not outcome.ok:
                # Left for the orphan sweep
                logger.warning(
                    "previous_file_not_deleted",
                    owner_id=owner_id,
                    path=previous,
                    outcome=outcome.value,
                )

        logger.info(
            "file_uploaded",
            owner_id=owner_id,
            purpose=purpose.value,
            path=relative,
            size=incoming.size,
            replaced=replaced,
        )
        return UploadResult(
            purpose=purpose,
            path=relative,
            url=f"/uploads/{relative}" if purpose is UploadPurpose.AVATAR else None,
            size=incoming.size,
            content_type=incoming.content_type,
            replaced=replaced,
        )

    async def _discard(self, relative: str) -> None:
        outcome = await self.storage.safe_delete(relative)
        if not outcome.ok:
            logger.warning("uploaded_file_not_discarded", path=relative, outcome=outcome.value)

    async def remove(self, owner_id: str, purpose: UploadPurpose) -> DeleteOutcome:
        """Clear the user's reference, then delete the file best-effort."""
        policy = self.policy(purpose)
        previous = await self.users.clear_file_path(owner_id, policy.identity_field)
        if not previous:
            raise NotFound(f"No {policy.label} to delete")

        outcome = await self.storage.safe_delete(previous)
        logger.info("file_removed", owner_id=owner_id, purpose=purpose.value, outcome=outcome.value)
        return outcome

    async def resolve_download(self, user: dict, purpose: UploadPurpose) -> DownloadTarget:
        """Locate a user's stored file for an attachment download."""
        policy = self.policy(purpose)
        relative = user.get(policy.identity_field)
        if not relative:
            raise NotFound(f"No {policy.label} uploaded")

        path = self.storage.resolve(relative)
        if not await self.storage.exists(relative):
            logger.warning("dangling_file_reference", user_id=str(user.get("_id")), path=relative)
            raise NotFound(f"{policy.label.capitalize()} file not found")

        extension = path.suffix.lower()
        base = re.sub(r"[^A-Za-z0-9]+", "_", full_name(user)).strip("_") or "user"
        suffix = "Resume" if purpose is UploadPurpose.RESUME else "Picture"
        return DownloadTarget(
            path=path,
            media_type=MEDIA_TYPES.get(extension, "application/octet-stream"),
            filename=f"{base}_{suffix}{extension}",
        )
