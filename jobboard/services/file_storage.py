"""
Local filesystem storage for uploaded files.

Files live under one upload root:
    <root>/profiles/   avatar images
    <root>/resumes/    resume documents

Stored references are paths relative to the root (e.g. "profiles/x.png").
"""

import errno
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Union

import aiofiles
import aiofiles.os
import structlog

from jobboard.core.errors import NotFound, StorageFailed

logger = structlog.get_logger(__name__)

PROFILES_DIR = "profiles"
RESUMES_DIR = "resumes"
SUBDIRECTORIES = (PROFILES_DIR, RESUMES_DIR)


class DeleteOutcome(str, Enum):
    DELETED = "deleted"
    MISSING = "missing"
    PERMISSION_DENIED = "permission_denied"
    BUSY = "busy"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self in (DeleteOutcome.DELETED, DeleteOutcome.MISSING)


@dataclass
class StoredEntry:
    """A directory entry as seen by a scan."""

    name: str
    path: Path
    is_file: bool
    modified_at: float


class FileStorage:
    """Async file operations confined to a single upload root."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root).resolve()

    def ensure_dirs(self) -> None:
        """Create the root and its purpose subdirectories."""
        for subdir in SUBDIRECTORIES:
            (self.root / subdir).mkdir(parents=True, exist_ok=True)

    def resolve(self, relative: str) -> Path:
        """
        Absolute path for a stored reference.

        Raises NotFound for references that would escape the upload root.
        """
        candidate = (self.root / relative).resolve()
        if candidate != self.root and self.root not in candidate.parents:
            logger.warning("path_outside_upload_root", path=relative)
            raise NotFound("File not found")
        return candidate

    async def write(self, relative: str, data: bytes) -> Path:
        path = self.resolve(relative)
        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            logger.error("file_write_failed", path=relative, error=str(e))
            await self._remove_partial(path)
            raise StorageFailed("Failed to store file") from e
        return path

    async def _remove_partial(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("partial_file_not_removed", name=path.name, error=str(e))

    async def exists(self, relative: str) -> bool:
        try:
            path = self.resolve(relative)
        except NotFound:
            return False
        return await aiofiles.os.path.isfile(path)

    async def safe_delete(self, target: Union[str, Path]) -> DeleteOutcome:
        """
        Delete a file, reporting what happened instead of raising.

        `target` is either a stored reference or an absolute path inside the root.
        """
        try:
            path = self.resolve(str(target))
        except NotFound:
            return DeleteOutcome.FAILED

        try:
            await aiofiles.os.remove(path)
            logger.info("file_deleted", name=path.name)
            return DeleteOutcome.DELETED
        except FileNotFoundError:
            return DeleteOutcome.MISSING
        except PermissionError:
            logger.warning("file_delete_permission_denied", name=path.name)
            return DeleteOutcome.PERMISSION_DENIED
        except OSError as e:
            if e.errno == errno.EBUSY:
                logger.warning("file_delete_busy", name=path.name)
                return DeleteOutcome.BUSY
            logger.error("file_delete_failed", name=path.name, error=str(e))
            return DeleteOutcome.FAILED

    async def scan(self, subdir: str = "") -> List[StoredEntry]:
        """List entries of the root or one of its subdirectories."""
        directory = self.resolve(subdir) if subdir else self.root
        if not await aiofiles.os.path.isdir(directory):
            return []

        entries = []
        for name in await aiofiles.os.listdir(directory):
            path = directory / name
            try:
                info = await aiofiles.os.stat(path)
            except FileNotFoundError:
                # Removed between listing and stat
                continue
            entries.append(
                StoredEntry(
                    name=name,
                    path=path,
                    is_file=stat.S_ISREG(info.st_mode),
                    modified_at=info.st_mtime,
                )
            )
        return entries

    async def move(self, source: Path, destination: Path) -> bool:
        """
        Move a file within the root.

        Returns False without touching anything when the destination exists.
        """
        if await aiofiles.os.path.exists(destination):
            return False
        await aiofiles.os.makedirs(destination.parent, exist_ok=True)
        await aiofiles.os.rename(source, destination)
        return True
