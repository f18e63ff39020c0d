"""
Orphan file sweeper.

Reconciles the upload tree against user documents:
  1. files dropped directly in the upload root are moved into profiles/ or
     resumes/ by extension (and references to them are repointed),
  2. files in profiles/ and resumes/ whose basename no user references are
     deleted.

Files younger than the grace period are left alone so an upload that has
been written but not yet committed to its user is never collected.
"""

import asyncio
import time
from dataclasses import asdict, dataclass
from typing import Callable, Set

import structlog
from pymongo.errors import PyMongoError

from jobboard.services.file_storage import (
    PROFILES_DIR,
    RESUMES_DIR,
    DeleteOutcome,
    FileStorage,
    StoredEntry,
)
from jobboard.services.user_store import UserStore

logger = structlog.get_logger(__name__)

SYSTEM_FILES = {"desktop.ini", "thumbs.db"}
IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx"}


def is_hidden_or_system(name: str) -> bool:
    return name.startswith(".") or name.lower() in SYSTEM_FILES


@dataclass
class SweepReport:
    deleted: int = 0
    errored: int = 0
    skipped: int = 0
    moved: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


class OrphanFileSweeper:
    """Deletes unreferenced uploads and tidies misplaced ones."""

    def __init__(
        self,
        storage: FileStorage,
        users: UserStore,
        grace_seconds: float = 60,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage
        self.users = users
        self.grace_seconds = grace_seconds
        self._clock = clock

    def _too_recent(self, entry: StoredEntry) -> bool:
        return self._clock() - entry.modified_at < self.grace_seconds

    async def run(self) -> SweepReport:
        report = SweepReport()
        started = time.monotonic()

        await self.relocate_misplaced(report)

        referenced = await self.users.referenced_file_names()
        for subdir in (PROFILES_DIR, RESUMES_DIR):
            await self._sweep_directory(subdir, referenced, report)

        logger.info(
            "file_sweep_completed",
            duration_seconds=round(time.monotonic() - started, 3),
            referenced=len(referenced),
            **report.to_dict(),
        )
        return report

    async def relocate_misplaced(self, report: SweepReport) -> None:
        """Move regular files sitting in the upload root into their purpose directory."""
        for entry in await self.storage.scan():
            if not entry.is_file or is_hidden_or_system(entry.name):
                continue

            extension = entry.path.suffix.lower()
            if extension in IMAGE_EXTENSIONS:
                subdir = PROFILES_DIR
            elif extension in DOCUMENT_EXTENSIONS:
                subdir = RESUMES_DIR
            else:
                continue

            destination = self.storage.root / subdir / entry.name
            try:
                moved = await self.storage.move(entry.path, destination)
            except OSError as e:
                report.errored += 1
                logger.warning("misplaced_file_move_failed", name=entry.name, error=str(e))
                continue

            if not moved:
                report.skipped += 1
                logger.info("misplaced_file_destination_exists", name=entry.name, subdir=subdir)
                continue

            try:
                await self.users.repoint_file(entry.name, f"{subdir}/{entry.name}")
            except PyMongoError as e:
                # Put the file back so existing references still resolve
                report.errored += 1
                logger.error("misplaced_file_repoint_failed", name=entry.name, error=str(e))
                try:
                    await self.storage.move(destination, entry.path)
                except OSError as restore_error:
                    logger.error("misplaced_file_restore_failed", name=entry.name, error=str(restore_error))
                continue

            report.moved += 1
            logger.info("misplaced_file_moved", name=entry.name, subdir=subdir)
            await asyncio.sleep(0)

    async def _sweep_directory(self, subdir: str, referenced: Set[str], report: SweepReport) -> None:
        for entry in await self.storage.scan(subdir):
            await asyncio.sleep(0)

            if is_hidden_or_system(entry.name) or not entry.is_file:
                report.skipped += 1
                continue
            if entry.name in referenced:
                continue
            if self._too_recent(entry):
                report.skipped += 1
                continue

            outcome = await self.storage.safe_delete(entry.path)
            if outcome is DeleteOutcome.DELETED:
                report.deleted += 1
                logger.info("orphan_file_deleted", subdir=subdir, name=entry.name)
            elif outcome is not DeleteOutcome.MISSING:
                report.errored += 1
                logger.warning("orphan_file_delete_failed", subdir=subdir, name=entry.name, outcome=outcome.value)
