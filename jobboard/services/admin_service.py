"""Administrative operations: cascading user deletion, role/status changes, stats."""

from typing import Any, Dict

from bson import ObjectId
import structlog

from jobboard.core.errors import Forbidden, NotFound
from jobboard.core.security import Role
from jobboard.models.job import JobStatus
from jobboard.services.file_storage import FileStorage
from jobboard.services.job_store import JobStore
from jobboard.services.user_store import FILE_FIELDS, UserStore

logger = structlog.get_logger(__name__)


class AdminService:
    """Operations reserved for administrators."""

    def __init__(self, users: UserStore, jobs: JobStore, storage: FileStorage):
        self.users = users
        self.jobs = jobs
        self.storage = storage

    async def delete_user(self, actor_id: str, user_id: ObjectId) -> Dict[str, Any]:
        """
        Delete a user and everything that hangs off them.

        Each step is idempotent, so a partially failed deletion can simply
        be retried:
          1. strip the user from every applicant list
          2. delete their postings and pull those from other users' lists
          3. delete their stored files
          4. delete the user document
        """
        if str(user_id) == actor_id:
            raise Forbidden("You cannot delete your own account")

        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        applications_removed = await self.jobs.remove_applicant_everywhere(user_id)

        deleted_jobs = await self.jobs.delete_by_poster(user_id)
        await self.users.pull_jobs_everywhere(deleted_jobs)

        files_deleted = 0
        for field in FILE_FIELDS:
            if user.get(field):
                outcome = await self.storage.safe_delete(user[field])
                if outcome.ok:
                    files_deleted += 1
                else:
                    logger.warning("user_file_not_deleted", user_id=str(user_id), field=field, outcome=outcome.value)

        await self.users.delete(user_id)

        logger.info(
            "user_deleted",
            user_id=str(user_id),
            actor_id=actor_id,
            applications_removed=applications_removed,
            jobs_deleted=len(deleted_jobs),
            files_deleted=files_deleted,
        )
        return {
            "applications_removed": applications_removed,
            "jobs_deleted": len(deleted_jobs),
            "files_deleted": files_deleted,
        }

    async def change_role(self, actor_id: str, user_id: ObjectId, role: Role) -> Dict[str, Any]:
        if str(user_id) == actor_id and role != Role.ADMIN:
            raise Forbidden("You cannot remove your own admin privileges")

        updated = await self.users.set_role(user_id, role)
        if not updated:
            raise NotFound("User not found")
        logger.info("user_role_changed", user_id=str(user_id), role=role.value, actor_id=actor_id)
        return updated

    async def toggle_status(self, actor_id: str, user_id: ObjectId) -> Dict[str, Any]:
        if str(user_id) == actor_id:
            raise Forbidden("You cannot deactivate your own account")

        user = await self.users.get_by_id(user_id)
        if not user:
            raise NotFound("User not found")

        updated = await self.users.set_active(user_id, not user.get("is_active", True))
        logger.info("user_status_changed", user_id=str(user_id), is_active=updated["is_active"], actor_id=actor_id)
        return updated

    async def set_job_status(self, job_id: ObjectId, status: JobStatus) -> Dict[str, Any]:
        updated = await self.jobs.update(job_id, {"status": status.value})
        if not updated:
            raise NotFound("Job not found")
        return updated

    async def delete_job(self, job_id: ObjectId) -> None:
        if not await self.jobs.delete(job_id):
            raise NotFound("Job not found")
        await self.users.pull_jobs_everywhere([job_id])
        logger.info("job_deleted", job_id=str(job_id))

    async def stats(self) -> Dict[str, Any]:
        return {
            "users": {
                "total": await self.users.count(),
                "jobseekers": await self.users.count({"role": Role.JOBSEEKER.value}),
                "recruiters": await self.users.count({"role": Role.RECRUITER.value}),
                "admins": await self.users.count({"role": Role.ADMIN.value}),
                "inactive": await self.users.count({"is_active": False}),
            },
            "jobs": {
                "total": await self.jobs.count(),
                "active": await self.jobs.count({"is_active": True}),
                "by_type": await self.jobs.count_by_type(),
            },
            "applications": {
                "total": await self.jobs.total_applications(),
            },
            "recent_users": await self.users.list_users(limit=5),
            "recent_jobs": await self.jobs.recent(limit=5),
        }
