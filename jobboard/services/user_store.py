"""Credential store: persistence of user documents."""

import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError
import structlog

from jobboard.core.errors import Conflict
from jobboard.core.security import Role
from jobboard.models.user import USERS_COLLECTION, new_user_document, role_fields

logger = structlog.get_logger(__name__)

FILE_FIELDS = ("profile_picture", "resume")

# Fields callers may never set through a generic update
PROTECTED_FIELDS = {"_id", "is_admin", "password_hash", "created_at", "saved_jobs", "applied_jobs"}


def _oid(value) -> ObjectId:
    return value if isinstance(value, ObjectId) else ObjectId(str(value))


class UserStore:
    """CRUD and reference bookkeeping for the users collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[USERS_COLLECTION]

    async def create(
        self,
        name: Dict[str, str],
        email: str,
        password_hash: str,
        role: Role | str = Role.JOBSEEKER,
        **extra: Any,
    ) -> Dict[str, Any]:
        """Insert a new user; a taken email is a Conflict."""
        doc = new_user_document(name, email, password_hash, role, **extra)
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise Conflict("User already exists with this email")
        doc["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(doc["_id"]), role=doc["role"])
        return doc

    async def get_by_id(self, user_id) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"_id": _oid(user_id)})

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"email": email.lower()})

    async def list_users(self, role: Optional[Role] = None, limit: int = 0) -> List[Dict[str, Any]]:
        query = {"role": role.value} if role else {}
        cursor = self.collection.find(query, {"password_hash": 0}).sort("created_at", -1)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def list_by_ids(self, user_ids: List[ObjectId]) -> List[Dict[str, Any]]:
        if not user_ids:
            return []
        cursor = self.collection.find({"_id": {"$in": list(user_ids)}}, {"password_hash": 0})
        return await cursor.to_list(length=None)

    async def update(self, user_id, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update and return the updated document.

        A role in `fields` is written together with the matching admin flag;
        protected fields are dropped.
        """
        changes = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        if "role" in changes:
            changes.update(role_fields(changes.pop("role")))
        if "email" in changes:
            changes["email"] = changes["email"].lower()
        changes["updated_at"] = datetime.now(timezone.utc)
        try:
            return await self.collection.find_one_and_update(
                {"_id": _oid(user_id)},
                {"$set": changes},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise Conflict("Email is already in use")

    async def set_password(self, user_id, password_hash: str) -> None:
        await self.collection.update_one(
            {"_id": _oid(user_id)},
            {"$set": {"password_hash": password_hash, "updated_at": datetime.now(timezone.utc)}},
        )

    async def set_role(self, user_id, role: Role) -> Optional[Dict[str, Any]]:
        return await self.update(user_id, {"role": role})

    async def set_active(self, user_id, is_active: bool) -> Optional[Dict[str, Any]]:
        return await self.update(user_id, {"is_active": is_active})

    async def set_file_path(self, user_id, field: str, path: str) -> Optional[Dict[str, Any]]:
        """
        Point a file field at a new path.

        Returns the document as it was before the write (so the caller
        learns the previous path), or None when the user does not exist.
        """
        if field not in FILE_FIELDS:
            raise ValueError(f"Not a file field: {field}")
        return await self.collection.find_one_and_update(
            {"_id": _oid(user_id)},
            {"$set": {field: path, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.BEFORE,
        )

    async def clear_file_path(self, user_id, field: str) -> Optional[str]:
        """Unset a file field; returns the previous path or None if it was not set."""
        if field not in FILE_FIELDS:
            raise ValueError(f"Not a file field: {field}")
        before = await self.collection.find_one_and_update(
            {"_id": _oid(user_id), field: {"$nin": [None, ""]}},
            {"$set": {field: None, "updated_at": datetime.now(timezone.utc)}},
            return_document=ReturnDocument.BEFORE,
        )
        return before.get(field) if before else None

    async def referenced_file_names(self) -> Set[str]:
        """Basenames of every file any user currently points at."""
        names: Set[str] = set()
        cursor = self.collection.find(
            {"$or": [{field: {"$nin": [None, ""]}} for field in FILE_FIELDS]},
            {field: 1 for field in FILE_FIELDS},
        )
        async for doc in cursor:
            for field in FILE_FIELDS:
                if doc.get(field):
                    names.add(os.path.basename(doc[field]))
        return names

    async def repoint_file(self, old_path: str, new_path: str) -> int:
        """Rewrite references to a file that was moved inside the upload root."""
        modified = 0
        for field in FILE_FIELDS:
            result = await self.collection.update_many({field: old_path}, {"$set": {field: new_path}})
            modified += result.modified_count
        return modified

    async def toggle_saved_job(self, user_id, job_id: ObjectId) -> bool:
        """Add or remove a saved job; returns True when the job is now saved."""
        removed = await self.collection.update_one(
            {"_id": _oid(user_id), "saved_jobs": job_id},
            {"$pull": {"saved_jobs": job_id}},
        )
        if removed.modified_count:
            return False
        await self.collection.update_one(
            {"_id": _oid(user_id)},
            {"$addToSet": {"saved_jobs": job_id}},
        )
        return True

    async def add_applied_job(self, user_id, job_id: ObjectId) -> None:
        await self.collection.update_one(
            {"_id": _oid(user_id)},
            {"$addToSet": {"applied_jobs": job_id}},
        )

    async def pull_jobs_everywhere(self, job_ids: List[ObjectId]) -> int:
        """Remove jobs from every user's saved and applied lists."""
        if not job_ids:
            return 0
        result = await self.collection.update_many(
            {"$or": [{"saved_jobs": {"$in": job_ids}}, {"applied_jobs": {"$in": job_ids}}]},
            {"$pullAll": {"saved_jobs": job_ids, "applied_jobs": job_ids}},
        )
        return result.modified_count

    async def delete(self, user_id) -> bool:
        result = await self.collection.delete_one({"_id": _oid(user_id)})
        return result.deleted_count == 1

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection.count_documents(query or {})
