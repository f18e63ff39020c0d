"""Persistence of job postings and their applicant lists."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
import structlog

from jobboard.core.errors import Conflict, NotFound
from jobboard.models.job import JOBS_COLLECTION, JobStatus, new_job_document

logger = structlog.get_logger(__name__)

PROTECTED_FIELDS = {"_id", "posted_by", "applicants", "application_count", "created_at"}


class JobStore:
    """CRUD for the jobs collection."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.collection = db[JOBS_COLLECTION]

    async def create(self, data: Dict[str, Any], posted_by: ObjectId) -> Dict[str, Any]:
        doc = new_job_document(data, posted_by)
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        logger.info("job_posted", job_id=str(doc["_id"]), posted_by=str(posted_by))
        return doc

    async def get(self, job_id: ObjectId) -> Optional[Dict[str, Any]]:
        return await self.collection.find_one({"_id": job_id})

    async def search(
        self,
        job_type: Optional[str] = None,
        location: Optional[str] = None,
        company: Optional[str] = None,
        search: Optional[str] = None,
        active_only: bool = True,
    ) -> List[Dict[str, Any]]:
        """
        List jobs, newest first.

        Free-text inputs are escaped before being used as case-insensitive
        regular expressions.
        """
        query: Dict[str, Any] = {}
        if active_only:
            query["is_active"] = True
        if job_type:
            query["job_type"] = job_type
        if location:
            query["location"] = {"$regex": re.escape(location), "$options": "i"}
        if company:
            query["company"] = {"$regex": re.escape(company), "$options": "i"}
        if search:
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"title": pattern}, {"company": pattern}, {"description": pattern}]

        cursor = self.collection.find(query).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def list_by_poster(self, poster_id: ObjectId) -> List[Dict[str, Any]]:
        cursor = self.collection.find({"posted_by": poster_id}).sort("created_at", -1)
        return await cursor.to_list(length=None)

    async def list_by_ids(self, job_ids: List[ObjectId]) -> List[Dict[str, Any]]:
        if not job_ids:
            return []
        cursor = self.collection.find({"_id": {"$in": list(job_ids)}})
        return await cursor.to_list(length=None)

    async def update(self, job_id: ObjectId, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        changes = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
        if "status" in changes:
            changes["is_active"] = changes["status"] == JobStatus.ACTIVE.value
        changes["updated_at"] = datetime.now(timezone.utc)
        return await self.collection.find_one_and_update(
            {"_id": job_id},
            {"$set": changes},
            return_document=ReturnDocument.AFTER,
        )

    async def delete(self, job_id: ObjectId) -> bool:
        result = await self.collection.delete_one({"_id": job_id})
        return result.deleted_count == 1

    async def add_applicant(self, job_id: ObjectId, user_id: ObjectId) -> None:
        """
        Record an application atomically.

        The filter only matches while the user is not yet an applicant, so
        two concurrent applications cannot both succeed.
        """
        result = await self.collection.update_one(
            {"_id": job_id, "applicants": {"$ne": user_id}},
            {"$push": {"applicants": user_id}, "$inc": {"application_count": 1}},
        )
        if result.modified_count:
            return
        if await self.collection.count_documents({"_id": job_id}) == 0:
            raise NotFound("Job not found")
        raise Conflict("You have already applied for this job")

    async def remove_applicant_everywhere(self, user_id: ObjectId) -> int:
        """Strip a user from every applicant list; safe to repeat."""
        result = await self.collection.update_many(
            {"applicants": user_id},
            {"$pull": {"applicants": user_id}, "$inc": {"application_count": -1}},
        )
        return result.modified_count

    async def delete_by_poster(self, poster_id: ObjectId) -> List[ObjectId]:
        """Delete every job posted by a user; returns the deleted ids."""
        cursor = self.collection.find({"posted_by": poster_id}, {"_id": 1})
        job_ids = [doc["_id"] async for doc in cursor]
        if job_ids:
            await self.collection.delete_many({"_id": {"$in": job_ids}})
        return job_ids

    async def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return await self.collection.count_documents(query or {})

    async def count_by_type(self) -> List[Dict[str, Any]]:
        pipeline = [
            {"$group": {"_id": "$job_type", "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
        ]
        return [
            {"job_type": row["_id"], "count": row["count"]}
            async for row in self.collection.aggregate(pipeline)
        ]

    async def total_applications(self) -> int:
        pipeline = [{"$group": {"_id": None, "total": {"$sum": "$application_count"}}}]
        rows = [row async for row in self.collection.aggregate(pipeline)]
        return rows[0]["total"] if rows else 0

    async def recent(self, limit: int = 5) -> List[Dict[str, Any]]:
        cursor = self.collection.find({}).sort("created_at", -1).limit(limit)
        return await cursor.to_list(length=None)
