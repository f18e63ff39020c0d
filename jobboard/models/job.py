"""Job posting document helpers for the `jobs` collection."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from bson import ObjectId

JOBS_COLLECTION = "jobs"


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    FREELANCE = "Freelance"
    INTERNSHIP = "Internship"


class WorkLocation(str, Enum):
    REMOTE = "Remote"
    ON_SITE = "On-site"
    HYBRID = "Hybrid"


class ExperienceLevel(str, Enum):
    ENTRY = "Entry"
    MID = "Mid"
    SENIOR = "Senior"


class JobStatus(str, Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"


def new_job_document(data: Dict[str, Any], posted_by: ObjectId) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    doc = {
        "work_location": WorkLocation.ON_SITE.value,
        "experience_level": ExperienceLevel.MID.value,
        "salary": None,
    }
    doc.update(data)
    doc.update(
        {
            "posted_by": posted_by,
            "applicants": [],
            "application_count": 0,
            "is_active": True,
            "status": JobStatus.ACTIVE.value,
            "created_at": now,
            "updated_at": now,
        }
    )
    return doc


def public_job(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a job document for API responses; applicant ids are never exposed."""
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    poster = data.get("posted_by")
    if isinstance(poster, ObjectId):
        data["posted_by"] = str(poster)
    data.pop("applicants", None)
    return data
