"""User document helpers for the `users` collection."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jobboard.core.security import Role

USERS_COLLECTION = "users"

DEFAULT_BIO = "No bio provided"
DEFAULT_PROFESSION = "Not specified"

# Fields that must never leave the API
PRIVATE_FIELDS = ("password_hash",)


def role_fields(role: Role | str) -> Dict[str, Any]:
    """Role and admin flag, kept in lockstep on every write."""
    role = Role(role)
    return {"role": role.value, "is_admin": role == Role.ADMIN}


def new_user_document(
    name: Dict[str, str],
    email: str,
    password_hash: str,
    role: Role | str = Role.JOBSEEKER,
    bio: Optional[str] = None,
    profession: Optional[str] = None,
) -> Dict[str, Any]:
    now = datetime.now(timezone.utc)
    doc = {
        "name": {
            "first": name.get("first", ""),
            "middle": name.get("middle") or "",
            "last": name.get("last", ""),
        },
        "email": email.lower(),
        "password_hash": password_hash,
        "is_active": True,
        "profile_picture": None,
        "resume": None,
        "bio": bio or DEFAULT_BIO,
        "profession": profession or DEFAULT_PROFESSION,
        "saved_jobs": [],
        "applied_jobs": [],
        "created_at": now,
        "updated_at": now,
    }
    doc.update(role_fields(role))
    return doc


def full_name(doc: Dict[str, Any]) -> str:
    name = doc.get("name") or {}
    parts = [name.get("first"), name.get("middle"), name.get("last")]
    return " ".join(part for part in parts if part)


def public_user(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Serialize a user document for API responses."""
    data = {key: value for key, value in doc.items() if key not in PRIVATE_FIELDS}
    data["id"] = str(data.pop("_id"))
    data["saved_jobs"] = [str(job_id) for job_id in data.get("saved_jobs", [])]
    data["applied_jobs"] = [str(job_id) for job_id in data.get("applied_jobs", [])]
    return data
