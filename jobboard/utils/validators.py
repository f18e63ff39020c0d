"""Validators."""

import re
from typing import List

from bson import ObjectId
from bson.errors import InvalidId

from jobboard.core.errors import ValidationFailed


def validate_password_strength(password: str) -> tuple[bool, List[str]]:
    """Validate password strength."""
    errors = []

    if len(password) < 8:
        errors.append("Password must be at least 8 characters long")

    if not re.search(r"[A-Z]", password):
        errors.append("Password must contain at least one uppercase letter")

    if not re.search(r"[a-z]", password):
        errors.append("Password must contain at least one lowercase letter")

    if len(re.findall(r"\d", password)) < 4:
        errors.append("Password must contain at least four digits")

    if not re.search(r"[!@%$#^&*\-_]", password):
        errors.append("Password must contain at least one special character (!@%$#^&*-_)")

    return len(errors) == 0, errors


def parse_object_id(value: str) -> ObjectId:
    """Parse a path parameter as an ObjectId or raise a 400."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationFailed("Invalid ID format")
