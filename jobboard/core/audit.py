"""Auth observability: every admission and rejection is reported here."""

from typing import Optional

import sentry_sdk
import structlog
from fastapi import Request

logger = structlog.get_logger("jobboard.audit")


def record_auth_event(
    request: Request,
    outcome: str,
    reason: Optional[str] = None,
    user_id: Optional[str] = None,
    role: Optional[str] = None,
) -> None:
    """
    Log an auth decision and leave a Sentry breadcrumb.

    Reporting problems are logged and never propagate to the request.
    """
    event = {
        "outcome": outcome,
        "reason": reason,
        "user_id": user_id,
        "role": role,
        "method": request.method,
        "endpoint": request.url.path,
        "client": request.client.host if request.client else None,
    }
    try:
        if outcome == "admitted":
            logger.debug("auth_admitted", **event)
        else:
            logger.info("auth_rejected", **event)
        sentry_sdk.add_breadcrumb(
            category="auth",
            message=f"{outcome}: {request.method} {request.url.path}",
            level="info" if outcome == "admitted" else "warning",
            data=event,
        )
    except Exception as e:
        logger.warning("auth_event_not_recorded", error=str(e))
