"""Startup validation checks for the application."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def check_secret_key(settings) -> bool:
    """
    Check that a token signing secret is configured.

    Returns:
        bool: True if the secret is set, False otherwise
    """
    if not settings.SECRET_KEY:
        logger.error("SECRET_KEY is not set; refusing to start without a token signing secret")
        return False
    if len(settings.SECRET_KEY) < 32:
        logger.warning("SECRET_KEY is shorter than 32 characters")
    return True


def check_upload_dir(settings) -> bool:
    """
    Check that the upload directories exist or can be created.

    Returns:
        bool: True if the upload root is writable, False otherwise
    """
    root = Path(settings.UPLOAD_DIR)
    try:
        for subdir in ("profiles", "resumes"):
            (root / subdir).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Upload directory {root} is not usable: {e}")
        return False

    logger.info(f"✅ Upload directory ready: {root.resolve()}")
    return True


def run_startup_checks(settings) -> None:
    """
    Run all startup checks.

    Raises:
        RuntimeError: If any required check fails
    """
    logger.info("Running startup checks...")

    failures = [
        name
        for name, check in (("secret_key", check_secret_key), ("upload_dir", check_upload_dir))
        if not check(settings)
    ]
    if failures:
        raise RuntimeError(f"Startup checks failed: {', '.join(failures)}")

    logger.info("✅ All startup checks passed")
