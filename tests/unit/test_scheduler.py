"""Tests for the periodic job wiring."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from jobboard.core.scheduler import (
    FILE_SWEEP_JOB_ID,
    create_scheduler,
    get_scheduler_status,
    run_file_sweep,
    setup_jobs,
)
from jobboard.services.file_sweeper import SweepReport


def test_setup_jobs_registers_the_sweep():
    scheduler = create_scheduler()
    sweeper = MagicMock()

    setup_jobs(scheduler, sweeper, interval_minutes=30)

    status = get_scheduler_status(scheduler)
    assert status["running"] is False
    assert status["total_jobs"] == 1
    assert status["jobs"][0]["id"] == FILE_SWEEP_JOB_ID
    assert "0:30:00" in status["jobs"][0]["trigger"]


@pytest.mark.asyncio
async def test_run_file_sweep_returns_report():
    sweeper = MagicMock()
    sweeper.run = AsyncMock(return_value=SweepReport(deleted=2, skipped=1))

    result = await run_file_sweep(sweeper)

    assert result == {"deleted": 2, "errored": 0, "skipped": 1, "moved": 0}
