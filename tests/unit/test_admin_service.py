"""Tests for administrative operations."""

import pytest
import pytest_asyncio

from jobboard.core.errors import Forbidden, NotFound
from jobboard.core.security import Role
from jobboard.services.admin_service import AdminService

JOB_DATA = {
    "title": "Backend Engineer",
    "company": "Acme",
    "description": "Build APIs",
    "requirements": "Python",
    "location": "Berlin",
    "job_type": "Full-time",
    "contact_email": "jobs@acme.example",
}


@pytest.fixture
def service(user_store, job_store, storage):
    return AdminService(user_store, job_store, storage)


async def make_user(user_store, email, role):
    return await user_store.create(
        name={"first": "Some", "last": "One"},
        email=email,
        password_hash="x",
        role=role,
    )


@pytest_asyncio.fixture
async def people(user_store):
    return {
        "admin": await make_user(user_store, "admin@example.com", Role.ADMIN),
        "recruiter": await make_user(user_store, "rec@example.com", Role.RECRUITER),
        "seeker": await make_user(user_store, "seek@example.com", Role.JOBSEEKER),
    }


@pytest.mark.asyncio
async def test_delete_recruiter_cascades(service, user_store, job_store, storage, people):
    recruiter, seeker = people["recruiter"], people["seeker"]
    job = await job_store.create(JOB_DATA, recruiter["_id"])
    await job_store.add_applicant(job["_id"], seeker["_id"])
    await user_store.add_applied_job(seeker["_id"], job["_id"])
    await user_store.toggle_saved_job(seeker["_id"], job["_id"])

    await storage.write("profiles/avatar-rec.png", b"img")
    await user_store.set_file_path(recruiter["_id"], "profile_picture", "profiles/avatar-rec.png")

    summary = await service.delete_user(str(people["admin"]["_id"]), recruiter["_id"])

    assert summary == {"applications_removed": 0, "jobs_deleted": 1, "files_deleted": 1}
    assert await user_store.get_by_id(recruiter["_id"]) is None
    assert await job_store.get(job["_id"]) is None
    assert not (storage.root / "profiles/avatar-rec.png").exists()

    remaining = await user_store.get_by_id(seeker["_id"])
    assert remaining["applied_jobs"] == []
    assert remaining["saved_jobs"] == []


@pytest.mark.asyncio
async def test_delete_jobseeker_removes_applications(service, user_store, job_store, people):
    recruiter, seeker = people["recruiter"], people["seeker"]
    job = await job_store.create(JOB_DATA, recruiter["_id"])
    await job_store.add_applicant(job["_id"], seeker["_id"])

    summary = await service.delete_user(str(people["admin"]["_id"]), seeker["_id"])

    assert summary["applications_removed"] == 1
    job = await job_store.get(job["_id"])
    assert job["applicants"] == []
    assert job["application_count"] == 0


@pytest.mark.asyncio
async def test_delete_tolerates_missing_files(service, user_store, people):
    seeker = people["seeker"]
    await user_store.set_file_path(seeker["_id"], "resume", "resumes/gone.pdf")

    summary = await service.delete_user(str(people["admin"]["_id"]), seeker["_id"])

    assert summary["files_deleted"] == 1
    assert await user_store.get_by_id(seeker["_id"]) is None


@pytest.mark.asyncio
async def test_cannot_delete_self_or_unknown(service, people):
    admin_id = str(people["admin"]["_id"])
    with pytest.raises(Forbidden):
        await service.delete_user(admin_id, people["admin"]["_id"])

    await service.delete_user(admin_id, people["seeker"]["_id"])
    with pytest.raises(NotFound):
        await service.delete_user(admin_id, people["seeker"]["_id"])


@pytest.mark.asyncio
async def test_change_role_keeps_admin_flag_in_sync(service, people):
    admin_id = str(people["admin"]["_id"])

    updated = await service.change_role(admin_id, people["seeker"]["_id"], Role.RECRUITER)
    assert updated["role"] == "recruiter"
    assert updated["is_admin"] is False

    promoted = await service.change_role(admin_id, people["seeker"]["_id"], Role.ADMIN)
    assert promoted["is_admin"] is True

    with pytest.raises(Forbidden):
        await service.change_role(admin_id, people["admin"]["_id"], Role.JOBSEEKER)


@pytest.mark.asyncio
async def test_toggle_status(service, people):
    admin_id = str(people["admin"]["_id"])

    first = await service.toggle_status(admin_id, people["seeker"]["_id"])
    second = await service.toggle_status(admin_id, people["seeker"]["_id"])
    assert first["is_active"] is False
    assert second["is_active"] is True

    with pytest.raises(Forbidden):
        await service.toggle_status(admin_id, people["admin"]["_id"])


@pytest.mark.asyncio
async def test_stats_counts(service, job_store, people):
    await job_store.create(JOB_DATA, people["recruiter"]["_id"])

    stats = await service.stats()

    assert stats["users"]["total"] == 3
    assert stats["users"]["admins"] == 1
    assert stats["jobs"]["total"] == 1
    assert stats["jobs"]["active"] == 1
    assert stats["applications"]["total"] == 0
