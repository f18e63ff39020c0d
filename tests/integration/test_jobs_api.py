"""Job posting, search, applications and saved jobs."""

import pytest

from tests.conftest import JOB, PDF, auth_headers, register_user, upload_resume


@pytest.fixture
def recruiter(client):
    return register_user(client, "rec@example.com", role="recruiter", first="Rita")


@pytest.fixture
def seeker(client):
    return register_user(client, "seek@example.com", role="jobseeker", first="Sam")


@pytest.fixture
def job(client, recruiter):
    response = client.post("/api/v1/jobs", headers=auth_headers(recruiter[0]), json=JOB)
    assert response.status_code == 201, response.text
    return response.json()


def test_recruiter_creates_job(job, recruiter):
    assert job["posted_by"] == recruiter[1]["id"]
    assert job["application_count"] == 0
    assert job["status"] == "active"


def test_jobseeker_cannot_post(client, seeker):
    response = client.post("/api/v1/jobs", headers=auth_headers(seeker[0]), json=JOB)
    assert response.status_code == 403
    assert response.json()["detail"] == "Access denied. Recruiters only."


def test_list_and_filter_jobs(client, recruiter, job):
    other = dict(JOB, title="Data Analyst", company="Globex", location="Remote Land", job_type="Contract")
    client.post("/api/v1/jobs", headers=auth_headers(recruiter[0]), json=other)

    everything = client.get("/api/v1/jobs").json()
    assert everything["total"] == 2

    contracts = client.get("/api/v1/jobs", params={"jobType": "Contract"}).json()
    assert [j["title"] for j in contracts["jobs"]] == ["Data Analyst"]

    by_search = client.get("/api/v1/jobs", params={"search": "backend"}).json()
    assert [j["id"] for j in by_search["jobs"]] == [job["id"]]

    # Regex metacharacters are matched literally
    assert client.get("/api/v1/jobs", params={"search": ".*"}).json()["total"] == 0


def test_apply_once(client, seeker, job):
    url = f"/api/v1/jobs/{job['id']}/apply"

    assert client.post(url, headers=auth_headers(seeker[0])).status_code == 200
    again = client.post(url, headers=auth_headers(seeker[0]))
    assert again.status_code == 409

    detail = client.get(f"/api/v1/jobs/{job['id']}", headers=auth_headers(seeker[0])).json()
    assert detail["application_count"] == 1
    assert detail["has_applied"] is True

    applied = client.get("/api/v1/users/jobs/applied", headers=auth_headers(seeker[0])).json()
    assert [j["id"] for j in applied] == [job["id"]]


def test_recruiter_cannot_apply(client, recruiter, job):
    response = client.post(f"/api/v1/jobs/{job['id']}/apply", headers=auth_headers(recruiter[0]))
    assert response.status_code == 403


def test_apply_to_missing_or_closed_job(client, seeker, recruiter, job):
    missing = client.post("/api/v1/jobs/65a000000000000000000000/apply", headers=auth_headers(seeker[0]))
    assert missing.status_code == 404

    bad_id = client.post("/api/v1/jobs/not-an-id/apply", headers=auth_headers(seeker[0]))
    assert bad_id.status_code == 400

    client.put(f"/api/v1/jobs/{job['id']}", headers=auth_headers(recruiter[0]), json={"status": "closed"})
    closed = client.post(f"/api/v1/jobs/{job['id']}/apply", headers=auth_headers(seeker[0]))
    assert closed.status_code == 403


def test_save_toggle(client, seeker, job):
    url = f"/api/v1/jobs/{job['id']}/save"

    first = client.post(url, headers=auth_headers(seeker[0])).json()
    assert first["saved"] is True
    saved = client.get("/api/v1/users/jobs/saved", headers=auth_headers(seeker[0])).json()
    assert [j["id"] for j in saved] == [job["id"]]

    second = client.post(url, headers=auth_headers(seeker[0])).json()
    assert second["saved"] is False
    assert client.get("/api/v1/users/jobs/saved", headers=auth_headers(seeker[0])).json() == []


def test_only_owner_manages_job(client, job):
    other_token, _ = register_user(client, "rec2@example.com", role="recruiter", first="Rex")

    update = client.put(f"/api/v1/jobs/{job['id']}", headers=auth_headers(other_token), json={"title": "Hijacked"})
    assert update.status_code == 403
    delete = client.delete(f"/api/v1/jobs/{job['id']}", headers=auth_headers(other_token))
    assert delete.status_code == 403
    applicants = client.get(f"/api/v1/jobs/{job['id']}/applicants", headers=auth_headers(other_token))
    assert applicants.status_code == 403


def test_owner_updates_and_deletes_job(client, recruiter, seeker, job):
    client.post(f"/api/v1/jobs/{job['id']}/save", headers=auth_headers(seeker[0]))

    updated = client.put(f"/api/v1/jobs/{job['id']}", headers=auth_headers(recruiter[0]), json={"title": "Staff Engineer"})
    assert updated.status_code == 200
    assert updated.json()["title"] == "Staff Engineer"

    mine = client.get("/api/v1/jobs/my-listings", headers=auth_headers(recruiter[0])).json()
    assert [j["id"] for j in mine] == [job["id"]]

    assert client.delete(f"/api/v1/jobs/{job['id']}", headers=auth_headers(recruiter[0])).status_code == 200
    assert client.get(f"/api/v1/jobs/{job['id']}").status_code == 404
    assert client.get("/api/v1/users/jobs/saved", headers=auth_headers(seeker[0])).json() == []


def test_applicants_and_resume_download(client, recruiter, seeker, job):
    upload_resume(client, seeker[0])
    client.post(f"/api/v1/jobs/{job['id']}/apply", headers=auth_headers(seeker[0]))

    applicants = client.get(f"/api/v1/jobs/{job['id']}/applicants", headers=auth_headers(recruiter[0]))
    assert applicants.status_code == 200
    assert [a["id"] for a in applicants.json()] == [seeker[1]["id"]]
    assert "password_hash" not in applicants.json()[0]

    resume = client.get(
        f"/api/v1/jobs/{job['id']}/applicants/{seeker[1]['id']}/resume",
        headers=auth_headers(recruiter[0]),
    )
    assert resume.status_code == 200
    assert resume.content == PDF
    assert resume.headers["content-disposition"].startswith("attachment")


def test_resume_of_non_applicant_is_not_found(client, recruiter, job):
    outsider_token, outsider = register_user(client, "out@example.com", first="Otto")
    upload_resume(client, outsider_token)

    response = client.get(
        f"/api/v1/jobs/{job['id']}/applicants/{outsider['id']}/resume",
        headers=auth_headers(recruiter[0]),
    )
    assert response.status_code == 404
