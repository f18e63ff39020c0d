"""Tests for the upload pipeline."""

import re
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio
from pymongo.errors import PyMongoError

from jobboard.core.errors import NotFound, PersistenceFailed, UploadRejected, UploadRejectReason
from jobboard.core.security import Role
from jobboard.services.upload_service import (
    MB,
    IncomingFile,
    UploadPipeline,
    UploadPurpose,
    generate_filename,
)


def png(name="avatar.png", field="profilePicture", size=128, content_type="image/png"):
    return IncomingFile(field_name=field, filename=name, content_type=content_type, data=b"\x89" * size)


def pdf(name="cv.pdf", field="resume", size=256, content_type="application/pdf"):
    return IncomingFile(field_name=field, filename=name, content_type=content_type, data=b"%" * size)


@pytest.fixture
def pipeline(storage, user_store):
    return UploadPipeline(storage, user_store)


@pytest_asyncio.fixture
async def owner(user_store):
    doc = await user_store.create(
        name={"first": "Ann", "last": "Owner"},
        email="ann@example.com",
        password_hash="x",
        role=Role.JOBSEEKER,
    )
    return str(doc["_id"])


def stored_files(storage, subdir):
    return sorted(p.name for p in (storage.root / subdir).iterdir())


def test_generate_filename_format():
    name = generate_filename(UploadPurpose.AVATAR, "abc123", ".PNG")
    assert re.fullmatch(r"avatar-abc123-\d{13}-\d{1,9}\.png", name)


@pytest.mark.asyncio
async def test_upload_writes_file_and_sets_reference(pipeline, storage, user_store, owner):
    result = await pipeline.upload(owner, [png()], UploadPurpose.AVATAR)

    assert result.path.startswith("profiles/avatar-" + owner)
    assert result.url == f"/uploads/{result.path}"
    assert result.replaced is False
    assert (storage.root / result.path).read_bytes() == b"\x89" * 128

    doc = await user_store.get_by_id(owner)
    assert doc["profile_picture"] == result.path


@pytest.mark.asyncio
async def test_replacement_leaves_exactly_one_file(pipeline, storage, user_store, owner):
    first = await pipeline.upload(owner, [pdf()], UploadPurpose.RESUME)
    second = await pipeline.upload(owner, [pdf(name="cv (2).pdf")], UploadPurpose.RESUME)

    assert second.replaced is True
    assert stored_files(storage, "resumes") == [second.path.split("/")[1]]
    assert not (storage.root / first.path).exists()
    assert (await user_store.get_by_id(owner))["resume"] == second.path


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "incoming, reason",
    [
        (pdf(size=10 * MB + 1), UploadRejectReason.TOO_LARGE),
        (pdf(content_type="text/plain"), UploadRejectReason.INVALID_TYPE),
        (pdf(name="../../evil.pdf"), UploadRejectReason.INVALID_FILENAME),
        (pdf(name="cv.exe"), UploadRejectReason.INVALID_FILENAME),
        (pdf(name="résumé.pdf"), UploadRejectReason.INVALID_FILENAME),
        (pdf(field="document"), UploadRejectReason.UNKNOWN_FIELD),
    ],
)
async def test_rejected_uploads_write_nothing(pipeline, storage, user_store, owner, incoming, reason):
    with pytest.raises(UploadRejected) as exc_info:
        await pipeline.upload(owner, [incoming], UploadPurpose.RESUME)

    assert exc_info.value.reason is reason
    assert stored_files(storage, "resumes") == []
    assert (await user_store.get_by_id(owner))["resume"] is None


@pytest.mark.asyncio
async def test_avatar_size_limit_is_5mb(pipeline, owner):
    with pytest.raises(UploadRejected) as exc_info:
        await pipeline.upload(owner, [png(size=5 * MB + 1)], UploadPurpose.AVATAR)
    assert exc_info.value.reason is UploadRejectReason.TOO_LARGE
    assert "5MB" in exc_info.value.message


@pytest.mark.asyncio
async def test_missing_and_extra_files(pipeline, owner):
    with pytest.raises(UploadRejected) as exc_info:
        await pipeline.upload(owner, [], UploadPurpose.AVATAR)
    assert exc_info.value.reason is UploadRejectReason.MISSING_FILE

    with pytest.raises(UploadRejected) as exc_info:
        await pipeline.upload(owner, [png(), png(name="b.png")], UploadPurpose.AVATAR)
    assert exc_info.value.reason is UploadRejectReason.UNKNOWN_FIELD


@pytest.mark.asyncio
async def test_avatar_field_alias_is_accepted(pipeline, owner):
    result = await pipeline.upload(owner, [png(field="avatar")], UploadPurpose.AVATAR)
    assert result.path.startswith("profiles/")


@pytest.mark.asyncio
async def test_failed_reference_update_removes_new_file(pipeline, storage, user_store, owner):
    with patch.object(user_store, "set_file_path", AsyncMock(side_effect=PyMongoError("down"))):
        with pytest.raises(PersistenceFailed):
            await pipeline.upload(owner, [png()], UploadPurpose.AVATAR)

    assert stored_files(storage, "profiles") == []


@pytest.mark.asyncio
async def test_upload_for_missing_user_removes_new_file(pipeline, storage):
    with pytest.raises(PersistenceFailed):
        await pipeline.upload("65a000000000000000000000", [png()], UploadPurpose.AVATAR)
    assert stored_files(storage, "profiles") == []


@pytest.mark.asyncio
async def test_old_file_delete_failure_does_not_abort(pipeline, storage, owner):
    first = await pipeline.upload(owner, [png()], UploadPurpose.AVATAR)

    with patch("jobboard.services.file_storage.aiofiles.os.remove",
               AsyncMock(side_effect=PermissionError("locked"))):
        second = await pipeline.upload(owner, [png(name="new.png")], UploadPurpose.AVATAR)

    assert second.replaced is False
    assert (storage.root / first.path).exists()
    assert (storage.root / second.path).exists()


@pytest.mark.asyncio
async def test_remove_twice(pipeline, storage, user_store, owner):
    result = await pipeline.upload(owner, [png()], UploadPurpose.AVATAR)

    await pipeline.remove(owner, UploadPurpose.AVATAR)
    assert not (storage.root / result.path).exists()
    assert (await user_store.get_by_id(owner))["profile_picture"] is None

    with pytest.raises(NotFound):
        await pipeline.remove(owner, UploadPurpose.AVATAR)


@pytest.mark.asyncio
async def test_resolve_download(pipeline, storage, user_store, owner):
    with pytest.raises(NotFound):
        await pipeline.resolve_download(await user_store.get_by_id(owner), UploadPurpose.RESUME)

    result = await pipeline.upload(owner, [pdf()], UploadPurpose.RESUME)
    doc = await user_store.get_by_id(owner)
    target = await pipeline.resolve_download(doc, UploadPurpose.RESUME)
    assert target.path == storage.root / result.path
    assert target.media_type == "application/pdf"
    assert target.filename == "Ann_Owner_Resume.pdf"

    # Dangling reference
    (storage.root / result.path).unlink()
    with pytest.raises(NotFound):
        await pipeline.resolve_download(doc, UploadPurpose.RESUME)
