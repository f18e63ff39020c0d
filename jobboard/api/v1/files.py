"""Profile picture and resume upload, removal and download endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse

from jobboard.core.deps import (
    CurrentUser,
    get_current_user,
    get_upload_pipeline,
    get_user_store,
    require_self_or_admin,
)
from jobboard.core.errors import NotFound
from jobboard.schemas.files import ProfileFilesResponse, UploadResponse
from jobboard.services.upload_service import UploadPipeline, UploadPurpose, read_upload_files
from jobboard.services.user_store import UserStore
from jobboard.utils.validators import parse_object_id

router = APIRouter()


async def handle_upload(
    request: Request, owner: CurrentUser, pipeline: UploadPipeline, purpose: UploadPurpose
) -> UploadResponse:
    policy = pipeline.policy(purpose)
    async with request.form() as form:
        files = await read_upload_files(form.multi_items(), read_limit=policy.max_bytes + 1)
    result = await pipeline.upload(owner.id, files, purpose)
    return UploadResponse(
        message=f"{policy.label.capitalize()} uploaded successfully",
        path=result.path,
        url=result.url,
        size=result.size,
        content_type=result.content_type,
        replaced=result.replaced,
    )


def download_response(target) -> FileResponse:
    return FileResponse(
        target.path,
        media_type=target.media_type,
        filename=target.filename,
        content_disposition_type="attachment",
    )


@router.post("/profile/picture", response_model=UploadResponse)
async def upload_profile_picture(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Upload or replace the profile picture (form field `profilePicture`, max 5MB)."""
    return await handle_upload(request, current_user, pipeline, UploadPurpose.AVATAR)


@router.post("/profile", response_model=UploadResponse, include_in_schema=False)
async def upload_profile_picture_legacy(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    return await handle_upload(request, current_user, pipeline, UploadPurpose.AVATAR)


@router.post("/profile/resume", response_model=UploadResponse)
async def upload_resume(
    request: Request,
    current_user: CurrentUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Upload or replace the resume (form field `resume`, PDF/DOC/DOCX, max 10MB)."""
    return await handle_upload(request, current_user, pipeline, UploadPurpose.RESUME)


@router.delete("/profile/picture")
async def delete_profile_picture(
    current_user: CurrentUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    await pipeline.remove(current_user.id, UploadPurpose.AVATAR)
    return {"message": "Profile picture deleted successfully"}


@router.delete("/profile/resume")
async def delete_resume(
    current_user: CurrentUser = Depends(get_current_user),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    await pipeline.remove(current_user.id, UploadPurpose.RESUME)
    return {"message": "Resume deleted successfully"}


@router.get("/profile/files", response_model=ProfileFilesResponse)
async def get_profile_files(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    doc = await users.get_by_id(current_user.object_id)
    if not doc:
        raise NotFound("User not found")
    picture = doc.get("profile_picture")
    return ProfileFilesResponse(
        profile_picture=picture,
        profile_picture_url=f"/uploads/{picture}" if picture else None,
        resume=doc.get("resume"),
        has_resume=bool(doc.get("resume")),
    )


@router.get("/profile/resume/download")
async def download_my_resume(
    current_user: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    doc = await users.get_by_id(current_user.object_id)
    if not doc:
        raise NotFound("User not found")
    return download_response(await pipeline.resolve_download(doc, UploadPurpose.RESUME))


@router.get("/{user_id}/resume/download")
async def download_user_resume(
    user_id: str,
    current_user: CurrentUser = Depends(require_self_or_admin),
    users: UserStore = Depends(get_user_store),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
):
    """Download a user's resume (the user themself or an admin)."""
    doc = await users.get_by_id(parse_object_id(user_id))
    if not doc:
        raise NotFound("User not found")
    return download_response(await pipeline.resolve_download(doc, UploadPurpose.RESUME))
