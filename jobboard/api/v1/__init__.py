"""API v1 routes."""

from fastapi import APIRouter

from jobboard.api.v1 import admin, files, jobs, users

api_router = APIRouter()

# Literal file paths (/users/profile/...) are registered before /users/{user_id}
api_router.include_router(files.router, prefix="/users", tags=["Profile Files"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["Jobs"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
