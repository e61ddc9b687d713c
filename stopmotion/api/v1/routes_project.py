# File: stopmotion/api/v1/routes_project.py

from fastapi import APIRouter, Depends, Response, status

from stopmotion.api.deps import get_store, to_http_error
from stopmotion.core.errors import StoreError
from stopmotion.schemas.project import (
    ProjectCreate,
    ProjectCreated,
    ProjectImageRead,
    ProjectSummary,
)
from stopmotion.services.project_store import ProjectStore

router = APIRouter()

MEDIA_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
}


@router.get(
    "/",
    response_model=list[ProjectSummary],
    summary="List projects owned by a user",
)
def list_projects(user_id: int, store: ProjectStore = Depends(get_store)):
    try:
        return store.list_projects_for_user(user_id)
    except StoreError as e:
        raise to_http_error(e)


@router.post(
    "/",
    response_model=ProjectCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a project from a folder of images",
)
def create_project(
    payload: ProjectCreate,
    store: ProjectStore = Depends(get_store),
):
    """
    Import every jpg/jpeg/png file in `source_directory`.

    Files that cannot be decoded are listed in `skipped`; the request still
    succeeds.
    """
    try:
        return store.create_project(
            payload.owner_username,
            payload.name,
            payload.source_directory,
        )
    except StoreError as e:
        raise to_http_error(e)


@router.get("/{project_id}/images", response_model=list[ProjectImageRead])
def list_images(project_id: int, store: ProjectStore = Depends(get_store)):
    try:
        return store.list_project_images(project_id)
    except StoreError as e:
        raise to_http_error(e)


@router.get("/{project_id}/images/{idx}")
def get_image(project_id: int, idx: int, store: ProjectStore = Depends(get_store)):
    try:
        fmt, payload = store.get_image_payload(project_id, idx)
    except StoreError as e:
        raise to_http_error(e)
    return Response(content=payload, media_type=MEDIA_TYPES.get(fmt, "application/octet-stream"))
