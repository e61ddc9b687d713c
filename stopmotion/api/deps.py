# File: stopmotion/api/deps.py

from fastapi import HTTPException, Request, status

from stopmotion.core.errors import (
    DuplicateUsername,
    IngestCancelled,
    InvalidCredentials,
    InvalidDirectory,
    InvalidUsername,
    NotFound,
    StorageFailure,
    StoreError,
)
from stopmotion.services.project_store import ProjectStore

STATUS_BY_ERROR = {
    DuplicateUsername: status.HTTP_409_CONFLICT,
    InvalidUsername: status.HTTP_422_UNPROCESSABLE_ENTITY,
    NotFound: status.HTTP_404_NOT_FOUND,
    InvalidCredentials: status.HTTP_401_UNAUTHORIZED,
    InvalidDirectory: status.HTTP_400_BAD_REQUEST,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
    IngestCancelled: status.HTTP_409_CONFLICT,
}


def get_store(request: Request) -> ProjectStore:
    """
    FastAPI dependency that provides the application's ProjectStore.

    Usage in route functions:
        store: ProjectStore = Depends(get_store)
    """
    return request.app.state.store


def to_http_error(exc: StoreError) -> HTTPException:
    code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return HTTPException(status_code=code, detail=str(exc))
