# File: stopmotion/api/v1/routes_auth.py

"""
Auth API routes: registration, login and username availability for the
login/registration screens.
"""

from fastapi import APIRouter, Depends, status

from stopmotion.api.deps import get_store, to_http_error
from stopmotion.core.errors import StoreError
from stopmotion.schemas.user import LoginRequest, UserCreate, UserRead
from stopmotion.services.project_store import ProjectStore

router = APIRouter()


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
def register(payload: UserCreate, store: ProjectStore = Depends(get_store)):
    try:
        store.register_user(payload.username, payload.password)
        return store.get_user(payload.username)
    except StoreError as e:
        raise to_http_error(e)


@router.post("/login", response_model=UserRead, summary="Check a username/password pair")
def login(payload: LoginRequest, store: ProjectStore = Depends(get_store)):
    try:
        store.authenticate(payload.username, payload.password)
        return store.get_user(payload.username)
    except StoreError as e:
        raise to_http_error(e)


@router.get("/username-available")
def username_available(username: str, store: ProjectStore = Depends(get_store)):
    try:
        return {"username": username, "available": store.is_username_available(username)}
    except StoreError as e:
        raise to_http_error(e)
