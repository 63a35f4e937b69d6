import logging

from fastapi import APIRouter, Depends, status

from app.api.deps import get_current_user, get_settings, get_store
from app.core.config import Settings
from app.core.errors import ValidationError
from app.core.security import create_access_token
from app.schemas.auth import LoginRequest, RegisterRequest
from app.storage.documents import DocumentStore
from app.storage.users import authenticate, create_user, public_user

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/auth/register", status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
):
    name = payload.display_name()
    if not name:
        raise ValidationError.single("name", "Name is required")

    user = create_user(store, name=name, email=payload.email, password=payload.password)
    logger.info("user_registered user_id=%s", user["_id"])
    return {
        "message": "User registered successfully",
        "token": create_access_token(user["_id"], settings),
        "user": public_user(user),
    }


@router.post("/auth/login")
def login(
    payload: LoginRequest,
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
):
    user = authenticate(store, email=payload.email, password=payload.password)
    if user is None:
        logger.info("login_failed")
        raise ValidationError.single("credentials", "Invalid credentials")

    return {
        "message": "Login successful",
        "token": create_access_token(user["_id"], settings),
        "user": public_user(user),
    }


@router.get("/auth/me")
def me(user: dict = Depends(get_current_user)):
    return {"success": True, "user": public_user(user)}
