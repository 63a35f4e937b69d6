from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.ai.adapter import AIAnalysisAdapter
from app.core.config import Settings
from app.core.errors import AuthError
from app.core.security import decode_access_token
from app.storage.documents import DocumentStore
from app.storage.users import get_user

_bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_ai_adapter(request: Request) -> AIAnalysisAdapter:
    return request.app.state.ai_adapter


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthError("No token, authorization denied")

    user_id = decode_access_token(credentials.credentials, settings)
    user = get_user(store, user_id)
    if user is None:
        raise AuthError("Token is not valid")
    return user


def get_current_user_id(user: dict = Depends(get_current_user)) -> str:
    return user["_id"]
