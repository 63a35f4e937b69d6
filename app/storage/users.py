from __future__ import annotations

from typing import Any

from app.core.errors import ValidationError
from app.core.security import hash_password, verify_password
from app.schemas.auth import UserOut
from app.storage.documents import DocumentStore, DuplicateKeyError, is_document_id


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    return UserOut.model_validate(user).to_json()


def create_user(store: DocumentStore, *, name: str, email: str, password: str) -> dict[str, Any]:
    document = {
        "name": name,
        "email": email,
        "passwordHash": hash_password(password),
    }
    try:
        return store.insert_user(document)
    except DuplicateKeyError as exc:
        raise ValidationError.single("email", "User already exists") from exc


def authenticate(store: DocumentStore, *, email: str, password: str) -> dict[str, Any] | None:
    user = store.find_user_by_email(email)
    if user is None or not verify_password(password, user.get("passwordHash")):
        return None
    return user


def get_user(store: DocumentStore, user_id: str) -> dict[str, Any] | None:
    if not is_document_id(user_id):
        return None
    return store.find_user_by_id(user_id)
