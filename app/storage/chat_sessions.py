from __future__ import annotations

from typing import Any

from app.core.errors import NotFoundError
from app.schemas.chat import ChatSession, ChatSessionRequest
from app.storage.documents import DocumentStore, utc_now

COLLECTION = "chat_sessions"
HISTORY_LIMIT = 50


def _default_title(payload: ChatSessionRequest) -> str:
    if payload.title:
        return payload.title
    if payload.resume_file_name:
        return payload.resume_file_name[:200]
    return f"Chat {utc_now().strftime('%m/%d/%Y')}"


def create_session(store: DocumentStore, *, owner_id: str, payload: ChatSessionRequest) -> ChatSession:
    document = {
        "userId": owner_id,
        "title": _default_title(payload),
        "messages": [message.to_json() for message in payload.messages],
        "resumeFileName": payload.resume_file_name,
        "atsScore": payload.ats_score,
    }
    stored = store.insert(COLLECTION, owner_id=owner_id, document=document)
    return ChatSession.model_validate(stored)


def append_messages(
    store: DocumentStore,
    session_id: str,
    *,
    owner_id: str,
    payload: ChatSessionRequest,
) -> ChatSession:
    new_messages = [message.to_json() for message in payload.messages]

    def _apply(document: dict[str, Any]) -> dict[str, Any]:
        document["messages"] = list(document.get("messages") or []) + new_messages
        if payload.ats_score is not None:
            document["atsScore"] = payload.ats_score
        return document

    updated = store.update_one(COLLECTION, session_id, owner_id=owner_id, mutate=_apply)
    if updated is None:
        raise NotFoundError("Chat session not found")
    return ChatSession.model_validate(updated)


def save_session(store: DocumentStore, *, owner_id: str, payload: ChatSessionRequest) -> ChatSession:
    if payload.session_id:
        return append_messages(store, payload.session_id, owner_id=owner_id, payload=payload)
    return create_session(store, owner_id=owner_id, payload=payload)


def list_sessions(store: DocumentStore, *, owner_id: str) -> list[ChatSession]:
    documents = store.find(COLLECTION, owner_id=owner_id, sort_by="updated_at", limit=HISTORY_LIMIT)
    return [ChatSession.model_validate(doc) for doc in documents]


def get_session(store: DocumentStore, session_id: str, *, owner_id: str) -> ChatSession:
    document = store.find_one(COLLECTION, session_id, owner_id=owner_id)
    if document is None:
        raise NotFoundError("Chat session not found")
    return ChatSession.model_validate(document)


def delete_session(store: DocumentStore, session_id: str, *, owner_id: str) -> None:
    if store.delete_one(COLLECTION, session_id, owner_id=owner_id) is None:
        raise NotFoundError("Chat session not found")
