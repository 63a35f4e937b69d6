from fastapi import APIRouter, Depends

from app.api.deps import get_current_user_id, get_store
from app.schemas.chat import ChatSessionRequest
from app.storage.chat_sessions import delete_session, get_session, list_sessions, save_session
from app.storage.documents import DocumentStore

router = APIRouter()


@router.get("/chat/history")
def chat_history(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    sessions = list_sessions(store, owner_id=user_id)
    return {"success": True, "sessions": [session.summary() for session in sessions]}


@router.get("/chat/{session_id}")
def read_chat_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    session = get_session(store, session_id, owner_id=user_id)
    return {"success": True, "session": session.to_json()}


@router.post("/chat")
def save_chat_session(
    payload: ChatSessionRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    session = save_session(store, owner_id=user_id, payload=payload)
    return {"success": True, "session": session.to_json()}


@router.delete("/chat/{session_id}")
def delete_chat_session(
    session_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    delete_session(store, session_id, owner_id=user_id)
    return {"success": True, "message": "Chat session deleted successfully"}
