from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import Field, field_validator

from app.schemas.analysis import CamelModel

ChatRole = Literal["user", "assistant"]

_SESSION_LIST_FIELDS = ("_id", "title", "resumeFileName", "atsScore", "createdAt", "updatedAt")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChatMessage(CamelModel):
    role: ChatRole
    content: str = Field(max_length=20000)
    timestamp: datetime = Field(default_factory=_utc_now)


class ChatSessionRequest(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    messages: list[ChatMessage]
    resume_file_name: str | None = None
    ats_score: float | None = Field(default=None, ge=0, le=100)
    session_id: str | None = Field(default=None, pattern=r"^[0-9a-f]{24}$")

    @field_validator("title", "resume_file_name", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value


class ChatSession(CamelModel):
    id: str = Field(alias="_id")
    user_id: str
    title: str
    messages: list[ChatMessage] = Field(default_factory=list)
    resume_file_name: str | None = None
    ats_score: float | None = None
    created_at: datetime
    updated_at: datetime

    def summary(self) -> dict[str, Any]:
        data = self.to_json()
        return {key: data.get(key) for key in _SESSION_LIST_FIELDS}
