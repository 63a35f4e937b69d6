from __future__ import annotations

import re
from datetime import datetime

from pydantic import Field, field_validator

from app.schemas.analysis import CamelModel

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def _normalize_email(value: str) -> str:
    email = (value or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValueError("Please provide a valid email")
    return email


class RegisterRequest(CamelModel):
    name: str | None = Field(default=None, max_length=120)
    first_name: str | None = Field(default=None, max_length=60)
    last_name: str | None = Field(default=None, max_length=60)
    email: str
    password: str = Field(min_length=6, max_length=128)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _normalize_email(value)

    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        parts = [part.strip() for part in (self.first_name, self.last_name) if part and part.strip()]
        return " ".join(parts)


class LoginRequest(CamelModel):
    email: str
    password: str = Field(min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserOut(CamelModel):
    id: str = Field(alias="_id")
    name: str = ""
    email: str
    created_at: datetime
