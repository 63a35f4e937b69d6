from __future__ import annotations

from slowapi import Limiter
from slowapi.util import get_remote_address

from app.core.config import Settings

limiter = Limiter(key_func=get_remote_address)

_current_limit = "30/minute"


def configure_rate_limit(settings: Settings) -> None:
    global _current_limit
    _current_limit = settings.rate_limit
    limiter.enabled = settings.rate_limit_enabled


def current_rate_limit() -> str:
    return _current_limit


def rate_limit():
    return limiter.limit(current_rate_limit)
