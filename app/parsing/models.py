from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SourceType = Literal["pdf", "txt", "docx"]


class ExtractedText(BaseModel):
    text: str
    source_type: SourceType
    parser: str
    warnings: list[str] = Field(default_factory=list)


class StagedFile(BaseModel):
    path: str
    file_name: str
    content_type: str
    size: int
