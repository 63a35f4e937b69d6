from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import Field, field_validator

from app.schemas.analysis import (
    AnalysisSource,
    CamelModel,
    KeywordMatch,
    MissingKeyword,
    ResumeStructure,
    Suggestion,
)


class NoAnalysis(CamelModel):
    kind: Literal["none"] = "none"


class StructureAnalysis(CamelModel):
    kind: Literal["structure"] = "structure"
    structure: ResumeStructure
    analyzed_at: datetime


class AtsAnalysis(CamelModel):
    kind: Literal["ats"] = "ats"
    ats_score: int = Field(ge=0, le=100)
    keyword_match_ratio: float = Field(ge=0.0, le=1.0)
    skill_match_ratio: float = Field(ge=0.0, le=1.0)
    action_verb_count: int = Field(ge=0)
    matched_keywords: list[KeywordMatch] = Field(default_factory=list)
    missing_keywords: list[MissingKeyword] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    readability_score: int = Field(ge=0, le=100)
    analysis_source: AnalysisSource
    structure: ResumeStructure
    analyzed_at: datetime


ResumeAnalysis = Annotated[
    Union[NoAnalysis, StructureAnalysis, AtsAnalysis],
    Field(discriminator="kind"),
]


class ResumeCreate(CamelModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=50000)
    job_description: str = Field(default="", max_length=50000)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value


class ResumeUpdate(CamelModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    content: str | None = Field(default=None, min_length=1, max_length=50000)
    job_description: str | None = Field(default=None, max_length=50000)
    analysis: ResumeAnalysis | None = None
    optimized_content: str | None = Field(default=None, max_length=50000)

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value):
        return value.strip() if isinstance(value, str) else value


class ResumeOptimizeRequest(CamelModel):
    optimization_focus: str | None = Field(default=None, max_length=500)


class ResumeRecord(CamelModel):
    id: str = Field(alias="_id")
    user_id: str
    title: str
    content: str
    job_description: str = ""
    analysis: ResumeAnalysis = Field(default_factory=NoAnalysis)
    optimized_content: str = ""
    created_at: datetime
    updated_at: datetime
