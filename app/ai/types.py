from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import Field, field_validator

from app.schemas.analysis import CamelModel, KeywordAnalysis, KeywordMatch, MissingKeyword


def _coerce_keyword_entries(value: Any) -> Any:
    if not isinstance(value, list):
        return value
    return [{"keyword": item} if isinstance(item, str) else item for item in value]


class AIAnalysisPayload(CamelModel):
    """Shape the completion API is asked to return for a resume/job pair."""

    matched_keywords: list[KeywordMatch]
    missing_keywords: list[MissingKeyword]
    skills: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    action_verbs: list[str] = Field(default_factory=list)
    keyword_match_ratio: float = Field(ge=0.0, le=1.0)
    skill_match_ratio: float = Field(ge=0.0, le=1.0)
    action_verb_count: int = Field(ge=0)

    @field_validator("matched_keywords", "missing_keywords", mode="before")
    @classmethod
    def _accept_plain_keywords(cls, value: Any) -> Any:
        return _coerce_keyword_entries(value)


class AIKeywordAnalysis(KeywordAnalysis):
    source: Literal["ai"] = "ai"
    skills: list[str] = Field(default_factory=list)
    technologies: list[str] = Field(default_factory=list)
    action_verbs: list[str] = Field(default_factory=list)


class HeuristicKeywordAnalysis(KeywordAnalysis):
    source: Literal["heuristic"] = "heuristic"
    fallback_reason: str = "ai_disabled"


AnalysisOutcome = Annotated[
    Union[AIKeywordAnalysis, HeuristicKeywordAnalysis],
    Field(discriminator="source"),
]


class SectionImprovements(CamelModel):
    summary: str = ""
    experience: str = ""
    skills: str = ""
    education: str = ""


class OptimizationAdvice(CamelModel):
    missing_keywords: list[str] = Field(default_factory=list)
    skills_to_emphasize: list[str] = Field(default_factory=list)
    experience_gaps: list[str] = Field(default_factory=list)
    section_improvements: SectionImprovements = Field(default_factory=SectionImprovements)
    ats_optimization: str = ""
    overall_score: int = Field(default=75, ge=0, le=100)
    source: Literal["ai", "heuristic"] = "ai"
