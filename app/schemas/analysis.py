from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

FileType = Literal["pdf", "txt", "docx"]
SuggestionCategory = Literal["keywords", "content", "formatting", "grammar"]
Priority = Literal["high", "medium", "low"]
AnalysisSource = Literal["ai", "heuristic"]

FILE_TYPES: tuple[str, ...] = ("pdf", "txt", "docx")
LARGE_TEXT_FIELDS = ("resumeText", "jobDescription")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, protected_namespaces=())

    def to_json(self, **kwargs: Any) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", **kwargs)


class KeywordMatch(CamelModel):
    keyword: str
    category: str = "keyword"
    relevance: float = Field(default=1.0, ge=0.0, le=1.0)


class MissingKeyword(CamelModel):
    keyword: str
    category: str = "keyword"
    importance: float = Field(default=1.0, ge=0.0, le=1.0)


class Suggestion(CamelModel):
    text: str
    category: SuggestionCategory = "content"
    priority: Priority = "medium"


class KeywordAnalysis(CamelModel):
    matched_keywords: list[KeywordMatch] = Field(default_factory=list)
    missing_keywords: list[MissingKeyword] = Field(default_factory=list)
    keyword_match_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    skill_match_ratio: float = Field(default=0.0, ge=0.0, le=1.0)
    action_verb_count: int = Field(default=0, ge=0)


class ResumeSections(CamelModel):
    contact: bool = False
    summary: bool = False
    experience: bool = False
    education: bool = False
    skills: bool = False


class ResumeStructure(CamelModel):
    sections: ResumeSections
    word_count: int = Field(ge=0)
    has_numbers: bool
    has_action_verbs: bool
    completeness: float = Field(ge=0.0, le=100.0)


class AnalyzeRequest(CamelModel):
    # Left untyped so validate_analysis_input reports type and presence
    # errors for every field in one response.
    resume_text: Any = None
    job_description: Any = None
    file_name: Any = None
    file_type: Any = None


class AnalysisResult(CamelModel):
    ats_score: int = Field(ge=0, le=100)
    matched_keywords: list[KeywordMatch]
    missing_keywords: list[MissingKeyword]
    suggestions: list[Suggestion]
    readability_score: int = Field(ge=0, le=100)
    model_confidence: float = Field(ge=0.0, le=100.0)
    improvement_potential: int = Field(ge=0, le=100)
    keyword_match_ratio: float = Field(ge=0.0, le=1.0)
    skill_match_ratio: float = Field(ge=0.0, le=1.0)
    action_verb_count: int = Field(ge=0)


class AnalysisRecord(AnalysisResult):
    id: str = Field(alias="_id")
    user: str
    resume_text: str
    job_description: str
    file_name: str
    file_type: FileType
    analysis_source: AnalysisSource = "heuristic"
    created_at: datetime

    def summary(self) -> dict[str, Any]:
        data = self.to_json()
        for key in LARGE_TEXT_FIELDS:
            data.pop(key, None)
        return data

    def export(self, exported_at: datetime) -> dict[str, Any]:
        data = self.to_json()
        return {
            "fileName": data["fileName"],
            "fileType": data["fileType"],
            "atsScore": data["atsScore"],
            "matchedKeywords": data["matchedKeywords"],
            "missingKeywords": data["missingKeywords"],
            "suggestions": data["suggestions"],
            "readabilityScore": data["readabilityScore"],
            "modelConfidence": data["modelConfidence"],
            "improvementPotential": data["improvementPotential"],
            "createdAt": data["createdAt"],
            "exportedAt": exported_at.isoformat(),
        }


class Pagination(CamelModel):
    current: int
    pages: int
    total: int
    has_next: bool
    has_prev: bool


class ScoreBucket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | str = Field(alias="_id")
    count: int


class AnalysisStats(CamelModel):
    total_analyses: int
    average_score: int
    score_distribution: list[ScoreBucket]
    recent_analyses: list[dict[str, Any]]


class AIRequest(CamelModel):
    resume_text: str = ""
    job_description: str = ""
    optimization_focus: str | None = Field(default=None, max_length=500)
