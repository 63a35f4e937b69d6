from __future__ import annotations

import math
from typing import Any

from app.analysis.scoring import round_half_up
from app.core.errors import NotFoundError, ValidationError
from app.schemas.analysis import (
    FILE_TYPES,
    AnalysisRecord,
    AnalysisResult,
    AnalysisStats,
    Pagination,
    ScoreBucket,
)
from app.storage.documents import DocumentStore

COLLECTION = "analyses"
SCORE_BUCKET_BOUNDARIES = (0, 25, 50, 75, 100)
RECENT_ANALYSES_LIMIT = 5
MAX_PAGE_LIMIT = 100
# Keeps the OFFSET within sqlite's 64-bit integer range.
MAX_PAGE = 1_000_000


def _check_text(errors: list[dict[str, str]], field: str, value: Any, required_message: str) -> None:
    if value is not None and not isinstance(value, str):
        errors.append({"field": field, "message": "Input should be a valid string"})
    elif not (value or "").strip():
        errors.append({"field": field, "message": required_message})


def validate_analysis_input(
    *,
    resume_text: Any,
    job_description: Any,
    file_name: Any,
    file_type: Any,
) -> None:
    """Collect every invalid field before raising, wrong types included."""
    errors: list[dict[str, str]] = []
    _check_text(errors, "resumeText", resume_text, "Resume text is required")
    _check_text(errors, "jobDescription", job_description, "Job description is required")
    _check_text(errors, "fileName", file_name, "File name is required")
    if not isinstance(file_type, str) or file_type not in FILE_TYPES:
        errors.append({"field": "fileType", "message": "File type must be pdf, docx, or txt"})
    if errors:
        raise ValidationError(errors)


def create_analysis(
    store: DocumentStore,
    *,
    owner_id: str,
    resume_text: str,
    job_description: str,
    file_name: str,
    file_type: str,
    result: AnalysisResult,
    analysis_source: str,
) -> AnalysisRecord:
    validate_analysis_input(
        resume_text=resume_text,
        job_description=job_description,
        file_name=file_name,
        file_type=file_type,
    )
    document = {
        "user": owner_id,
        "resumeText": resume_text,
        "jobDescription": job_description,
        "fileName": file_name.strip(),
        "fileType": file_type,
        "analysisSource": analysis_source,
        **result.to_json(),
    }
    stored = store.insert(COLLECTION, owner_id=owner_id, document=document)
    return AnalysisRecord.model_validate(stored)


def get_analysis(store: DocumentStore, analysis_id: str, *, owner_id: str) -> AnalysisRecord:
    document = store.find_one(COLLECTION, analysis_id, owner_id=owner_id)
    if document is None:
        raise NotFoundError("Analysis not found")
    return AnalysisRecord.model_validate(document)


def delete_analysis(store: DocumentStore, analysis_id: str, *, owner_id: str) -> None:
    if store.delete_one(COLLECTION, analysis_id, owner_id=owner_id) is None:
        raise NotFoundError("Analysis not found")


def list_recent_analyses(
    store: DocumentStore, *, owner_id: str, limit: int | None = 20
) -> list[AnalysisRecord]:
    documents = store.find(COLLECTION, owner_id=owner_id, limit=limit)
    return [AnalysisRecord.model_validate(doc) for doc in documents]


def list_analyses_page(
    store: DocumentStore,
    *,
    owner_id: str,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[AnalysisRecord], Pagination]:
    page = min(MAX_PAGE, max(1, int(page)))
    limit = min(MAX_PAGE_LIMIT, max(1, int(limit)))
    documents = store.find(COLLECTION, owner_id=owner_id, skip=(page - 1) * limit, limit=limit)
    total = store.count(COLLECTION, owner_id=owner_id)
    pages = math.ceil(total / limit)
    pagination = Pagination(
        current=page,
        pages=pages,
        total=total,
        has_next=page < pages,
        has_prev=page > 1,
    )
    return [AnalysisRecord.model_validate(doc) for doc in documents], pagination


def _score_distribution(scores: list[int]) -> list[ScoreBucket]:
    counts: dict[int | str, int] = {}
    lower_bounds = SCORE_BUCKET_BOUNDARIES[:-1]
    for score in scores:
        bucket: int | str = "Other"
        for lower, upper in zip(lower_bounds, SCORE_BUCKET_BOUNDARIES[1:]):
            if lower <= score < upper:
                bucket = lower
                break
        counts[bucket] = counts.get(bucket, 0) + 1

    ordered: list[ScoreBucket] = [
        ScoreBucket(id=lower, count=counts[lower]) for lower in lower_bounds if lower in counts
    ]
    if "Other" in counts:
        ordered.append(ScoreBucket(id="Other", count=counts["Other"]))
    return ordered


def analysis_stats(store: DocumentStore, *, owner_id: str) -> AnalysisStats:
    records = list_recent_analyses(store, owner_id=owner_id, limit=None)
    scores = [record.ats_score for record in records]
    average = round_half_up(sum(scores) / len(scores)) if scores else 0
    recent: list[dict[str, Any]] = []
    for record in records[:RECENT_ANALYSES_LIMIT]:
        data = record.to_json()
        recent.append(
            {
                "_id": data["_id"],
                "atsScore": data["atsScore"],
                "createdAt": data["createdAt"],
                "fileName": data["fileName"],
            }
        )
    return AnalysisStats(
        total_analyses=len(records),
        average_score=average,
        score_distribution=_score_distribution(scores),
        recent_analyses=recent,
    )
