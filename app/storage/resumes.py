from __future__ import annotations

from typing import Any

from app.core.errors import NotFoundError
from app.schemas.resume import NoAnalysis, ResumeAnalysis, ResumeCreate, ResumeRecord, ResumeUpdate
from app.storage.documents import DocumentStore

COLLECTION = "resumes"


def create_resume(store: DocumentStore, *, owner_id: str, payload: ResumeCreate) -> ResumeRecord:
    document = {
        "userId": owner_id,
        "title": payload.title,
        "content": payload.content,
        "jobDescription": payload.job_description,
        "analysis": NoAnalysis().to_json(),
        "optimizedContent": "",
    }
    stored = store.insert(COLLECTION, owner_id=owner_id, document=document)
    return ResumeRecord.model_validate(stored)


def list_resumes(store: DocumentStore, *, owner_id: str) -> list[ResumeRecord]:
    documents = store.find(COLLECTION, owner_id=owner_id, sort_by="updated_at")
    return [ResumeRecord.model_validate(doc) for doc in documents]


def get_resume(store: DocumentStore, resume_id: str, *, owner_id: str) -> ResumeRecord:
    document = store.find_one(COLLECTION, resume_id, owner_id=owner_id)
    if document is None:
        raise NotFoundError("Resume not found")
    return ResumeRecord.model_validate(document)


def update_resume(
    store: DocumentStore,
    resume_id: str,
    *,
    owner_id: str,
    payload: ResumeUpdate,
) -> ResumeRecord:
    changes = payload.model_dump(by_alias=True, mode="json", exclude_none=True)

    def _apply(document: dict[str, Any]) -> dict[str, Any]:
        document.update(changes)
        return document

    updated = store.update_one(COLLECTION, resume_id, owner_id=owner_id, mutate=_apply)
    if updated is None:
        raise NotFoundError("Resume not found")
    return ResumeRecord.model_validate(updated)


def set_resume_analysis(
    store: DocumentStore,
    resume_id: str,
    *,
    owner_id: str,
    analysis: ResumeAnalysis,
) -> ResumeRecord:
    payload = ResumeUpdate(analysis=analysis)
    return update_resume(store, resume_id, owner_id=owner_id, payload=payload)


def set_optimized_content(store: DocumentStore, resume_id: str, *, owner_id: str, content: str) -> ResumeRecord:
    payload = ResumeUpdate(optimized_content=content)
    return update_resume(store, resume_id, owner_id=owner_id, payload=payload)


def delete_resume(store: DocumentStore, resume_id: str, *, owner_id: str) -> None:
    if store.delete_one(COLLECTION, resume_id, owner_id=owner_id) is None:
        raise NotFoundError("Resume not found")
