from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from app.api.deps import get_ai_adapter, get_current_user_id, get_store
from app.ai.adapter import AIAnalysisAdapter
from app.schemas.resume import ResumeCreate, ResumeOptimizeRequest, ResumeUpdate
from app.services.analysis_service import analyze_resume_record, optimize_resume_record
from app.storage import analyses as analyses_store
from app.storage import resumes as resumes_store
from app.storage.documents import DocumentStore, utc_now

router = APIRouter()

# Static paths are registered before "/resume/{resume_id}" so they are not
# captured by the id route.


@router.get("/resume/analyses")
def list_analyses(
    page: int = Query(default=1),
    limit: int = Query(default=10),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    records, pagination = analyses_store.list_analyses_page(store, owner_id=user_id, page=page, limit=limit)
    return {
        "success": True,
        "analyses": [record.summary() for record in records],
        "pagination": pagination.to_json(),
    }


@router.get("/resume/analyses/{analysis_id}")
def read_analysis(
    analysis_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = analyses_store.get_analysis(store, analysis_id, owner_id=user_id)
    return {"success": True, "analysis": record.to_json()}


@router.delete("/resume/analyses/{analysis_id}")
def delete_analysis(
    analysis_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    analyses_store.delete_analysis(store, analysis_id, owner_id=user_id)
    return {"success": True, "message": "Analysis deleted successfully"}


@router.get("/resume/stats")
def stats(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    summary = analyses_store.analysis_stats(store, owner_id=user_id)
    return {"success": True, "stats": summary.to_json()}


@router.get("/resume/export/{analysis_id}")
def export_analysis(
    analysis_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = analyses_store.get_analysis(store, analysis_id, owner_id=user_id)
    return JSONResponse(
        content=record.export(utc_now()),
        headers={"Content-Disposition": f'attachment; filename="resume-analysis-{record.id}.json"'},
    )


@router.get("/resume")
def list_resumes(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    records = resumes_store.list_resumes(store, owner_id=user_id)
    return {"success": True, "resumes": [record.to_json() for record in records]}


@router.post("/resume", status_code=status.HTTP_201_CREATED)
def create_resume(
    payload: ResumeCreate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = resumes_store.create_resume(store, owner_id=user_id, payload=payload)
    return {"success": True, "resume": record.to_json()}


@router.get("/resume/{resume_id}")
def read_resume(
    resume_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = resumes_store.get_resume(store, resume_id, owner_id=user_id)
    return {"success": True, "resume": record.to_json()}


@router.put("/resume/{resume_id}")
def update_resume(
    resume_id: str,
    payload: ResumeUpdate,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = resumes_store.update_resume(store, resume_id, owner_id=user_id, payload=payload)
    return {"success": True, "resume": record.to_json()}


@router.delete("/resume/{resume_id}")
def delete_resume(
    resume_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    resumes_store.delete_resume(store, resume_id, owner_id=user_id)
    return {"success": True, "message": "Resume deleted successfully"}


@router.post("/resume/{resume_id}/analyze")
async def analyze_resume(
    resume_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    adapter: AIAnalysisAdapter = Depends(get_ai_adapter),
):
    record = await analyze_resume_record(resume_id, owner_id=user_id, store=store, adapter=adapter)
    return {"success": True, "resume": record.to_json()}


@router.post("/resume/{resume_id}/optimize")
async def optimize_resume(
    resume_id: str,
    payload: ResumeOptimizeRequest | None = None,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    adapter: AIAnalysisAdapter = Depends(get_ai_adapter),
):
    focus = payload.optimization_focus if payload else None
    record = await optimize_resume_record(
        resume_id,
        owner_id=user_id,
        focus=focus,
        store=store,
        adapter=adapter,
    )
    return {"success": True, "resume": record.to_json()}
