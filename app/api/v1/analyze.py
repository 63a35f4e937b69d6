from fastapi import APIRouter, Depends, Request

from app.api.deps import get_ai_adapter, get_current_user_id, get_store
from app.ai.adapter import AIAnalysisAdapter
from app.core.rate_limit import rate_limit
from app.schemas.analysis import AnalyzeRequest
from app.services.analysis_service import run_analysis
from app.storage.analyses import get_analysis, list_recent_analyses
from app.storage.documents import DocumentStore

router = APIRouter()

ANALYSIS_RESPONSE_FIELDS = (
    "atsScore",
    "matchedKeywords",
    "missingKeywords",
    "suggestions",
    "readabilityScore",
    "modelConfidence",
    "improvementPotential",
    "keywordMatchRatio",
    "skillMatchRatio",
    "actionVerbCount",
)


@router.post("/analyze")
@rate_limit()
async def analyze(
    request: Request,
    payload: AnalyzeRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    adapter: AIAnalysisAdapter = Depends(get_ai_adapter),
):
    _ = request
    record = await run_analysis(payload, owner_id=user_id, store=store, adapter=adapter)
    data = record.to_json()
    return {
        "success": True,
        "analysisId": record.id,
        "analysis": {key: data[key] for key in ANALYSIS_RESPONSE_FIELDS},
    }


@router.get("/analyze")
def list_analyses(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    records = list_recent_analyses(store, owner_id=user_id)
    return {"success": True, "analyses": [record.summary() for record in records]}


@router.get("/analyze/{analysis_id}")
def read_analysis(
    analysis_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    record = get_analysis(store, analysis_id, owner_id=user_id)
    return {"success": True, "analysis": record.to_json()}
