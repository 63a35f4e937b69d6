from fastapi import APIRouter, Depends, Request

from app.api.deps import get_ai_adapter, get_current_user_id
from app.ai.adapter import AIAnalysisAdapter
from app.analysis.heuristics import analyze_structure, extract_keywords
from app.core.errors import ValidationError
from app.core.rate_limit import rate_limit
from app.schemas.analysis import AIRequest

router = APIRouter()


def _require_texts(payload: AIRequest) -> None:
    errors = []
    if not payload.resume_text.strip():
        errors.append({"field": "resumeText", "message": "Resume text is required"})
    if not payload.job_description.strip():
        errors.append({"field": "jobDescription", "message": "Job description is required"})
    if errors:
        raise ValidationError(errors, message="Resume text and job description are required")


@router.post("/ai/analyze")
@rate_limit()
async def ai_analyze(
    request: Request,
    payload: AIRequest,
    user_id: str = Depends(get_current_user_id),
    adapter: AIAnalysisAdapter = Depends(get_ai_adapter),
):
    _ = request, user_id
    _require_texts(payload)
    outcome = await adapter.analyze(payload.resume_text, payload.job_description)
    advice = await adapter.suggest_optimizations(payload.resume_text, payload.job_description)
    return {
        "success": True,
        "message": "Analysis completed successfully",
        "analysis": {
            "jobKeywords": extract_keywords(payload.job_description),
            "keywordAnalysis": outcome.to_json(),
            "resumeStructure": analyze_structure(payload.resume_text).to_json(),
            "optimizationSuggestions": advice.to_json(),
        },
    }


@router.post("/ai/optimize")
@rate_limit()
async def ai_optimize(
    request: Request,
    payload: AIRequest,
    user_id: str = Depends(get_current_user_id),
    adapter: AIAnalysisAdapter = Depends(get_ai_adapter),
):
    _ = request, user_id
    _require_texts(payload)
    optimized = await adapter.optimize_resume(
        payload.resume_text,
        payload.job_description,
        payload.optimization_focus,
    )
    return {
        "success": True,
        "message": "Resume optimization completed",
        "optimizedResume": optimized,
    }
