import logging
import time

from starlette.concurrency import run_in_threadpool

from app.ai.adapter import AIAnalysisAdapter
from app.ai.types import AnalysisOutcome
from app.analysis.heuristics import analyze_structure
from app.analysis.scoring import compute_ats_score, improvement_potential, model_confidence
from app.analysis.suggestions import generate_suggestions, readability_score
from app.schemas.analysis import AnalysisRecord, AnalysisResult, AnalyzeRequest
from app.schemas.resume import AtsAnalysis, ResumeRecord, StructureAnalysis
from app.storage import analyses as analyses_store
from app.storage import resumes as resumes_store
from app.storage.documents import DocumentStore, utc_now

logger = logging.getLogger("app.analysis")


def build_result(resume_text: str, outcome: AnalysisOutcome) -> AnalysisResult:
    ats_score = compute_ats_score(
        outcome.keyword_match_ratio,
        outcome.skill_match_ratio,
        outcome.action_verb_count,
    )
    return AnalysisResult(
        ats_score=ats_score,
        matched_keywords=outcome.matched_keywords,
        missing_keywords=outcome.missing_keywords,
        suggestions=generate_suggestions(resume_text, outcome),
        readability_score=readability_score(resume_text),
        model_confidence=model_confidence(outcome.source),
        improvement_potential=improvement_potential(ats_score),
        keyword_match_ratio=outcome.keyword_match_ratio,
        skill_match_ratio=outcome.skill_match_ratio,
        action_verb_count=outcome.action_verb_count,
    )


async def run_analysis(
    payload: AnalyzeRequest,
    *,
    owner_id: str,
    store: DocumentStore,
    adapter: AIAnalysisAdapter,
) -> AnalysisRecord:
    """Validate, score and persist one resume/job-description analysis.

    The AI adapter never raises here: any completion failure comes back as a
    heuristic outcome, so the only errors reaching the caller are validation
    and storage errors.
    """
    analyses_store.validate_analysis_input(
        resume_text=payload.resume_text,
        job_description=payload.job_description,
        file_name=payload.file_name,
        file_type=payload.file_type,
    )

    started = time.perf_counter()
    outcome = await adapter.analyze(payload.resume_text, payload.job_description)
    result = build_result(payload.resume_text, outcome)

    record = await run_in_threadpool(
        analyses_store.create_analysis,
        store,
        owner_id=owner_id,
        resume_text=payload.resume_text,
        job_description=payload.job_description,
        file_name=payload.file_name,
        file_type=payload.file_type,
        result=result,
        analysis_source=outcome.source,
    )
    logger.info(
        "analysis_created id=%s source=%s ats_score=%s latency_ms=%s",
        record.id,
        outcome.source,
        record.ats_score,
        int((time.perf_counter() - started) * 1000),
    )
    return record


async def analyze_resume_record(
    resume_id: str,
    *,
    owner_id: str,
    store: DocumentStore,
    adapter: AIAnalysisAdapter,
) -> ResumeRecord:
    resume = await run_in_threadpool(resumes_store.get_resume, store, resume_id, owner_id=owner_id)
    structure = analyze_structure(resume.content)

    if resume.job_description.strip():
        outcome = await adapter.analyze(resume.content, resume.job_description)
        result = build_result(resume.content, outcome)
        analysis = AtsAnalysis(
            ats_score=result.ats_score,
            keyword_match_ratio=result.keyword_match_ratio,
            skill_match_ratio=result.skill_match_ratio,
            action_verb_count=result.action_verb_count,
            matched_keywords=result.matched_keywords,
            missing_keywords=result.missing_keywords,
            suggestions=result.suggestions,
            readability_score=result.readability_score,
            analysis_source=outcome.source,
            structure=structure,
            analyzed_at=utc_now(),
        )
    else:
        analysis = StructureAnalysis(structure=structure, analyzed_at=utc_now())

    updated = await run_in_threadpool(
        resumes_store.set_resume_analysis,
        store,
        resume_id,
        owner_id=owner_id,
        analysis=analysis,
    )
    logger.info("resume_analyzed id=%s kind=%s", resume_id, analysis.kind)
    return updated


async def optimize_resume_record(
    resume_id: str,
    *,
    owner_id: str,
    focus: str | None,
    store: DocumentStore,
    adapter: AIAnalysisAdapter,
) -> ResumeRecord:
    resume = await run_in_threadpool(resumes_store.get_resume, store, resume_id, owner_id=owner_id)
    optimized = await adapter.optimize_resume(resume.content, resume.job_description, focus)
    return await run_in_threadpool(
        resumes_store.set_optimized_content,
        store,
        resume_id,
        owner_id=owner_id,
        content=optimized,
    )
