from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from typing import Any

from openai import AsyncOpenAI

from app.ai.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    OPTIMIZATION_SYSTEM_PROMPT,
    REWRITE_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_optimization_prompt,
    build_rewrite_prompt,
)
from app.ai.types import (
    AIAnalysisPayload,
    AIKeywordAnalysis,
    AnalysisOutcome,
    HeuristicKeywordAnalysis,
    OptimizationAdvice,
    SectionImprovements,
)
from app.analysis.heuristics import analyze_keywords, extract_keywords
from app.core.config import Settings
from app.core.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*|\s*```\s*$", re.IGNORECASE)


def _looks_like_placeholder(value: str) -> bool:
    lower = value.strip().lower()
    return lower.startswith("your_") or lower.startswith("replace_") or lower in {"changeme", "todo"}


def parse_json_object(content: str | None) -> dict[str, Any]:
    text = _FENCE_RE.sub("", (content or "").strip())
    if not text:
        raise ValueError("empty completion")
    parsed = json.loads(text)
    if not isinstance(parsed, dict):
        raise ValueError("completion is not a JSON object")
    return parsed


class AIAnalysisAdapter:
    """Completion-API backed analysis with a deterministic heuristic fallback."""

    def __init__(self, settings: Settings, client: Any | None = None):
        self._settings = settings
        self._client = client

    @property
    def enabled(self) -> bool:
        if self._client is not None:
            return True
        if not self._settings.ai_enabled:
            return False
        api_key = (self._settings.openai_api_key or "").strip()
        return bool(api_key) and not _looks_like_placeholder(api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=(self._settings.openai_api_key or "").strip(),
                base_url=self._settings.openai_base_url or None,
                timeout=self._settings.ai_timeout_s,
                max_retries=self._settings.ai_max_retries,
            )
        return self._client

    def _overall_timeout(self) -> float:
        return self._settings.ai_timeout_s * (self._settings.ai_max_retries + 1) + 1.0

    async def _complete(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int,
        json_mode: bool,
    ) -> str:
        create_kwargs: dict[str, Any] = {
            "model": self._settings.ai_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._settings.ai_temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        response = await asyncio.wait_for(
            self._get_client().chat.completions.create(**create_kwargs),
            timeout=self._overall_timeout(),
        )
        content = response.choices[0].message.content if response.choices else ""
        return (content or "").strip()

    def _fallback(self, resume_text: str, job_description: str, reason: str) -> HeuristicKeywordAnalysis:
        analysis = analyze_keywords(resume_text, job_description)
        return HeuristicKeywordAnalysis(**analysis.model_dump(), fallback_reason=reason)

    async def analyze(self, resume_text: str, job_description: str) -> AnalysisOutcome:
        if not self.enabled:
            return self._fallback(resume_text, job_description, "ai_disabled")

        started = time.perf_counter()
        try:
            content = await self._complete(
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
                user_prompt=build_analysis_prompt(resume_text, job_description),
                max_tokens=2000,
                json_mode=True,
            )
            payload = AIAnalysisPayload.model_validate(parse_json_object(content))
        except Exception as exc:  # noqa: BLE001 - deterministic fallback is expected
            reason = "timeout" if isinstance(exc, asyncio.TimeoutError) else type(exc).__name__
            logger.warning(
                "ai_analysis_fallback model=%s reason=%s latency_ms=%s: %s",
                self._settings.ai_model,
                reason,
                int((time.perf_counter() - started) * 1000),
                exc,
            )
            return self._fallback(resume_text, job_description, reason)

        logger.info(
            "ai_analysis_ok model=%s latency_ms=%s",
            self._settings.ai_model,
            int((time.perf_counter() - started) * 1000),
        )
        return AIKeywordAnalysis(**payload.model_dump())

    def _fallback_advice(self, job_description: str) -> OptimizationAdvice:
        return OptimizationAdvice(
            missing_keywords=extract_keywords(job_description)[:10],
            section_improvements=SectionImprovements(
                summary="Consider adding a professional summary highlighting key achievements",
                experience="Quantify your achievements with specific metrics",
                skills="Include more technical skills relevant to the job",
                education="Add relevant certifications or courses",
            ),
            ats_optimization="Ensure consistent formatting and include relevant keywords",
            overall_score=75,
            source="heuristic",
        )

    async def suggest_optimizations(self, resume_text: str, job_description: str) -> OptimizationAdvice:
        if not self.enabled:
            return self._fallback_advice(job_description)
        try:
            content = await self._complete(
                system_prompt=OPTIMIZATION_SYSTEM_PROMPT,
                user_prompt=build_optimization_prompt(resume_text, job_description),
                max_tokens=2000,
                json_mode=True,
            )
            advice = OptimizationAdvice.model_validate(parse_json_object(content))
        except Exception as exc:  # noqa: BLE001
            logger.warning("ai_optimization_advice_fallback model=%s: %s", self._settings.ai_model, exc)
            return self._fallback_advice(job_description)
        return advice.model_copy(update={"source": "ai"})

    async def optimize_resume(self, resume_text: str, job_description: str, focus: str | None = None) -> str:
        if not self.enabled:
            raise ExternalServiceError("AI optimization is not configured.")
        try:
            content = await self._complete(
                system_prompt=REWRITE_SYSTEM_PROMPT,
                user_prompt=build_rewrite_prompt(resume_text, job_description, focus),
                max_tokens=3000,
                json_mode=False,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("ai_resume_rewrite_failed model=%s: %s", self._settings.ai_model, exc)
            raise ExternalServiceError() from exc
        if not content:
            raise ExternalServiceError("AI optimization returned an empty response.")
        return content
