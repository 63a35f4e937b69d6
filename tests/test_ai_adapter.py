import dataclasses
import json
import unittest
from types import SimpleNamespace

from app.ai.adapter import AIAnalysisAdapter, parse_json_object
from app.core.config import load_settings
from app.core.errors import ExternalServiceError

RESUME_TEXT = "Developed Python services and built FastAPI backends. Improved latency by 40%."
JOB_DESCRIPTION = "Python engineer with FastAPI and Kubernetes experience"

VALID_PAYLOAD = {
    "matchedKeywords": ["Python", {"keyword": "FastAPI", "category": "technology", "relevance": 0.9}],
    "missingKeywords": [{"keyword": "Kubernetes", "category": "technology", "importance": 0.7}],
    "skills": ["Python"],
    "technologies": ["FastAPI"],
    "actionVerbs": ["developed", "built"],
    "keywordMatchRatio": 0.6,
    "skillMatchRatio": 0.5,
    "actionVerbCount": 3,
}


class _FakeCompletions:
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeClient:
    def __init__(self, content=None, error=None):
        self.completions = _FakeCompletions(content=content, error=error)
        self.chat = SimpleNamespace(completions=self.completions)


def _settings(**overrides):
    values = {"ai_enabled": True, "openai_api_key": "sk-test", "ai_model": "gpt-test"}
    values.update(overrides)
    return dataclasses.replace(load_settings(), **values)


class AIAnalysisAdapterTests(unittest.IsolatedAsyncioTestCase):
    async def test_valid_completion_is_used(self):
        client = _FakeClient(content=json.dumps(VALID_PAYLOAD))
        adapter = AIAnalysisAdapter(_settings(), client=client)

        outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)

        self.assertEqual(outcome.source, "ai")
        self.assertEqual([k.keyword for k in outcome.matched_keywords], ["Python", "FastAPI"])
        self.assertEqual(outcome.missing_keywords[0].importance, 0.7)
        self.assertEqual(outcome.action_verb_count, 3)
        call = client.completions.calls[0]
        self.assertEqual(call["model"], "gpt-test")
        self.assertEqual(call["response_format"], {"type": "json_object"})

    async def test_fenced_json_is_accepted(self):
        content = "```json\n" + json.dumps(VALID_PAYLOAD) + "\n```"
        adapter = AIAnalysisAdapter(_settings(), client=_FakeClient(content=content))
        outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(outcome.source, "ai")

    async def test_non_json_falls_back_to_heuristics(self):
        adapter = AIAnalysisAdapter(_settings(), client=_FakeClient(content="Sure! Here is the analysis."))
        with self.assertLogs("app.ai.adapter", level="WARNING"):
            outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(outcome.source, "heuristic")
        self.assertEqual(outcome.fallback_reason, "JSONDecodeError")

    async def test_out_of_range_ratio_falls_back(self):
        payload = dict(VALID_PAYLOAD, keywordMatchRatio=1.5)
        adapter = AIAnalysisAdapter(_settings(), client=_FakeClient(content=json.dumps(payload)))
        outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(outcome.source, "heuristic")
        self.assertLessEqual(outcome.keyword_match_ratio, 1.0)

    async def test_client_error_falls_back(self):
        adapter = AIAnalysisAdapter(_settings(), client=_FakeClient(error=RuntimeError("connection reset")))
        outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(outcome.source, "heuristic")
        self.assertEqual(outcome.fallback_reason, "RuntimeError")

    async def test_disabled_adapter_never_calls_out(self):
        adapter = AIAnalysisAdapter(_settings(ai_enabled=False))
        self.assertFalse(adapter.enabled)
        outcome = await adapter.analyze(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(outcome.source, "heuristic")
        self.assertEqual(outcome.fallback_reason, "ai_disabled")

    async def test_placeholder_key_disables_adapter(self):
        adapter = AIAnalysisAdapter(_settings(openai_api_key="your_openai_api_key_here"))
        self.assertFalse(adapter.enabled)

    async def test_optimization_advice_falls_back(self):
        adapter = AIAnalysisAdapter(_settings(), client=_FakeClient(content="[1, 2, 3]"))
        advice = await adapter.suggest_optimizations(RESUME_TEXT, JOB_DESCRIPTION)
        self.assertEqual(advice.source, "heuristic")
        self.assertIn("kubernetes", advice.missing_keywords)
        self.assertEqual(advice.overall_score, 75)

    async def test_optimize_resume_returns_text(self):
        client = _FakeClient(content="  Optimized resume body  ")
        adapter = AIAnalysisAdapter(_settings(), client=client)
        optimized = await adapter.optimize_resume(RESUME_TEXT, JOB_DESCRIPTION, "Highlight Kubernetes")
        self.assertEqual(optimized, "Optimized resume body")
        self.assertNotIn("response_format", client.completions.calls[0])
        self.assertIn("Highlight Kubernetes", client.completions.calls[0]["messages"][1]["content"])

    async def test_optimize_resume_raises_when_unavailable(self):
        adapter = AIAnalysisAdapter(_settings(ai_enabled=False))
        with self.assertRaises(ExternalServiceError):
            await adapter.optimize_resume(RESUME_TEXT, JOB_DESCRIPTION)

        failing = AIAnalysisAdapter(_settings(), client=_FakeClient(error=TimeoutError()))
        with self.assertRaises(ExternalServiceError):
            await failing.optimize_resume(RESUME_TEXT, JOB_DESCRIPTION)


class ParseJsonObjectTests(unittest.TestCase):
    def test_rejects_arrays_and_empty(self):
        with self.assertRaises(ValueError):
            parse_json_object("[]")
        with self.assertRaises(ValueError):
            parse_json_object("   ")

    def test_strips_fences(self):
        self.assertEqual(parse_json_object('```\n{"a": 1}\n```'), {"a": 1})


if __name__ == "__main__":
    unittest.main()
