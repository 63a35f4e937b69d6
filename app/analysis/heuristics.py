"""Deterministic keyword and structure analysis of a resume against a job description.

Everything here is a pure function of its inputs. The AI adapter falls back
to :func:`analyze_keywords` whenever the completion API is unusable.
"""

from __future__ import annotations

import re
from collections import Counter

from app.schemas.analysis import (
    KeywordAnalysis,
    KeywordMatch,
    MissingKeyword,
    ResumeSections,
    ResumeStructure,
)

ACTION_VERBS = (
    "developed",
    "implemented",
    "created",
    "managed",
    "led",
    "designed",
    "built",
    "optimized",
    "improved",
    "delivered",
)
_ACTION_VERB_SET = frozenset(ACTION_VERBS)

KEYWORD_LIMIT = 10
MIN_KEYWORD_LENGTH = 3
SKILL_RATIO_MULTIPLIER = 1.2

_SECTION_PATTERNS = {
    "contact": re.compile(r"(email|phone|address|contact)", re.IGNORECASE),
    "summary": re.compile(r"(summary|objective|profile)", re.IGNORECASE),
    "experience": re.compile(r"(experience|work history|employment)", re.IGNORECASE),
    "education": re.compile(r"(education|degree|university|college)", re.IGNORECASE),
    "skills": re.compile(r"(skills|technical|competencies)", re.IGNORECASE),
}
_DIGIT_RE = re.compile(r"\d+")
_ACTION_VERB_RE = re.compile(
    r"(managed|developed|created|implemented|led|designed|built|improved|increased|reduced)",
    re.IGNORECASE,
)
_WORD_TOKEN_RE = re.compile(r"[a-z][a-z0-9+#.-]*[a-z0-9+#]|[a-z0-9]+")

STOPWORDS = {
    "about", "above", "after", "again", "against", "also", "among", "been", "before", "being",
    "below", "between", "both", "but", "can", "could", "does", "doing", "down", "during",
    "each", "every", "from", "further", "have", "having", "here", "into", "just", "like",
    "looking", "more", "most", "must", "other", "ought", "over", "own", "same", "should",
    "some", "such", "than", "that", "their", "theirs", "them", "then", "there", "these",
    "they", "this", "those", "through", "under", "until", "very", "want", "were", "what",
    "when", "where", "which", "while", "will", "with", "within", "would", "your", "yours",
    "able", "across", "ideal", "including", "strong", "work", "working", "years",
}


def tokenize(text: str) -> list[str]:
    return (text or "").lower().split()


def _distinct(tokens: list[str]) -> list[str]:
    return list(dict.fromkeys(tokens))


def _bounded_keywords(tokens: list[str]) -> list[str]:
    keywords = [token for token in _distinct(tokens) if len(token) >= MIN_KEYWORD_LENGTH]
    return keywords[:KEYWORD_LIMIT]


def count_action_verbs(tokens: list[str]) -> int:
    return sum(1 for token in tokens if token in _ACTION_VERB_SET)


def analyze_keywords(resume_text: str, job_description: str) -> KeywordAnalysis:
    resume_tokens = tokenize(resume_text)
    job_tokens = tokenize(job_description)
    resume_vocab = set(resume_tokens)
    job_counts = Counter(job_tokens)

    common = [token for token in resume_tokens if token in job_counts]
    missing = [token for token in job_tokens if token not in resume_vocab]

    keyword_match_ratio = len(set(common)) / len(job_tokens) if job_tokens else 0.0
    skill_match_ratio = min(keyword_match_ratio * SKILL_RATIO_MULTIPLIER, 1.0)

    top_count = max(job_counts.values()) if job_counts else 1
    matched = [
        KeywordMatch(keyword=token, category="keyword", relevance=round(job_counts[token] / top_count, 2))
        for token in _bounded_keywords(common)
    ]
    missing_entries = [
        MissingKeyword(keyword=token, category="keyword", importance=round(job_counts[token] / top_count, 2))
        for token in _bounded_keywords(missing)
    ]

    return KeywordAnalysis(
        matched_keywords=matched,
        missing_keywords=missing_entries,
        keyword_match_ratio=keyword_match_ratio,
        skill_match_ratio=skill_match_ratio,
        action_verb_count=count_action_verbs(resume_tokens),
    )


def analyze_structure(resume_text: str) -> ResumeStructure:
    text = resume_text or ""
    sections = ResumeSections(**{name: bool(pattern.search(text)) for name, pattern in _SECTION_PATTERNS.items()})
    present = sum(1 for value in sections.model_dump().values() if value)
    return ResumeStructure(
        sections=sections,
        word_count=len(text.split()),
        has_numbers=bool(_DIGIT_RE.search(text)),
        has_action_verbs=bool(_ACTION_VERB_RE.search(text)),
        completeness=present / len(_SECTION_PATTERNS) * 100,
    )


def extract_keywords(text: str, limit: int = 20) -> list[str]:
    tokens = _WORD_TOKEN_RE.findall((text or "").lower())
    filtered = [
        token
        for token in tokens
        if len(token) > 3 and token not in STOPWORDS and not token.isdigit()
    ]
    counts = Counter(filtered)
    return [term for term, _ in counts.most_common(limit)]
