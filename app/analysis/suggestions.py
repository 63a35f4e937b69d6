from __future__ import annotations

import re

from app.analysis.scoring import round_half_up
from app.schemas.analysis import KeywordAnalysis, Suggestion

MAX_SUGGESTED_KEYWORDS = 5
MIN_ACTION_VERBS = 10
MIN_WORD_COUNT = 200
MAX_WORD_COUNT = 800

_QUANTIFIED_RE = re.compile(r"\d+%|\$\d+|\d+\+|\d+\s*(years?|months?)", re.IGNORECASE)
_SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
_VOWELS = "aeiouy"


def has_quantified_achievements(text: str) -> bool:
    return bool(_QUANTIFIED_RE.search(text or ""))


def generate_suggestions(resume_text: str, analysis: KeywordAnalysis) -> list[Suggestion]:
    suggestions: list[Suggestion] = []

    if analysis.missing_keywords:
        keywords = ", ".join(item.keyword for item in analysis.missing_keywords[:MAX_SUGGESTED_KEYWORDS])
        suggestions.append(
            Suggestion(text=f"Add missing keywords: {keywords}", category="keywords", priority="high")
        )

    if analysis.action_verb_count < MIN_ACTION_VERBS:
        suggestions.append(
            Suggestion(
                text=(
                    'Use more action verbs like "developed", "implemented", "optimized", "delivered" '
                    "to make your resume more dynamic"
                ),
                category="content",
                priority="medium",
            )
        )

    if not has_quantified_achievements(resume_text):
        suggestions.append(
            Suggestion(
                text=(
                    "Add quantified achievements with specific numbers, percentages, and metrics "
                    '(e.g., "increased performance by 25%")'
                ),
                category="content",
                priority="high",
            )
        )

    word_count = len((resume_text or "").split())
    if word_count < MIN_WORD_COUNT:
        suggestions.append(
            Suggestion(
                text="Expand your resume by adding more details about your responsibilities and achievements",
                category="formatting",
                priority="medium",
            )
        )
    elif word_count > MAX_WORD_COUNT:
        suggestions.append(
            Suggestion(
                text="Condense your resume by removing less relevant information to keep it concise",
                category="formatting",
                priority="low",
            )
        )

    return suggestions


def count_syllables(word: str) -> int:
    word = word.lower()
    if len(word) <= 3:
        return 1

    count = 0
    previous_was_vowel = False
    for char in word:
        is_vowel = char in _VOWELS
        if is_vowel and not previous_was_vowel:
            count += 1
        previous_was_vowel = is_vowel

    if word.endswith("e"):
        count -= 1
    return max(1, count)


def readability_score(text: str) -> int:
    """Simplified Flesch Reading Ease, clamped to 0..100.

    Text without any sentence terminator scores 0.
    """
    text = text or ""
    if not _SENTENCE_SPLIT_RE.search(text):
        return 0
    sentences = [part for part in _SENTENCE_SPLIT_RE.split(text) if part.strip()]
    words = text.split()
    if not sentences or not words:
        return 0

    syllables = sum(count_syllables(word) for word in words)
    avg_words_per_sentence = len(words) / len(sentences)
    avg_syllables_per_word = syllables / len(words)
    score = 206.835 - (1.015 * avg_words_per_sentence) - (84.6 * avg_syllables_per_word)
    return round_half_up(max(0.0, min(100.0, score)))
