from __future__ import annotations

import math

KEYWORD_WEIGHT = 0.5
SKILL_WEIGHT = 0.3
ACTION_VERB_WEIGHT = 0.2
ACTION_VERB_NORMALIZER = 25

AI_MODEL_CONFIDENCE = 95.0
HEURISTIC_MODEL_CONFIDENCE = 75.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def action_verb_strength(action_verb_count: int) -> float:
    return min(action_verb_count / ACTION_VERB_NORMALIZER * 100, 100.0)


def compute_ats_score(keyword_match_ratio: float, skill_match_ratio: float, action_verb_count: int) -> int:
    keyword_match = keyword_match_ratio * 100
    skill_match = skill_match_ratio * 100
    score = (
        keyword_match * KEYWORD_WEIGHT
        + skill_match * SKILL_WEIGHT
        + action_verb_strength(action_verb_count) * ACTION_VERB_WEIGHT
    )
    return round_half_up(_clamp(score, 0.0, 100.0))


def improvement_potential(ats_score: int) -> int:
    return max(0, 100 - ats_score)


def model_confidence(source: str) -> float:
    return AI_MODEL_CONFIDENCE if source == "ai" else HEURISTIC_MODEL_CONFIDENCE
