# disc_insights/scoring/behavior.py
# Helpers for the behavior trait questionnaire (35 bipolar traits + 5 frequencies).

import logging
from typing import Any, Dict, List, Mapping, Optional

from .definitions import (
    FREQUENCY_QUESTIONS,
    PROFILE_PATTERNS,
    TRAIT_CATEGORIES,
    TRAIT_DESCRIPTIONS,
    TRAIT_METADATA,
    TRAIT_QUESTIONS,
    TRAIT_TENDENCIES,
)

logger = logging.getLogger(__name__)

SCALE_MIN = 1
SCALE_MAX = 5
SCALE_MIDPOINT = 3

TRAIT_IDS = frozenset(q["id"] for q in TRAIT_QUESTIONS)
FREQUENCY_TRAITS_BY_ID = {q["id"]: q["trait"] for q in FREQUENCY_QUESTIONS}

# Trait categories whose name differs from the matching summary pattern key
_CATEGORY_PATTERN_KEYS = {
    "collaboration": "collaborative",
    "innovation": "innovative",
}


class InvalidBehaviorAnswerError(ValueError):
    """Raised when a behavior answer references an unknown question or is out of range."""


def get_trait_metadata(trait_id: int) -> Dict[str, str]:
    left, right = TRAIT_METADATA.get(trait_id, ("Unknown", "Unknown"))
    return {"leftTrait": left, "rightTrait": right}


def get_trait_category(trait_id: int) -> str:
    return TRAIT_CATEGORIES.get(trait_id, "general")


def get_trait_intensity(value: float) -> str:
    if value <= 1.5 or value >= 4.5:
        return "very_high"
    if value <= 2.5 or value >= 3.5:
        return "high"
    return "balanced"


def _intensity_prefix(value: float, strong: str, moderate: str, balanced: str) -> str:
    if value <= 1.5 or value >= 4.5:
        return strong
    if value <= 2.5 or value >= 3.5:
        return moderate
    return balanced


def get_trait_tendency(trait_id: int, value: float) -> str:
    """Short phrase for the side of the trait the value leans to, e.g. 'forte tendência para ...'."""
    left, right = TRAIT_TENDENCIES.get(trait_id, ("", ""))
    prefix = _intensity_prefix(value, "forte tendência para ", "tendência moderada para ", "equilíbrio entre ")
    return prefix + (left if value <= SCALE_MIDPOINT else right)


def get_trait_description(trait_id: int, value: float) -> str:
    left, right = TRAIT_DESCRIPTIONS.get(trait_id, ("", ""))
    prefix = _intensity_prefix(value, "Demonstra forte ", "Apresenta tendência para ", "Mantém equilíbrio entre ")
    return prefix + (left if value <= SCALE_MIDPOINT else right)


def get_main_traits(traits: Mapping[int, float], limit: int = 3) -> List[Dict[str, Any]]:
    """Returns the `limit` traits furthest from the scale midpoint."""
    trait_list = [
        {
            "id": int(trait_id),
            "value": value,
            "description": get_trait_tendency(int(trait_id), value),
            "category": get_trait_category(int(trait_id)),
            "intensity": get_trait_intensity(value),
        }
        for trait_id, value in traits.items()
    ]
    trait_list.sort(key=lambda t: abs(t["value"] - SCALE_MIDPOINT), reverse=True)
    return trait_list[:limit]


def get_dominant_category(main_traits: List[Dict[str, Any]]) -> str:
    counts: Dict[str, int] = {}
    for trait in main_traits:
        category = trait.get("category")
        if category:
            counts[category] = counts.get(category, 0) + 1
    if not counts:
        return "general"
    return max(counts.items(), key=lambda item: item[1])[0]


def get_traits_summary(traits: Mapping[int, float]) -> str:
    """One-sentence, non-AI summary of the dominant traits."""
    main_traits = get_main_traits(traits)
    category = get_dominant_category(main_traits)
    pattern = PROFILE_PATTERNS.get(_CATEGORY_PATTERN_KEYS.get(category, category))
    if not pattern:
        return ", ".join(get_trait_tendency(t["id"], t["value"]) for t in main_traits)
    variations = pattern["variations"]
    variation = variations[sum(t["id"] for t in main_traits) % len(variations)]
    return f"{pattern['primary']} {variation}"


def calculate_trait_interaction(first: Dict[str, Any], second: Dict[str, Any]) -> Dict[str, Any]:
    """Classifies how two scored traits relate to each other."""
    strength_diff = abs(first["value"] - second["value"])
    avg_strength = (first["value"] + second["value"]) / 2

    if strength_diff < 0.5:
        return {
            "strength": 1 - strength_diff,
            "type": "reinforcing",
            "description": "Traços que se reforçam mutuamente",
        }
    if avg_strength > 3.5 or avg_strength < 2.5:
        return {
            "strength": strength_diff / 5,
            "type": "complementary",
            "description": "Traços que se complementam",
        }
    return {
        "strength": strength_diff / 3,
        "type": "conflicting",
        "description": "Traços que podem gerar tensão",
    }


def prepare_trait_metadata(traits: Mapping[int, float]) -> Dict[int, Dict[str, Any]]:
    """Builds the per-trait context handed to the prompt builder."""
    metadata: Dict[int, Dict[str, Any]] = {}
    for raw_id, value in traits.items():
        trait_id = int(raw_id)
        labels = get_trait_metadata(trait_id)
        metadata[trait_id] = {
            "id": trait_id,
            "leftTrait": labels["leftTrait"],
            "rightTrait": labels["rightTrait"],
            "category": get_trait_category(trait_id),
            "value": value,
        }
    return metadata


def _check_scale(question_id: int, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidBehaviorAnswerError(f"Answer for question {question_id} must be a number, got {value!r}")
    if not SCALE_MIN <= value <= SCALE_MAX:
        raise InvalidBehaviorAnswerError(
            f"Answer for question {question_id} must be between {SCALE_MIN} and {SCALE_MAX}, got {value}"
        )
    return value


def calculate_behavior_results(
    answers: Mapping[int, Any],
    time_stats: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Splits raw behavior answers into trait and frequency scores.

    Raises:
        InvalidBehaviorAnswerError: unknown question id or value outside 1-5.
    """
    traits: Dict[str, Any] = {}
    frequencies: Dict[str, Any] = {}
    for raw_id, value in answers.items():
        question_id = int(raw_id)
        value = _check_scale(question_id, value)
        if question_id in TRAIT_IDS:
            traits[str(question_id)] = value
        elif question_id in FREQUENCY_TRAITS_BY_ID:
            frequencies[FREQUENCY_TRAITS_BY_ID[question_id]] = value
        else:
            raise InvalidBehaviorAnswerError(f"Unknown behavior question id: {question_id}")

    logger.debug(f"Behavior results computed: {len(traits)} traits, {len(frequencies)} frequencies")
    return {"traits": traits, "frequencies": frequencies, "timeStats": time_stats or {}}


def traits_from_results(results: Mapping[str, Any]) -> Dict[int, float]:
    """Reads the stored `traits` map back with integer keys."""
    return {int(k): v for k, v in (results.get("traits") or {}).items()}
