# disc_insights/scoring/disc.py
# Scoring for the DISC questionnaire.

import logging
from typing import Dict, List, Mapping, Optional, TypedDict

from .definitions import (
    DISC_CATEGORIES,
    DISC_PROFILE_DESCRIPTIONS,
    DISC_PROFILE_DETAILS,
    DISC_PROFILE_RECOMMENDATIONS,
)

logger = logging.getLogger(__name__)

# --- Constants ---

SUM_TOLERANCE = 0.1

INTENSITY_LOW = "Low"
INTENSITY_MODERATE = "Moderate"
INTENSITY_HIGH = "High"
INTENSITY_VERY_HIGH = "Very High"

# Upper bound (inclusive) of each band, checked in order
INTENSITY_BANDS = [
    (25.0, INTENSITY_LOW),
    (50.0, INTENSITY_MODERATE),
    (75.0, INTENSITY_HIGH),
]

DEFAULT_PRIMARY = "D"
DEFAULT_SECONDARY = "I"


class DiscResults(TypedDict):
    scores: Dict[str, float]
    primaryProfile: str
    secondaryProfile: str
    intensity: Dict[str, str]


def get_intensity(percentage: float) -> str:
    """Maps a percentage to its qualitative band."""
    for upper_bound, label in INTENSITY_BANDS:
        if percentage <= upper_bound:
            return label
    return INTENSITY_VERY_HIGH


def count_answers(answers: Optional[Mapping[int, str]]) -> Dict[str, int]:
    """Tallies raw answers per DISC category. Unknown symbols are ignored."""
    counts = {category: 0 for category in DISC_CATEGORIES}
    for value in (answers or {}).values():
        if value in counts:
            counts[value] += 1
        else:
            logger.warning(f"Ignoring unknown DISC answer value: {value!r}")
    return counts


def calculate_disc_results(answers: Optional[Mapping[int, str]]) -> DiscResults:
    """
    Converts a DISC answer set into normalized percentages.

    Args:
        answers: Mapping of question number to one of 'D', 'I', 'S', 'C'.
                 None or an empty mapping is accepted.

    Returns:
        A dict with `scores` (summing to 100 within SUM_TOLERANCE),
        `primaryProfile`, `secondaryProfile` and per-category `intensity`.
        With no answers the result is an even 25/25/25/25 split with D/I as
        primary/secondary.
    """
    counts = count_answers(answers)
    total = sum(counts.values())

    if total == 0:
        return {
            "scores": {category: 25.0 for category in DISC_CATEGORIES},
            "primaryProfile": DEFAULT_PRIMARY,
            "secondaryProfile": DEFAULT_SECONDARY,
            "intensity": {category: INTENSITY_MODERATE for category in DISC_CATEGORIES},
        }

    scores = {category: counts[category] / total * 100 for category in DISC_CATEGORIES}

    score_sum = sum(scores.values())
    if abs(score_sum - 100) > SUM_TOLERANCE:
        logger.warning(f"DISC scores sum ({score_sum:.2f}) is not 100%. Normalizing values.")
        factor = 100 / score_sum
        scores = {category: score * factor for category, score in scores.items()}

    # sorted() is stable, so ties keep D, I, S, C order
    ranked = sorted(DISC_CATEGORIES, key=lambda category: scores[category], reverse=True)

    return {
        "scores": scores,
        "primaryProfile": ranked[0],
        "secondaryProfile": ranked[1],
        "intensity": {category: get_intensity(scores[category]) for category in DISC_CATEGORIES},
    }


def get_profile_description(profile: str) -> str:
    return DISC_PROFILE_DESCRIPTIONS.get(profile, "")


def get_profile_details(profile: str) -> Optional[dict]:
    return DISC_PROFILE_DETAILS.get(profile)


def get_profile_recommendations(primary: str, secondary: str) -> List[str]:
    """Three recommendations for the primary profile plus two for the secondary."""
    return [
        *DISC_PROFILE_RECOMMENDATIONS.get(primary, []),
        *DISC_PROFILE_RECOMMENDATIONS.get(secondary, [])[:2],
    ]
