"""Factor breakdown rows for a prediction's weighted scoring."""
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from matchday.config.settings import load_factor_config

logger = logging.getLogger(__name__)

CURRENT_SYSTEM = "A-F"
LEGACY_SYSTEM = "A-I"


@dataclass
class FactorRow:
    """One factor of the scoring breakdown."""
    key: str
    letter: str
    label: str
    weight: int
    score: Optional[float]
    weighted: Optional[float]
    notes: Optional[str]
    tier: str  # strong_home, home, neutral, away, strong_away


@lru_cache(maxsize=1)
def factor_systems() -> dict:
    return load_factor_config()


def score_tier(score: Optional[float]) -> str:
    """Scores above 50 favour the home side, below 50 the away side."""
    if score is None:
        return "neutral"
    if score >= 65:
        return "strong_home"
    if score >= 55:
        return "home"
    if score >= 45:
        return "neutral"
    if score >= 35:
        return "away"
    return "strong_away"


def detect_factor_system(factors: Optional[dict]) -> Optional[str]:
    """Return "A-F", "A-I" or None depending on which factor keys are present.

    Keys shared by both systems (base strength, form) do not decide; a
    prediction carrying only those is reported as the current system.
    """
    if not factors:
        return None

    systems = factor_systems()
    current = set(systems[CURRENT_SYSTEM])
    legacy = set(systems[LEGACY_SYSTEM])
    present = set(factors)

    if present & (legacy - current):
        return LEGACY_SYSTEM
    if present & current:
        return CURRENT_SYSTEM
    return None


def factor_breakdown(factors: Optional[dict]) -> list[FactorRow]:
    """Rows for whichever factor keys are present, in letter order."""
    system = detect_factor_system(factors)
    if system is None:
        return []

    rows = []
    for key, meta in factor_systems()[system].items():
        data = factors.get(key)
        if data is None:
            continue
        if not isinstance(data, dict):
            # Some older rows store a bare score
            data = {"score": data}
        score = data.get("score")
        rows.append(FactorRow(
            key=key,
            letter=key.split("_", 1)[0],
            label=meta["label"],
            weight=meta["weight"],
            score=score,
            weighted=data.get("weighted"),
            notes=data.get("notes"),
            tier=score_tier(score),
        ))
    return rows
