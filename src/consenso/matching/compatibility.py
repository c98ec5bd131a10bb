"""
Compatibilidad de una sala.

Bucketiza y fecha el score que produce el scorer externo. Con menos de dos
personas con criterios el score es exactamente 100: no hay en qué
discrepar todavía.
"""

from itertools import combinations
from typing import Iterable, Optional

import structlog

from consenso.analysis.compatibility_scorer import BaseCompatibilityScorer
from consenso.models.compatibility import (
    SOLO_SCORE,
    CompatibilityLevel,
    CompatibilitySnapshot,
    bucket_level,
)
from consenso.models.criteria import UserCriteria

logger = structlog.get_logger()

SOLO_COMMENT = (
    "Only one user has set criteria. Compatibility will be calculated "
    "when both users have set their preferences."
)

__all__ = [
    "CompatibilityLevel",
    "SOLO_COMMENT",
    "bucket_level",
    "build_snapshot",
    "compute_compatibility",
]


def build_snapshot(
    room_id: str,
    score_percent: float,
    comment: str,
    parties: Iterable[UserCriteria],
) -> CompatibilitySnapshot:
    """Crea un snapshot fijando las referencias a los criterios usados."""
    return CompatibilitySnapshot(
        room_id=room_id,
        score_percent=score_percent,
        comment=comment,
        criteria_refs=[party.ref() for party in parties],
    )


async def compute_compatibility(
    room_id: str,
    parties: Iterable[Optional[UserCriteria]],
    scorer: BaseCompatibilityScorer,
) -> CompatibilitySnapshot:
    """
    Calcula un snapshot de compatibilidad para la sala.

    Con tres o más personas se puntúa cada par y se conserva el par con
    menor acuerdo.

    Args:
        room_id: ID de la sala
        parties: Criterios actuales de cada persona (None = sin criterios)
        scorer: Scorer externo (LLM)

    Returns:
        CompatibilitySnapshot nuevo
    """
    present = [p for p in parties if p is not None]

    if len(present) < 2:
        logger.info("Compatibilidad sin pares para comparar", room_id=room_id, parties=len(present))
        return build_snapshot(room_id, SOLO_SCORE, SOLO_COMMENT, present)

    worst = None
    for first, second in combinations(present, 2):
        result = await scorer.score(first, second)
        if worst is None or result.score_percent < worst.score_percent:
            worst = result

    snapshot = build_snapshot(room_id, worst.score_percent, worst.comment, present)
    logger.info(
        "Compatibilidad calculada",
        room_id=room_id,
        score=snapshot.score_percent,
        level=snapshot.level.value,
    )
    return snapshot
