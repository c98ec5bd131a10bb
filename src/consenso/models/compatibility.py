"""
Modelo de Compatibilidad

Snapshot del nivel de acuerdo entre las personas de una sala. El nivel
(LOW/MEDIUM/HIGH) se deriva siempre del score: nunca se guarda aparte.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from consenso.config import COMPATIBILITY_LEVEL_COLORS
from consenso.models.criteria import CriteriaRef, UserCriteria

# Límites de los buckets
LOW_UPPER_BOUND = 40  # score < 40 es LOW
MEDIUM_UPPER_BOUND = 75  # 40..75 inclusive es MEDIUM

# Score cuando hay menos de dos personas con criterios
SOLO_SCORE = 100.0


class CompatibilityLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def color(self) -> str:
        return COMPATIBILITY_LEVEL_COLORS[self.value]


def bucket_level(score_percent: float) -> CompatibilityLevel:
    """
    Mapea un score 0-100 a un nivel discreto.

    Única fuente de verdad para el nivel de compatibilidad.
    """
    if score_percent < LOW_UPPER_BOUND:
        return CompatibilityLevel.LOW
    if score_percent <= MEDIUM_UPPER_BOUND:
        return CompatibilityLevel.MEDIUM
    return CompatibilityLevel.HIGH


class CompatibilitySnapshot(BaseModel):
    """
    Resultado de compatibilidad de una sala en un momento dado.

    criteria_refs fija los registros UserCriteria usados, lo que permite
    detectar si el snapshot quedó viejo.
    """

    model_config = ConfigDict(frozen=True)

    room_id: str = Field(..., description="ID de la sala")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    score_percent: float = Field(..., ge=0, le=100, description="Score de acuerdo 0-100")
    comment: str = Field(default="", description="Explicación del scorer externo")
    criteria_refs: list[CriteriaRef] = Field(default_factory=list)

    @computed_field
    @property
    def level(self) -> CompatibilityLevel:
        return bucket_level(self.score_percent)

    def is_stale(
        self,
        latest_records: Iterable[UserCriteria],
        room_id: Optional[str] = None,
    ) -> bool:
        """
        Indica si alguno de los criterios actuales no es el usado.

        Es viejo si una persona referenciada tiene un registro más nuevo o si
        una persona sin referencia ya cargó criterios.
        """
        pinned = {ref.user_id: ref.timestamp for ref in self.criteria_refs}
        for record in latest_records:
            if room_id is not None and record.room_id != room_id:
                continue
            used = pinned.get(record.user_id)
            if used is None or record.timestamp > used:
                return True
        return False
