"""
Motor de la sala de búsqueda.

Orquesta el núcleo para una sala:
- Criterios actuales: el registro más reciente de cada persona
- Combinación: un criterio único según el modo elegido
- Conformidad: reporte por listing contra cada persona y el combinado
- Compatibilidad: snapshot con el score del scorer externo
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

import structlog

from consenso.analysis import BaseCompatibilityScorer
from consenso.config import Settings, get_settings
from consenso.matching.combiner import combine_many
from consenso.matching.compatibility import compute_compatibility
from consenso.matching.conformity import ConformityReport, build_conformity_report
from consenso.matching.diff import CriteriaDiffRow, diff_criteria
from consenso.models import (
    CombinedCriteria,
    CompatibilitySnapshot,
    Listing,
    ListingStatus,
    UserCriteria,
    latest_criteria_by_user,
)

logger = structlog.get_logger()


@dataclass
class RoomEvaluation:
    """Resultado de evaluar una sala completa."""

    room_id: str
    parties: dict[str, UserCriteria]
    combined: CombinedCriteria
    diff: list[CriteriaDiffRow]
    reports: list[ConformityReport] = field(default_factory=list)
    compatibility: Optional[CompatibilitySnapshot] = None


class RoomMatcher:
    """
    Fachada del núcleo para la capa de servicios.

    No guarda estado entre llamadas: cada método depende solo de sus
    argumentos (y de la configuración).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        scorer: Optional[BaseCompatibilityScorer] = None,
    ):
        self.settings = settings or get_settings()
        self._scorer = scorer

    @property
    def scorer(self) -> BaseCompatibilityScorer:
        if self._scorer is None:
            from consenso.analysis import LLMCompatibilityScorer

            self._scorer = LLMCompatibilityScorer()
        return self._scorer

    def current_criteria(
        self, room_id: str, records: Iterable[UserCriteria]
    ) -> dict[str, UserCriteria]:
        """Criterios actuales por persona dentro de la sala."""
        return latest_criteria_by_user(records, room_id=room_id)

    def combine(
        self,
        room_id: str,
        records: Iterable[UserCriteria],
        mode="all",
    ) -> CombinedCriteria:
        """Combina los criterios actuales de la sala."""
        parties = self.current_criteria(room_id, records)
        combined = combine_many(
            parties.values(), mode, room_id=room_id, settings=self.settings
        )

        if combined.infeasible_dimensions or combined.conflicts:
            logger.warning(
                "Preferencias en conflicto",
                room_id=room_id,
                mode=combined.combine_mode.value,
                infeasible=combined.infeasible_dimensions,
                conflicts=[c.dimension for c in combined.conflicts],
            )
        return combined

    def reports(
        self,
        listings: Iterable[Listing],
        parties: dict[str, UserCriteria],
        combined: Optional[CombinedCriteria] = None,
    ) -> list[ConformityReport]:
        """Reportes de conformidad; los listings eliminados se omiten."""
        return [
            build_conformity_report(
                listing,
                parties,
                combined,
                tolerance=self.settings.conformity_tolerance,
            )
            for listing in listings
            if listing.status != ListingStatus.DELETED
        ]

    async def compatibility(
        self,
        room_id: str,
        records: Iterable[UserCriteria],
        previous: Optional[CompatibilitySnapshot] = None,
    ) -> CompatibilitySnapshot:
        """
        Devuelve el snapshot de compatibilidad de la sala.

        Si el snapshot anterior sigue vigente se reutiliza sin llamar al scorer.
        """
        parties = self.current_criteria(room_id, records)

        if previous is not None and not previous.is_stale(parties.values(), room_id=room_id):
            logger.debug("Snapshot de compatibilidad vigente", room_id=room_id)
            return previous

        return await compute_compatibility(room_id, parties.values(), self.scorer)

    async def evaluate_room(
        self,
        room_id: str,
        records: Iterable[UserCriteria],
        listings: Iterable[Listing] = (),
        mode="all",
        with_compatibility: bool = False,
    ) -> RoomEvaluation:
        """
        Evalúa una sala completa.

        Args:
            room_id: ID de la sala
            records: Historial de UserCriteria (se toma el último por persona)
            listings: Listings fijados en la sala
            mode: Modo de combinación
            with_compatibility: Calcular también la compatibilidad (llama al scorer)

        Returns:
            RoomEvaluation con combinado, diferencias y reportes
        """
        records = list(records)
        room_listings = [listing for listing in listings if listing.room_id == room_id]
        parties = self.current_criteria(room_id, records)
        combined = self.combine(room_id, records, mode)

        evaluation = RoomEvaluation(
            room_id=room_id,
            parties=parties,
            combined=combined,
            diff=diff_criteria(parties, combined),
            reports=self.reports(room_listings, parties, combined),
        )

        if with_compatibility:
            evaluation.compatibility = await self.compatibility(room_id, records)

        logger.info(
            "Sala evaluada",
            room_id=room_id,
            parties=len(parties),
            listings=len(evaluation.reports),
            mode=combined.combine_mode.value,
        )
        return evaluation
