"""
Conformidad de un listing contra un conjunto de criterios.

Clasifica cada dimensión evaluada como match / near / miss / unknown.
El peso se adjunta solo para display: nunca cambia la clasificación.
Todas las funciones son puras y no comparten estado mutable.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

import structlog

from consenso.config import DIMENSION_LABELS, RANGED_DIMENSIONS, get_settings
from consenso.formatting import format_value
from consenso.models.criteria import CombinedCriteria, CriteriaWeights, SearchCriteria, UserCriteria
from consenso.models.listing import Listing

logger = structlog.get_logger()

# Filas que muestra el reporte por defecto
REPORT_DIMENSIONS = ("price", "rooms", "living_space", "location")

# Piso del rango cuando no hay "desde"
DIMENSION_FLOORS = {dimension: 0.0 for dimension in RANGED_DIMENSIONS}

COMBINED_KEY = "combined"


class MatchLevel(str, Enum):
    MATCH = "match"
    NEAR = "near"
    MISS = "miss"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class DimensionConformity:
    """Clasificación de una dimensión para una persona (o el combinado)."""

    level: MatchLevel
    weight: Optional[int] = None
    range_inverted: bool = False  # los criterios tienen desde > hasta

    def to_dict(self) -> dict:
        data = {"level": self.level.value}
        if self.weight is not None:
            data["weight"] = self.weight
        if self.range_inverted:
            data["range_inverted"] = True
        return data


def classify_range(
    value: Optional[float],
    minimum: Optional[float],
    maximum: Optional[float],
    tolerance: float,
    floor: float = 0.0,
) -> MatchLevel:
    """
    Clasifica un valor numérico contra un rango opcional.

    El margen de tolerancia es tolerance * (hasta - desde) con ambos límites
    finitos, o tolerance * el único límite finito. 'near' solo aplica justo
    afuera de un límite especificado.
    """
    if value is None:
        return MatchLevel.UNKNOWN
    if minimum is None and maximum is None:
        return MatchLevel.UNKNOWN

    effective_min = minimum if minimum is not None else floor
    effective_max = maximum if maximum is not None else math.inf

    if effective_min <= value <= effective_max:
        return MatchLevel.MATCH

    span = effective_min if math.isinf(effective_max) else effective_max - effective_min
    band = tolerance * abs(span)

    if minimum is not None and minimum - band <= value < minimum:
        return MatchLevel.NEAR
    if maximum is not None and maximum < value <= maximum + band:
        return MatchLevel.NEAR
    return MatchLevel.MISS


def classify_location(
    listing_location: Optional[str], criteria_location: Optional[str]
) -> MatchLevel:
    """Match si la ubicación del listing contiene la pedida (sin mayúsculas). Sin 'near'."""
    if not criteria_location or not listing_location:
        return MatchLevel.UNKNOWN
    if criteria_location.casefold() in listing_location.casefold():
        return MatchLevel.MATCH
    return MatchLevel.MISS


def evaluate_conformity(
    listing: Listing,
    criteria: SearchCriteria,
    weights: Optional[CriteriaWeights] = None,
    tolerance: Optional[float] = None,
) -> dict[str, DimensionConformity]:
    """
    Evalúa un listing contra un conjunto de criterios.

    Args:
        listing: Listing a evaluar
        criteria: Criterios de una persona o combinados
        weights: Pesos a adjuntar a cada fila (opcional)
        tolerance: Fracción de tolerancia (default: settings.conformity_tolerance)

    Returns:
        Diccionario dimensión -> DimensionConformity
    """
    weights = weights or CriteriaWeights()
    if tolerance is None:
        tolerance = get_settings().conformity_tolerance

    result = {}
    for dimension in RANGED_DIMENSIONS:
        minimum, maximum = criteria.bounds(dimension)
        inverted = minimum is not None and maximum is not None and minimum > maximum
        if inverted:
            logger.debug(
                "Rango invertido en criterios",
                dimension=dimension,
                minimum=minimum,
                maximum=maximum,
            )
        result[dimension] = DimensionConformity(
            level=classify_range(
                listing.value_for(dimension),
                minimum,
                maximum,
                tolerance,
                DIMENSION_FLOORS[dimension],
            ),
            weight=weights.for_dimension(dimension),
            range_inverted=inverted,
        )

    result["location"] = DimensionConformity(
        level=classify_location(listing.location, criteria.location),
        weight=weights.location,
    )
    return result


@dataclass(frozen=True)
class ConformityRow:
    """Fila del reporte: una dimensión para todas las personas."""

    dimension: str
    label: str
    listing_value: str
    matches: dict[str, DimensionConformity] = field(default_factory=dict)


@dataclass(frozen=True)
class ConformityReport:
    """Reporte de conformidad de un listing para una sala."""

    external_id: str
    rows: list[ConformityRow]

    def row(self, dimension: str) -> Optional[ConformityRow]:
        for row in self.rows:
            if row.dimension == dimension:
                return row
        return None

    def to_dict(self) -> dict:
        return {
            "external_id": self.external_id,
            "rows": [
                {
                    "dimension": row.dimension,
                    "label": row.label,
                    "listing_value": row.listing_value,
                    "matches": {
                        key: match.to_dict() for key, match in row.matches.items()
                    },
                }
                for row in self.rows
            ],
        }


def build_conformity_report(
    listing: Listing,
    parties: Mapping[str, Optional[UserCriteria]],
    combined: Optional[CombinedCriteria] = None,
    tolerance: Optional[float] = None,
    dimensions: tuple[str, ...] = REPORT_DIMENSIONS,
) -> ConformityReport:
    """
    Arma el reporte de un listing contra cada persona y el combinado.

    Una persona sin criterios queda 'unknown' en todas las filas.
    """
    evaluations: dict[str, dict[str, DimensionConformity]] = {}
    unknown = DimensionConformity(level=MatchLevel.UNKNOWN)

    for user_id, user_criteria in parties.items():
        if user_criteria is None:
            evaluations[user_id] = {d: unknown for d in dimensions}
            continue
        evaluations[user_id] = evaluate_conformity(
            listing, user_criteria.criteria, user_criteria.weights, tolerance
        )

    if combined is not None:
        evaluations[COMBINED_KEY] = evaluate_conformity(
            listing, combined.criteria, combined.weights, tolerance
        )

    rows = [
        ConformityRow(
            dimension=dimension,
            label=DIMENSION_LABELS.get(dimension, dimension),
            listing_value=format_value(listing.value_for(dimension), dimension),
            matches={key: evaluation[dimension] for key, evaluation in evaluations.items()},
        )
        for dimension in dimensions
    ]
    return ConformityReport(external_id=listing.external_id, rows=rows)
