"""
Motor de matching de la sala.

Combina los criterios de varias personas, clasifica cada listing contra
ellos y bucketiza la compatibilidad.
"""

from consenso.matching.ranges import (
    RangeBounds,
    ReconciledRange,
    reconcile_many,
    reconcile_ranges,
    resolve_range_policy,
)
from consenso.matching.combiner import combine, combine_many
from consenso.matching.conformity import (
    COMBINED_KEY,
    ConformityReport,
    ConformityRow,
    DimensionConformity,
    MatchLevel,
    build_conformity_report,
    classify_location,
    classify_range,
    evaluate_conformity,
)
from consenso.matching.compatibility import bucket_level, build_snapshot, compute_compatibility
from consenso.matching.diff import CriteriaDiffRow, diff_criteria
from consenso.matching.engine import RoomEvaluation, RoomMatcher

__all__ = [
    # Rangos
    "RangeBounds",
    "ReconciledRange",
    "reconcile_many",
    "reconcile_ranges",
    "resolve_range_policy",
    # Combinación
    "combine",
    "combine_many",
    # Conformidad
    "COMBINED_KEY",
    "ConformityReport",
    "ConformityRow",
    "DimensionConformity",
    "MatchLevel",
    "build_conformity_report",
    "classify_location",
    "classify_range",
    "evaluate_conformity",
    # Compatibilidad
    "bucket_level",
    "build_snapshot",
    "compute_compatibility",
    # Diferencias
    "CriteriaDiffRow",
    "diff_criteria",
    # Motor
    "RoomEvaluation",
    "RoomMatcher",
]
