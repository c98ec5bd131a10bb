"""
Modelos de datos del sistema.

- Criterios: SearchCriteria, CriteriaWeights, UserCriteria, CombinedCriteria
- Propiedades: Listing
- Compatibilidad: CompatibilitySnapshot
"""

from consenso.models.criteria import (
    CombineMode,
    CombinedCriteria,
    CriteriaConflict,
    CriteriaRef,
    CriteriaWeights,
    SearchCriteria,
    UserCriteria,
    latest_criteria_by_user,
)
from consenso.models.listing import Listing, ListingStatus
from consenso.models.compatibility import CompatibilityLevel, CompatibilitySnapshot, bucket_level

__all__ = [
    # Criterios
    "CombineMode",
    "CombinedCriteria",
    "CriteriaConflict",
    "CriteriaRef",
    "CriteriaWeights",
    "SearchCriteria",
    "UserCriteria",
    "latest_criteria_by_user",
    # Propiedades
    "Listing",
    "ListingStatus",
    # Compatibilidad
    "CompatibilityLevel",
    "CompatibilitySnapshot",
    "bucket_level",
]
