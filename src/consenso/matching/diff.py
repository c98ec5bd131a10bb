"""
Tabla de diferencias entre los criterios de cada persona y el combinado.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from consenso.formatting import EMPTY_VALUE, format_value
from consenso.matching.conformity import COMBINED_KEY
from consenso.models.criteria import CombinedCriteria, UserCriteria

DIFF_FIELDS = (
    ("location", "Location"),
    ("radius", "Radius"),
    ("offer_type", "Offer Type"),
    ("category", "Category"),
    ("price_from", "Price From"),
    ("price_to", "Price To"),
    ("rooms_from", "Rooms From"),
    ("rooms_to", "Rooms To"),
    ("living_space_from", "Living Space From"),
    ("living_space_to", "Living Space To"),
    ("features", "Features"),
)


@dataclass(frozen=True)
class CriteriaDiffRow:
    field: str
    label: str
    values: dict[str, str]
    has_diff: bool


def diff_criteria(
    parties: Mapping[str, Optional[UserCriteria]],
    combined: Optional[CombinedCriteria] = None,
) -> list[CriteriaDiffRow]:
    """
    Compara campo a campo los criterios de cada persona y el combinado.

    has_diff es True cuando hay más de un valor distinto entre los no vacíos.
    """
    rows = []
    for field, label in DIFF_FIELDS:
        values = {}
        for user_id, user_criteria in parties.items():
            value = getattr(user_criteria.criteria, field) if user_criteria else None
            values[user_id] = format_value(value, field)

        combined_value = getattr(combined.criteria, field) if combined else None
        values[COMBINED_KEY] = format_value(combined_value, field)

        distinct = {v for v in values.values() if v != EMPTY_VALUE}
        rows.append(
            CriteriaDiffRow(field=field, label=label, values=values, has_diff=len(distinct) > 1)
        )
    return rows
