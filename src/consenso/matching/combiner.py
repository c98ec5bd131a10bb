"""
Combinación de criterios de varias personas en un único criterio de sala.

Reglas por tipo de dimensión:
- Rangos (precio, ambientes, superficie, año, terreno): RangeReconciler
- Escalares (ubicación, categoría, tipo de oferta, radio, piso, disponibilidad):
  en 'all' gana el primer valor presente según el orden de partes; en
  'strict'/'mixed' dos valores distintos con peso alto son un conflicto
- Features: unión en 'all', intersección en 'strict', por tag en 'mixed'
- Pesos: máximo de los pesos presentes

La función es determinística: mismas entradas y modo, mismo resultado.
"""

from typing import Iterable, Optional

import structlog

from consenso.config import RANGED_DIMENSIONS, SCALAR_DIMENSIONS, Settings, get_settings
from consenso.errors import MissingOfferTypeError
from consenso.matching.ranges import RangeBounds, reconcile_many, resolve_range_policy
from consenso.models.criteria import (
    CombineMode,
    CombinedCriteria,
    CriteriaConflict,
    CriteriaWeights,
    SearchCriteria,
    UserCriteria,
)

logger = structlog.get_logger()

WEIGHT_FIELDS = tuple(
    name for name in CriteriaWeights.model_fields if name != "feature_weights"
)


def _comparable(value):
    return value.casefold() if isinstance(value, str) else value


def _order_parties(
    parties: Iterable[Optional[UserCriteria]], party_order: str
) -> list[UserCriteria]:
    """Descarta partes sin criterios y aplica el orden de desempate."""
    present = [p for p in parties if p is not None]
    for party in present:
        if getattr(party.criteria, "offer_type", None) is None:
            raise MissingOfferTypeError(party.user_id)
    if party_order == "user_id":
        present = sorted(present, key=lambda p: p.user_id)
    return present


def _unique_user_ids(parties: list[UserCriteria]) -> list[str]:
    seen = []
    for party in parties:
        if party.user_id not in seen:
            seen.append(party.user_id)
    return seen


def _merge_scalar(
    dimension: str,
    parties: list[UserCriteria],
    mode: CombineMode,
    threshold: int,
) -> tuple[Optional[object], Optional[CriteriaConflict]]:
    """
    Combina una dimensión escalar.

    Returns:
        (valor combinado, conflicto o None)
    """
    entries = [
        (party, getattr(party.criteria, dimension))
        for party in parties
        if getattr(party.criteria, dimension) is not None
    ]
    if not entries:
        return None, None

    distinct = {_comparable(value) for _, value in entries}
    if len(distinct) == 1 or mode == CombineMode.ALL:
        return entries[0][1], None

    strong = [
        value
        for party, value in entries
        if (party.weights.for_dimension(dimension) or 0) >= threshold
    ]
    if len({_comparable(value) for value in strong}) > 1:
        conflict = CriteriaConflict(
            dimension=dimension,
            values={party.user_id: value for party, value in entries},
        )
        return None, conflict
    if strong:
        return strong[0], None

    # Sin pesos altos: gana el de mayor peso, a igual peso el primero
    _, value = max(
        entries, key=lambda entry: entry[0].weights.for_dimension(dimension) or 0
    )
    return value, None


def _merge_features(
    parties: list[UserCriteria], mode: CombineMode, threshold: int
) -> Optional[list[str]]:
    specified = [p for p in parties if p.criteria.features]
    if not specified:
        if any(p.criteria.features is not None for p in parties):
            return []
        return None

    ordered = []
    for party in specified:
        for tag in party.criteria.features:
            if tag not in ordered:
                ordered.append(tag)

    def in_all(tag: str) -> bool:
        return all(tag in p.criteria.features for p in specified)

    def weak_for_all(tag: str) -> bool:
        return all((p.weights.for_feature(tag) or 0) < threshold for p in specified)

    if mode == CombineMode.ALL:
        return ordered
    if mode == CombineMode.STRICT:
        return [tag for tag in ordered if in_all(tag)]
    return [tag for tag in ordered if weak_for_all(tag) or in_all(tag)]


def _merge_only_with_price(parties: list[UserCriteria]) -> Optional[bool]:
    values = [
        p.criteria.only_with_price
        for p in parties
        if p.criteria.only_with_price is not None
    ]
    return any(values) if values else None


def _merge_free_text(parties: list[UserCriteria]) -> Optional[str]:
    """Une los textos distintos tal cual; "" solo queda si nadie escribió otro."""
    texts = []
    for party in parties:
        text = party.criteria.free_text
        if text is not None and text not in texts:
            texts.append(text)
    written = [text for text in texts if text]
    if written:
        return " ".join(written)
    return texts[0] if texts else None


def _merge_weights(parties: list[UserCriteria]) -> CriteriaWeights:
    """Peso combinado = máximo de los presentes; ausente en todos sigue ausente."""
    merged = {}
    for field in WEIGHT_FIELDS:
        present = [
            p.weights.for_dimension(field)
            for p in parties
            if p.weights.for_dimension(field) is not None
        ]
        if present:
            merged[field] = max(present)

    feature_weights: dict[str, int] = {}
    for party in parties:
        for tag, weight in party.weights.feature_weights.items():
            feature_weights[tag] = max(weight, feature_weights.get(tag, 0))
    if feature_weights:
        merged["feature_weights"] = feature_weights

    return CriteriaWeights(**merged)


def _inverted_dimensions(criteria: SearchCriteria) -> list[str]:
    inverted = []
    for dimension in RANGED_DIMENSIONS:
        low, high = criteria.bounds(dimension)
        if low is not None and high is not None and low > high:
            inverted.append(dimension)
    return inverted


def combine_many(
    parties: Iterable[Optional[UserCriteria]],
    mode,
    room_id: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> CombinedCriteria:
    """
    Combina los criterios actuales de N personas.

    Args:
        parties: UserCriteria actual de cada persona (None = sin criterios)
        mode: 'all', 'mixed' o 'strict'
        room_id: ID de la sala (default: el de la primera parte)
        settings: Settings a usar (default: get_settings())

    Returns:
        CombinedCriteria con from_user_ids, modo, rangos infeasibles y conflictos

    Raises:
        InvalidCombineModeError: modo desconocido
        MissingOfferTypeError: criterios sin offer_type
    """
    mode = CombineMode.parse(mode)
    settings = settings or get_settings()
    present = _order_parties(parties, settings.party_order)

    if room_id is None and present:
        room_id = present[0].room_id
    from_user_ids = _unique_user_ids(present)

    if not present:
        return CombinedCriteria(
            room_id=room_id,
            criteria=SearchCriteria(
                offer_type=settings.default_offer_type, only_with_price=True
            ),
            combine_mode=mode,
        )

    if len(present) == 1:
        party = present[0]
        return CombinedCriteria(
            room_id=room_id,
            criteria=party.criteria,
            weights=party.weights,
            from_user_ids=from_user_ids,
            combine_mode=mode,
            infeasible_dimensions=_inverted_dimensions(party.criteria),
        )

    threshold = settings.mixed_weight_threshold
    values: dict[str, object] = {}
    infeasible: list[str] = []
    conflicts: list[CriteriaConflict] = []

    # Paso 1: rangos
    for dimension in RANGED_DIMENSIONS:
        policy = resolve_range_policy(
            mode,
            [p.weights.for_dimension(dimension) for p in present],
            threshold,
        )
        result = reconcile_many(
            [RangeBounds(*p.criteria.bounds(dimension)) for p in present],
            policy,
        )
        values[f"{dimension}_from"] = result.minimum
        values[f"{dimension}_to"] = result.maximum
        if result.infeasible:
            infeasible.append(dimension)

    # Paso 2: escalares
    for dimension in SCALAR_DIMENSIONS:
        value, conflict = _merge_scalar(dimension, present, mode, threshold)
        if conflict is not None:
            conflicts.append(conflict)
        values[dimension] = value

    # offer_type es obligatorio: con conflicto queda el de la primera parte
    if values["offer_type"] is None:
        values["offer_type"] = present[0].criteria.offer_type

    # Paso 3: features y extras
    values["features"] = _merge_features(present, mode, threshold)
    values["only_with_price"] = _merge_only_with_price(present)
    values["free_text"] = _merge_free_text(present)

    combined = CombinedCriteria(
        room_id=room_id,
        criteria=SearchCriteria(**values),
        weights=_merge_weights(present),
        from_user_ids=from_user_ids,
        combine_mode=mode,
        infeasible_dimensions=infeasible,
        conflicts=conflicts,
    )

    logger.debug(
        "Criterios combinados",
        room_id=room_id,
        mode=mode.value,
        parties=len(present),
        infeasible=infeasible,
        conflicts=[c.dimension for c in conflicts],
    )
    return combined


def combine(
    criteria_a: Optional[UserCriteria],
    criteria_b: Optional[UserCriteria],
    mode,
    room_id: Optional[str] = None,
) -> CombinedCriteria:
    """Combina los criterios de dos personas (ver combine_many)."""
    return combine_many([criteria_a, criteria_b], mode, room_id=room_id)
