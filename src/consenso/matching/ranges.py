"""
Reconciliación de rangos numéricos (desde/hasta) de una dimensión.

- all: el rango más amplio (mínimo de los desde, máximo de los hasta)
- strict: el rango más angosto (máximo de los desde, mínimo de los hasta)
- mixed: strict si a todas las partes les importa (peso >= umbral), si no all

Un límite ausente vale -inf (desde) o +inf (hasta). Si el resultado queda
con desde > hasta se marca como infeasible: es un dato, no un error.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from consenso.config import get_settings
from consenso.models.criteria import CombineMode


@dataclass(frozen=True)
class RangeBounds:
    """Par (desde, hasta) opcional de una dimensión."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None


@dataclass(frozen=True)
class ReconciledRange:
    """Rango combinado de una dimensión."""

    minimum: Optional[float] = None
    maximum: Optional[float] = None
    infeasible: bool = False


def resolve_range_policy(
    mode,
    weights: Iterable[Optional[int]] = (),
    threshold: Optional[int] = None,
) -> CombineMode:
    """
    Resuelve el modo efectivo (ALL o STRICT) para una dimensión.

    Un peso ausente es neutral y no alcanza el umbral.
    """
    mode = CombineMode.parse(mode)
    if mode != CombineMode.MIXED:
        return mode

    if threshold is None:
        threshold = get_settings().mixed_weight_threshold
    weights = list(weights)
    if weights and all(w is not None and w >= threshold for w in weights):
        return CombineMode.STRICT
    return CombineMode.ALL


def reconcile_many(bounds: Sequence[RangeBounds], policy) -> ReconciledRange:
    """
    Combina los rangos de N partes con una política ALL o STRICT ya resuelta.

    Con una sola parte el rango se devuelve tal cual.
    """
    policy = CombineMode.parse(policy)
    if policy == CombineMode.MIXED:
        raise ValueError("reconcile_many requiere una política resuelta (all/strict)")

    if not bounds:
        return ReconciledRange()

    if len(bounds) == 1:
        minimum, maximum = bounds[0].minimum, bounds[0].maximum
    elif policy == CombineMode.ALL:
        mins = [b.minimum for b in bounds]
        maxs = [b.maximum for b in bounds]
        minimum = None if None in mins else min(mins)
        maximum = None if None in maxs else max(maxs)
    else:
        mins = [b.minimum for b in bounds if b.minimum is not None]
        maxs = [b.maximum for b in bounds if b.maximum is not None]
        minimum = max(mins) if mins else None
        maximum = min(maxs) if maxs else None

    infeasible = minimum is not None and maximum is not None and minimum > maximum
    return ReconciledRange(minimum=minimum, maximum=maximum, infeasible=infeasible)


def reconcile_ranges(
    a: RangeBounds,
    b: RangeBounds,
    mode,
    weight_a: Optional[int] = None,
    weight_b: Optional[int] = None,
    threshold: Optional[int] = None,
) -> ReconciledRange:
    """
    Combina dos rangos de una dimensión según el modo.

    Args:
        a: Rango de la primera parte
        b: Rango de la segunda parte
        mode: 'all', 'mixed' o 'strict'
        weight_a: Peso de la dimensión para a (solo usado en mixed)
        weight_b: Peso de la dimensión para b (solo usado en mixed)
        threshold: Umbral de mixed (default: settings.mixed_weight_threshold)

    Returns:
        ReconciledRange con el flag infeasible si desde > hasta
    """
    policy = resolve_range_policy(mode, [weight_a, weight_b], threshold)
    return reconcile_many([a, b], policy)
