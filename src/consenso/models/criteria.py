"""
Modelo de Criterios de búsqueda

Define los criterios que cada persona expresa en una sala de búsqueda,
sus pesos de importancia (1-5) y el resultado combinado de la sala.
Todos los registros son inmutables: guardar criterios crea un registro
nuevo y el "actual" es el de timestamp más reciente por (sala, usuario).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Iterable, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from consenso.config import CATEGORIES, FEATURES, OFFER_TYPES, RANGED_DIMENSIONS
from consenso.errors import InvalidCombineModeError, MissingOfferTypeError
from consenso.formatting import format_number

Feature = Literal[FEATURES]
Category = Literal[CATEGORIES]
OfferType = Literal[OFFER_TYPES]
CriteriaSource = Literal["manual", "ai_proposed"]
Weight = Annotated[int, Field(ge=1, le=5)]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CombineMode(str, Enum):
    """Política para combinar los criterios de varias personas."""

    ALL = "all"  # lo más permisivo
    MIXED = "mixed"  # estricto solo donde a todos les importa
    STRICT = "strict"  # lo más restrictivo

    @classmethod
    def parse(cls, mode) -> "CombineMode":
        """Convierte un string/enum en CombineMode o levanta InvalidCombineModeError."""
        try:
            return cls(mode)
        except ValueError:
            raise InvalidCombineModeError(mode) from None


class SearchCriteria(BaseModel):
    """
    Atributos deseados por una persona. Todo es opcional salvo offer_type.

    Si desde > hasta no se corrige acá: se reporta al evaluar conformidad.
    """

    model_config = ConfigDict(frozen=True)

    # Ubicación
    location: Optional[str] = Field(None, description="Ciudad o zona")
    radius: Optional[float] = Field(None, ge=0, description="Radio de búsqueda en km")

    # Tipo
    offer_type: OfferType = Field(..., description="buy o rent")
    category: Optional[Category] = Field(None, description="Tipo de propiedad")

    # Precio (CHF)
    price_from: Optional[float] = None
    price_to: Optional[float] = None
    only_with_price: Optional[bool] = Field(
        None, description="Excluir anuncios sin precio publicado"
    )

    # Características físicas
    rooms_from: Optional[float] = Field(None, description="Ambientes, admite 3.5")
    rooms_to: Optional[float] = None
    living_space_from: Optional[float] = Field(None, description="Superficie habitable m²")
    living_space_to: Optional[float] = None
    year_built_from: Optional[int] = None
    year_built_to: Optional[int] = None
    lot_size_from: Optional[float] = Field(None, description="Superficie del terreno m²")
    lot_size_to: Optional[float] = None
    floor: Optional[int] = None
    availability: Optional[str] = None

    # Extras
    free_text: Optional[str] = None
    features: Optional[list[Feature]] = None

    @model_validator(mode="before")
    @classmethod
    def _require_offer_type(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("offer_type"):
            raise MissingOfferTypeError()
        return data

    @field_validator("features")
    @classmethod
    def _dedupe_features(cls, features: Optional[list[str]]) -> Optional[list[str]]:
        # Conjunto de tags: sin repetidos, conservando el orden
        if features is None:
            return None
        return list(dict.fromkeys(features))

    def bounds(self, dimension: str) -> tuple[Optional[float], Optional[float]]:
        """Devuelve (desde, hasta) de una dimensión con rango."""
        return (
            getattr(self, f"{dimension}_from"),
            getattr(self, f"{dimension}_to"),
        )

    def summary(self) -> str:
        """Resumen corto para el feed de actividad."""
        parts = []

        if self.location:
            parts.append(self.location)

        if self.price_to is not None:
            parts.append(f"up to CHF {format_number(self.price_to)}")

        rooms_from, rooms_to = self.rooms_from, self.rooms_to
        if rooms_from is not None and rooms_to is not None:
            parts.append(f"{format_number(rooms_from)}-{format_number(rooms_to)} rooms")
        elif rooms_from is not None:
            parts.append(f"{format_number(rooms_from)}+ rooms")
        elif rooms_to is not None:
            parts.append(f"up to {format_number(rooms_to)} rooms")

        return ", ".join(parts) if parts else "Updated criteria"


class CriteriaWeights(BaseModel):
    """
    Importancia por dimensión (1 = trivial, 5 = imprescindible).

    La ausencia de peso es neutral, no cero. Acepta también las claves por
    límite (price_from, price_to, ...) y las pliega en la dimensión.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    location: Optional[Weight] = None
    radius: Optional[Weight] = None
    offer_type: Optional[Weight] = None
    category: Optional[Weight] = None
    price: Optional[Weight] = None
    rooms: Optional[Weight] = None
    living_space: Optional[Weight] = None
    year_built: Optional[Weight] = None
    lot_size: Optional[Weight] = None
    floor: Optional[Weight] = None
    availability: Optional[Weight] = None
    features: Optional[Weight] = None

    # Pesos por tag individual
    feature_weights: dict[Feature, Weight] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _fold_bound_weights(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        for dimension in RANGED_DIMENSIONS:
            found = [
                data.pop(key)
                for key in (f"{dimension}_from", f"{dimension}_to")
                if data.get(key) is not None
            ]
            if data.get(dimension) is not None:
                found.append(data[dimension])
            if found:
                data[dimension] = max(found)
        return data

    def for_dimension(self, dimension: str) -> Optional[int]:
        return getattr(self, dimension, None)

    def for_feature(self, feature: str) -> Optional[int]:
        """Peso de un tag; sin peso propio hereda el de la dimensión features."""
        return self.feature_weights.get(feature, self.features)


class CriteriaRef(BaseModel):
    """Referencia exacta a un registro UserCriteria."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    timestamp: datetime


class UserCriteria(BaseModel):
    """Criterios guardados por una persona en una sala. Append-only."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    room_id: str = Field(..., description="ID de la sala de búsqueda")
    user_id: str = Field(..., description="ID de la persona")
    timestamp: datetime = Field(default_factory=_utcnow)
    criteria: SearchCriteria
    weights: CriteriaWeights = Field(default_factory=CriteriaWeights)
    source: CriteriaSource = Field(default="manual")

    def ref(self) -> CriteriaRef:
        return CriteriaRef(user_id=self.user_id, timestamp=self.timestamp)


class CriteriaConflict(BaseModel):
    """Dimensión escalar donde personas con peso alto piden valores distintos."""

    model_config = ConfigDict(frozen=True)

    dimension: str
    values: dict[str, Any] = Field(..., description="user_id -> valor pedido")


class CombinedCriteria(BaseModel):
    """
    Criterios combinados de una sala. Siempre derivados, nunca editados:
    cada recálculo genera un registro nuevo.
    """

    model_config = ConfigDict(frozen=True)

    room_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=_utcnow)
    criteria: SearchCriteria
    weights: CriteriaWeights = Field(default_factory=CriteriaWeights)
    from_user_ids: list[str] = Field(default_factory=list)
    combine_mode: CombineMode

    # Resultados marcados, no errores
    infeasible_dimensions: list[str] = Field(
        default_factory=list, description="Dimensiones con desde > hasta tras combinar"
    )
    conflicts: list[CriteriaConflict] = Field(default_factory=list)

    @property
    def is_feasible(self) -> bool:
        return not self.infeasible_dimensions and not self.conflicts


def latest_criteria_by_user(
    records: Iterable[UserCriteria],
    room_id: Optional[str] = None,
) -> dict[str, UserCriteria]:
    """
    Selecciona el registro actual (timestamp más reciente) por usuario.

    Si se pasa room_id, ignora registros de otras salas. Conserva el orden
    de primera aparición de cada usuario.
    """
    latest: dict[str, UserCriteria] = {}
    for record in records:
        if room_id is not None and record.room_id != room_id:
            continue
        current = latest.get(record.user_id)
        if current is None or record.timestamp > current.timestamp:
            latest[record.user_id] = record
    return latest
