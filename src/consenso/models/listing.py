"""
Modelo de Listing

Propiedad candidata fijada o importada en una sala. Después de creada solo
cambian status y seen_by; external_id queda fijo para deduplicar.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from consenso.config import LISTING_STATUS_COLORS, LISTING_STATUS_LABELS


class ListingStatus(str, Enum):
    UNSEEN = "UNSEEN"
    SEEN = "SEEN"
    VISIT_PLANNED = "VISIT_PLANNED"
    VISITED = "VISITED"
    APPLIED = "APPLIED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    DELETED = "DELETED"

    @property
    def label(self) -> str:
        return LISTING_STATUS_LABELS[self.value]

    @property
    def color(self) -> str:
        return LISTING_STATUS_COLORS[self.value]


class Listing(BaseModel):
    """Propiedad candidata con atributos opcionales."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    # Identificación
    room_id: str = Field(..., description="Sala donde se fijó")
    listing_id: Optional[str] = Field(None, description="ID interno")
    source: str = Field(default="other", description="Portal origen: homegate, immoscout24, ...")
    external_id: str = Field(..., description="ID estable para deduplicar dentro de la sala")

    # Contenido
    title: str = Field(default="Untitled Listing")
    location: Optional[str] = Field(None, description="Ciudad o zona")
    address: Optional[str] = None

    # Atributos evaluables
    price: Optional[float] = None
    currency: str = Field(default="CHF")
    rooms: Optional[float] = None
    living_space: Optional[float] = Field(None, description="m²")
    year_built: Optional[int] = None
    lot_size: Optional[float] = Field(None, description="m²")
    features: list[str] = Field(default_factory=list)

    # Media
    image_url: Optional[str] = None
    external_url: Optional[str] = None

    # Estado
    added_by_user_id: Optional[str] = None
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: ListingStatus = Field(default=ListingStatus.UNSEEN)
    seen_by: list[str] = Field(default_factory=list)

    @classmethod
    def from_url(cls, url: str, room_id: str, **attributes) -> "Listing":
        """
        Crea un listing resolviendo source y external_id desde la URL.

        Quien lo agrega cuenta como que ya lo vio.
        """
        from consenso.listings.identity import resolve_listing_identity

        identity = resolve_listing_identity(url)
        added_by = attributes.get("added_by_user_id")
        if added_by and "seen_by" not in attributes:
            attributes["seen_by"] = [added_by]
        return cls(
            room_id=room_id,
            source=identity.source,
            external_id=identity.external_id,
            external_url=url,
            **attributes,
        )

    def with_status(self, status) -> "Listing":
        return self.model_copy(update={"status": ListingStatus(status)})

    def mark_seen(self, user_id: str) -> "Listing":
        """Agrega al usuario a seen_by; UNSEEN pasa a SEEN."""
        if user_id in self.seen_by:
            return self
        status = ListingStatus.SEEN if self.status == ListingStatus.UNSEEN else self.status
        return self.model_copy(
            update={"seen_by": [*self.seen_by, user_id], "status": status}
        )

    def value_for(self, dimension: str):
        """Valor del listing para una dimensión evaluable."""
        return getattr(self, dimension, None)
