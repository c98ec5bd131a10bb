"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales y tablas estáticas.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Encontrar la raíz del proyecto (donde está el .env)
# config.py -> consenso/ -> src/ -> project root
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Conformidad
    conformity_tolerance: float = Field(
        0.10,
        ge=0.0,
        le=1.0,
        description="Fracción del rango que se acepta como 'near' fuera de los límites",
    )

    # Combinación
    mixed_weight_threshold: int = Field(
        3,
        ge=1,
        le=5,
        description="Peso desde el cual 'mixed' se comporta como 'strict' y se marcan conflictos",
    )
    party_order: Literal["input", "user_id"] = Field(
        "input",
        description="Orden determinístico para desempates: orden de entrada o user_id ascendente",
    )
    default_offer_type: Literal["buy", "rent"] = Field(
        "buy", description="Tipo de oferta cuando no hay criterios de nadie"
    )

    # LLM Provider (scoring de compatibilidad)
    llm_provider: str = Field(
        "groq",
        description="Proveedor de LLM a usar: 'gemini' o 'groq'"
    )

    # Gemini
    gemini_api_key: Optional[str] = Field(None, description="API key de Google Gemini")
    gemini_model: str = Field("gemini-2.0-flash", description="Modelo de Gemini a usar")

    # Groq
    groq_api_key: Optional[str] = Field(None, description="API key de Groq")
    groq_model: str = Field(
        "llama-3.3-70b-versatile",
        description="Modelo de Groq a usar (llama-3.1-8b-instant, llama-3.3-70b-versatile)"
    )

    # Compatibilidad
    compatibility_fallback_score: float = Field(
        50.0,
        ge=0.0,
        le=100.0,
        description="Score usado cuando el scorer externo falla o no devuelve número",
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
FEATURES = (
    "balcony",
    "terrace",
    "elevator",
    "wheelchair_access",
    "parking",
    "garage",
    "minergie",
    "new_building",
    "old_building",
    "swimming_pool",
)

FEATURE_LABELS = {
    "balcony": "Balcony",
    "terrace": "Terrace",
    "elevator": "Elevator",
    "wheelchair_access": "Wheelchair Access",
    "parking": "Parking Space",
    "garage": "Garage",
    "minergie": "Minergie",
    "new_building": "New Building",
    "old_building": "Old Building",
    "swimming_pool": "Swimming Pool",
}

CATEGORIES = ("apartment", "house", "plot", "parking", "commercial")

OFFER_TYPES = ("buy", "rent")

CURRENCY_CODE = "CHF"

# Dimensiones con rango (desde/hasta) y su etiqueta de display
RANGED_DIMENSIONS = ("price", "rooms", "living_space", "year_built", "lot_size")

SCALAR_DIMENSIONS = (
    "location",
    "category",
    "offer_type",
    "radius",
    "floor",
    "availability",
)

DIMENSION_LABELS = {
    "location": "Location",
    "radius": "Radius",
    "offer_type": "Offer Type",
    "category": "Category",
    "price": "Price",
    "rooms": "Rooms",
    "living_space": "Living Space",
    "year_built": "Year Built",
    "lot_size": "Lot Size",
    "floor": "Floor",
    "availability": "Availability",
    "features": "Features",
}

LISTING_STATUS_LABELS = {
    "UNSEEN": "Unseen",
    "SEEN": "Seen",
    "VISIT_PLANNED": "Visit Planned",
    "VISITED": "Visited",
    "APPLIED": "Applied",
    "ACCEPTED": "Accepted",
    "REJECTED": "Rejected",
    "DELETED": "Deleted",
}

LISTING_STATUS_COLORS = {
    "UNSEEN": "bg-gray-500",
    "SEEN": "bg-blue-500",
    "VISIT_PLANNED": "bg-yellow-500",
    "VISITED": "bg-purple-500",
    "APPLIED": "bg-orange-500",
    "ACCEPTED": "bg-green-500",
    "REJECTED": "bg-red-500",
    "DELETED": "bg-gray-400",
}

COMPATIBILITY_LEVEL_COLORS = {
    "LOW": "text-red-500",
    "MEDIUM": "text-yellow-500",
    "HIGH": "text-green-500",
}
