"""
Identidad de listings por URL.

Deriva un external_id estable ("source:id") para deduplicar propiedades
dentro de una sala. Es una heurística, no una garantía: dos URLs que solo
difieren en parámetros de tracking pueden resolver distinto.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional
from urllib.parse import urlparse

import structlog

if TYPE_CHECKING:
    from consenso.models.listing import Listing

logger = structlog.get_logger()

OTHER_SOURCE = "other"

# Primer grupo de dígitos que ocupa un segmento completo del path
NUMERIC_ID_PATTERN = re.compile(r"/(\d+)(?:\?|$|/)")

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class ListingSourceSpec:
    """Portal conocido: dominio y, si existe, patrón de ID numérico en la URL."""

    name: str
    domain: str
    id_pattern: Optional[re.Pattern] = None

    def matches_host(self, host: str) -> bool:
        return host == self.domain or host.endswith("." + self.domain)


SOURCE_REGISTRY: tuple[ListingSourceSpec, ...] = (
    ListingSourceSpec("homegate", "homegate.ch", NUMERIC_ID_PATTERN),
    ListingSourceSpec("immoscout24", "immoscout24.ch", NUMERIC_ID_PATTERN),
    ListingSourceSpec("anibis", "anibis.ch", NUMERIC_ID_PATTERN),
    ListingSourceSpec("facebook", "facebook.com"),
    ListingSourceSpec("ricardo", "ricardo.ch", NUMERIC_ID_PATTERN),
    ListingSourceSpec("comparis", "comparis.ch"),
)


@dataclass(frozen=True)
class ListingIdentity:
    """Resultado de resolver una URL."""

    source: str
    external_id: str


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        # urlparse falla con hosts IPv6 mal formados
        return ""


def _find_spec(url: str) -> Optional[ListingSourceSpec]:
    host = _hostname(url)
    if not host:
        return None
    for spec in SOURCE_REGISTRY:
        if spec.matches_host(host):
            return spec
    return None


def detect_source(url: str) -> str:
    """Detecta el portal origen por hostname; desconocido -> 'other'."""
    spec = _find_spec(url)
    return spec.name if spec else OTHER_SOURCE


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def url_hash(url: str) -> str:
    """
    Hash determinístico y sensible al orden de una URL.

    Acumula h = h * 31 + código sobre las unidades UTF-16 de la URL,
    envolviendo a entero con signo de 32 bits, y codifica |h| en base 36.
    Usa UTF-16 para coincidir con los IDs generados por el cliente web.
    """
    encoded = url.encode("utf-16-le", "surrogatepass")
    value = 0
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        value = (value * 31 + code_unit) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return _to_base36(abs(value))


def resolve_listing_identity(url: str) -> ListingIdentity:
    """
    Resuelve source y external_id para una URL de anuncio.

    Args:
        url: URL completa del anuncio

    Returns:
        ListingIdentity con external_id "source:dígitos" o "source:hash"
    """
    spec = _find_spec(url)
    source = spec.name if spec else OTHER_SOURCE

    if spec and spec.id_pattern:
        match = spec.id_pattern.search(url)
        if match:
            return ListingIdentity(source=source, external_id=f"{source}:{match.group(1)}")

    identity = ListingIdentity(source=source, external_id=f"{source}:{url_hash(url)}")
    logger.debug("ID resuelto por hash", source=source, external_id=identity.external_id)
    return identity


def find_duplicate(
    listings: Iterable["Listing"], external_id: str
) -> Optional["Listing"]:
    """
    Busca en los listings de una sala uno con el mismo external_id.

    Los listings eliminados (status DELETED) no cuentan como duplicados.
    """
    for listing in listings:
        if listing.status.value == "DELETED":
            continue
        if listing.external_id == external_id:
            return listing
    return None
