"""
Módulo de listings.

Identidad estable por URL y deduplicación dentro de una sala.
"""

from consenso.listings.identity import (
    ListingIdentity,
    SOURCE_REGISTRY,
    detect_source,
    find_duplicate,
    resolve_listing_identity,
    url_hash,
)

__all__ = [
    "ListingIdentity",
    "SOURCE_REGISTRY",
    "detect_source",
    "find_duplicate",
    "resolve_listing_identity",
    "url_hash",
]
