"""
Script para resolver el external_id de una URL de anuncio.

Uso:
    python -m consenso.scripts.resolve_listing --url "https://www.homegate.ch/rent/12345678"
"""

import argparse
import json
import logging
import sys

import structlog

from consenso.config import get_settings
from consenso.listings import resolve_listing_identity

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    stream=sys.stderr,
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def main():
    parser = argparse.ArgumentParser(
        description="Muestra source y external_id de una o más URLs de anuncios"
    )
    parser.add_argument(
        "--url",
        required=True,
        action="append",
        help="URL completa del anuncio (se puede repetir)",
    )
    args = parser.parse_args()

    identities = []
    for url in args.url:
        identity = resolve_listing_identity(url)
        logger.debug("URL resuelta", url=url, external_id=identity.external_id)
        identities.append(
            {"url": url, "source": identity.source, "external_id": identity.external_id}
        )

    print(json.dumps(identities, ensure_ascii=False, indent=2))
    sys.exit(0)


if __name__ == "__main__":
    main()
