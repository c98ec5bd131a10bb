"""
Script para evaluar una sala de búsqueda desde un archivo JSON.

Combina los criterios actuales de cada persona, arma la tabla de
diferencias y el reporte de conformidad de cada listing.

Formato del archivo:
    {
      "room_id": "room-1",
      "criteria": [{"user_id": "...", "timestamp": "...", "criteria": {...}, "weights": {...}}],
      "listings": [{"url": "https://www.homegate.ch/rent/123", "price": 2100, ...}]
    }

Uso:
    python -m consenso.scripts.evaluate_room --file sala.json --mode mixed
    python -m consenso.scripts.evaluate_room --file sala.json --compatibility
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from consenso.config import get_settings
from consenso.errors import ConsensoError
from consenso.matching import RoomMatcher
from consenso.models import Listing, UserCriteria

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
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def load_room(path: Path) -> tuple[str, list[UserCriteria], list[Listing]]:
    """Lee el archivo de sala y construye los modelos."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    room_id = payload["room_id"]

    records = [
        UserCriteria.model_validate({"room_id": room_id, **item})
        for item in payload.get("criteria", [])
    ]

    listings = []
    for item in payload.get("listings", []):
        item = dict(item)
        if "external_id" in item:
            listings.append(Listing.model_validate({"room_id": room_id, **item}))
        else:
            url = item.pop("url")
            listings.append(Listing.from_url(url, room_id=room_id, **item))

    return room_id, records, listings


async def run_evaluation(path: Path, mode: str, with_compatibility: bool) -> dict:
    """Evalúa la sala y devuelve un dict serializable."""
    room_id, records, listings = load_room(path)
    matcher = RoomMatcher()
    evaluation = await matcher.evaluate_room(
        room_id,
        records,
        listings,
        mode=mode,
        with_compatibility=with_compatibility,
    )

    result = {
        "room_id": evaluation.room_id,
        "combined": evaluation.combined.model_dump(mode="json", exclude_none=True),
        "diff": [
            {"field": row.field, "values": row.values, "has_diff": row.has_diff}
            for row in evaluation.diff
        ],
        "reports": [report.to_dict() for report in evaluation.reports],
    }
    if evaluation.compatibility is not None:
        result["compatibility"] = evaluation.compatibility.model_dump(mode="json")
    return result


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(
        description="Combina criterios de una sala y reporta la conformidad de sus listings"
    )
    parser.add_argument("--file", required=True, type=Path, help="Archivo JSON de la sala")
    parser.add_argument(
        "--mode",
        default="all",
        choices=["all", "mixed", "strict"],
        help="Modo de combinación",
    )
    parser.add_argument(
        "--compatibility",
        action="store_true",
        help="Calcula también la compatibilidad (requiere API key del LLM)",
    )
    args = parser.parse_args()

    try:
        result = asyncio.run(run_evaluation(args.file, args.mode, args.compatibility))
        print(json.dumps(result, ensure_ascii=False, indent=2))
        sys.exit(0)
    except (ConsensoError, ValidationError) as e:
        logger.error("Datos de sala inválidos", file=str(args.file), error=str(e))
        sys.exit(2)
    except KeyboardInterrupt:
        logger.info("Evaluación interrumpida por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal evaluando sala", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
