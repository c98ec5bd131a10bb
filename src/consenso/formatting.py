"""
Formateo de valores para display (tabla de diferencias y reporte de conformidad).
"""

from enum import Enum

from consenso.config import CURRENCY_CODE, FEATURE_LABELS

EMPTY_VALUE = "-"


def format_number(value) -> str:
    """Número con separador de miles; los floats enteros se muestran sin decimales."""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def format_value(value, field: str) -> str:
    """Formatea el valor de un campo de criterios o de un listing."""
    if value is None or value == "" or value == []:
        return EMPTY_VALUE

    if field == "features" and isinstance(value, (list, tuple, set, frozenset)):
        return ", ".join(FEATURE_LABELS.get(f, f) for f in value)

    if isinstance(value, bool):
        return "Yes" if value else "No"

    if isinstance(value, Enum):
        value = value.value

    if field.startswith("price"):
        return f"{CURRENCY_CODE} {format_number(value)}"

    if field.startswith("living_space") or field.startswith("lot_size"):
        return f"{format_number(value)} m²"

    if field == "radius":
        return f"{format_number(value)} km"

    if isinstance(value, (int, float)) and not field.startswith("year_built"):
        return format_number(value)

    return str(value)
