"""Reglas de campo compartidas por los DTOs."""

import math
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^\d{2}:\d{2}$")
_TIME_WITH_SECONDS_RE = re.compile(r"^\d{2}:\d{2}:\d{2}$")


def clean_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (int, float)):
        return str(value).strip()
    return None


def is_blank(value: Any) -> bool:
    return not clean_text(value)


def parse_number(value: Any) -> Optional[float]:
    """Equivalente práctico a `Number(x)`: None si no es un número finito."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        if not value.strip():
            return None
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def parse_int(value: Any) -> Optional[int]:
    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def parse_iso_date(value: Any) -> Optional[date]:
    text = clean_text(value)
    if not text or not DATE_RE.match(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def parse_datetime(value: Any) -> Optional[datetime]:
    """Acepta ISO 8601 o `YYYY-MM-DD HH:MM`, sin agregar zona horaria."""
    text = clean_text(value)
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text.replace(" ", "T", 1))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def normalize_time(value: str) -> str:
    if _TIME_WITH_SECONDS_RE.match(value):
        return value[:5]
    return value


class FieldErrors:
    """Acumula errores en orden, a lo sumo uno por campo."""

    def __init__(self) -> None:
        self._errors: Dict[str, str] = {}

    def add(self, field: str, message: str) -> None:
        self._errors.setdefault(field, message)

    def has(self, field: str) -> bool:
        return field in self._errors

    @property
    def messages(self) -> List[str]:
        return list(self._errors.values())

    def __bool__(self) -> bool:
        return bool(self._errors)
