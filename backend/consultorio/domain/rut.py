"""Utilidades para el RUT chileno (formato `NNNNNNNN-C`)."""

import re

RUT_RE = re.compile(r"^\d{7,8}-[\dkK]$")
_NOT_RUT_CHAR = re.compile(r"[^\dkK]")


def format_rut(raw: str) -> str:
    """Normaliza lo que escribe el usuario a `cuerpo-dv`.

    Se descartan los caracteres que no sean dígitos o `k`, se limita a 9
    caracteres y el dígito verificador queda en minúscula:

    >>> format_rut("17.539.138-K")
    '17539138-k'
    """
    clean = _NOT_RUT_CHAR.sub("", raw or "")
    if not clean:
        return ""
    if len(clean) == 1:
        return clean
    limited = clean[:9]
    return f"{limited[:-1]}-{limited[-1].lower()}"


def is_valid_rut_format(rut: str) -> bool:
    """Valida solo el formato; el dígito verificador se revisa con `has_valid_check_digit`."""
    return bool(RUT_RE.match(rut or ""))


def rut_check_digit(body: str) -> str:
    """Calcula el dígito verificador (módulo 11) del cuerpo numérico."""
    total = 0
    factor = 2
    for digit in reversed(body):
        total += int(digit) * factor
        factor = 2 if factor == 7 else factor + 1
    remainder = 11 - (total % 11)
    if remainder == 11:
        return "0"
    if remainder == 10:
        return "k"
    return str(remainder)


def has_valid_check_digit(rut: str) -> bool:
    if not is_valid_rut_format(rut):
        return False
    body, check = rut.split("-")
    return rut_check_digit(body) == check.lower()
