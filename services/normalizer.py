"""Numeric parsing and normalisation for form fields."""

from __future__ import annotations

import math
import re
from typing import Optional

SYSTEM_ID_MIN = 1.0
HUMIDITY_MIN = 0.0
HUMIDITY_MAX = 100.0

# Transient states while a number is being typed.
EDITING_STATES = frozenset({"", "-", "."})

_NUMBER_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(text: str) -> Optional[float]:
    """Parse ``text`` as a finite decimal literal.

    Returns ``None`` for anything that is not a well-formed literal, including
    blank text, surrounding whitespace, ``inf``/``nan`` spellings and values
    that overflow to infinity.
    """
    if not isinstance(text, str) or not _NUMBER_PATTERN.fullmatch(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(float(value))


def normalize(
    text: str,
    minimum: Optional[float] = None,
    maximum: Optional[float] = None,
) -> str:
    """Coerce raw field text into a canonical number string or ``""``."""
    if text in EDITING_STATES:
        return text
    value = parse_number(text)
    if value is None:
        return ""
    if minimum is not None and value < minimum:
        return format_number(minimum)
    if maximum is not None and value > maximum:
        return format_number(maximum)
    return format_number(value)
