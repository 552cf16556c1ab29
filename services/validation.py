"""Validity gate deciding when the form may be exported."""

from __future__ import annotations

import math
from typing import Sequence

from models.form import SetpointGroup
from models.records import Number
from services.builder import build_payload
from services.normalizer import HUMIDITY_MAX, HUMIDITY_MIN, parse_number


def is_valid_system_id(system_id: Number) -> bool:
    if isinstance(system_id, bool) or not isinstance(system_id, (int, float)):
        return False
    return math.isfinite(system_id) and system_id > 0


def is_group_valid(group: SetpointGroup) -> bool:
    if group.temperature == "" or parse_number(group.temperature) is None:
        return False
    for entry in group.humidities:
        if entry.nominal == "":
            continue
        humidity = parse_number(entry.nominal)
        if humidity is None or not HUMIDITY_MIN <= humidity <= HUMIDITY_MAX:
            return False
    return True


def is_form_valid(system_id: Number, groups: Sequence[SetpointGroup]) -> bool:
    """Return True when the system id and every group pass their checks.

    Empty humidity fields are allowed; they are simply left out of the output.
    """
    if not is_valid_system_id(system_id):
        return False
    return all(is_group_valid(group) for group in groups)


def is_export_ready(system_id: Number, groups: Sequence[SetpointGroup]) -> bool:
    return is_form_valid(system_id, groups) and len(build_payload(system_id, groups)) > 0
