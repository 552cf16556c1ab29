"""Pure payload construction from form groups."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from models.form import SetpointGroup
from models.records import Number, Parameter, Payload, Reading, Setpoint
from services.normalizer import HUMIDITY_MAX, HUMIDITY_MIN, parse_number


def as_json_number(value: float) -> Number:
    """Return integral finite floats as ``int`` so they serialise as ``40``."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def parse_humidity(text: str) -> Optional[float]:
    if text == "":
        return None
    value = parse_number(text)
    if value is None or not HUMIDITY_MIN <= value <= HUMIDITY_MAX:
        return None
    return value


def build_setpoint(system_id: Number, group: SetpointGroup) -> Optional[Setpoint]:
    temperature = parse_number(group.temperature)
    if temperature is None:
        return None

    setpoint: Setpoint = [
        Reading(system_id=system_id, parameter=Parameter.temperature, nominal=as_json_number(temperature))
    ]
    for entry in group.humidities:
        humidity = parse_humidity(entry.nominal)
        if humidity is None:
            continue
        setpoint.append(
            Reading(system_id=system_id, parameter=Parameter.humidity, nominal=as_json_number(humidity))
        )
    return setpoint


def build_payload(system_id: Number, groups: Iterable[SetpointGroup]) -> Payload:
    """Build one setpoint per group whose temperature is a finite number.

    Invalid humidity values are dropped, never rejected. ``system_id`` is used
    verbatim; checking it is the validity gate's job.
    """
    resolved_id = as_json_number(system_id)
    payload: Payload = []
    for group in groups:
        setpoint = build_setpoint(resolved_id, group)
        if setpoint is not None:
            payload.append(setpoint)
    return payload
