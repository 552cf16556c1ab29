"""Output records produced by the payload builder."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Union

Number = Union[int, float]


class Parameter(str, Enum):
    """Reading kinds understood by the consuming calibration system."""

    temperature = "Temperature"
    humidity = "Humidity"


@dataclass(frozen=True, slots=True)
class Reading:
    """A single typed value inside a setpoint."""

    system_id: Number
    parameter: Parameter
    nominal: Number

    def to_dict(self) -> Dict[str, Any]:
        return {
            "system_id": self.system_id,
            "parameter": self.parameter.value,
            "nominal": self.nominal,
        }


Setpoint = List[Reading]
Payload = List[Setpoint]


def payload_to_data(payload: Payload) -> List[List[Dict[str, Any]]]:
    return [[reading.to_dict() for reading in setpoint] for setpoint in payload]
