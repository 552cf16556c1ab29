"""Fixed regression battery run against the payload builder."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, List, Sequence, Tuple

from models.form import HumidityEntry, SetpointGroup
from models.records import Payload
from services.builder import build_payload
from services.encoder import encode_payload

logger = logging.getLogger(__name__)


class SelfCheckStatus(str, Enum):
    passed = "passed"
    failed = "failed"
    crashed = "crashed"


@dataclass(frozen=True)
class SelfCheckSummary:
    status: SelfCheckStatus
    passed: int
    total: int
    message: str


@dataclass(frozen=True)
class SelfCheckCase:
    system_id: int
    groups: Tuple[SetpointGroup, ...]
    expected: List[List[dict]]


def _group(group_id: str, temperature: str, *humidities: Tuple[str, str]) -> SetpointGroup:
    return SetpointGroup(
        id=group_id,
        temperature=temperature,
        humidities=tuple(HumidityEntry(id=hid, nominal=nominal) for hid, nominal in humidities),
    )


def _reading(system_id: int, parameter: str, nominal: float) -> dict:
    return {"system_id": system_id, "parameter": parameter, "nominal": nominal}


SELF_CHECK_CASES: Tuple[SelfCheckCase, ...] = (
    SelfCheckCase(
        system_id=1,
        groups=(_group("a", "-95.0"),),
        expected=[[_reading(1, "Temperature", -95)]],
    ),
    SelfCheckCase(
        system_id=1,
        groups=(_group("b", "40.0", ("h1", "33.0"), ("h2", "80.0")),),
        expected=[
            [
                _reading(1, "Temperature", 40),
                _reading(1, "Humidity", 33),
                _reading(1, "Humidity", 80),
            ]
        ],
    ),
    SelfCheckCase(
        system_id=2,
        groups=(_group("c", "40.0", ("h1", "")),),
        expected=[[_reading(2, "Temperature", 40)]],
    ),
    SelfCheckCase(
        system_id=3,
        groups=(_group("d1", "0.0"), _group("d2", "40.0", ("h1", "33"))),
        expected=[
            [_reading(3, "Temperature", 0)],
            [_reading(3, "Temperature", 40), _reading(3, "Humidity", 33)],
        ],
    ),
    SelfCheckCase(
        system_id=4,
        groups=(_group("e", "25.0", ("x", "-5"), ("y", "120"), ("z", "50")),),
        expected=[[_reading(4, "Temperature", 25), _reading(4, "Humidity", 50)]],
    ),
    SelfCheckCase(
        system_id=5,
        groups=(_group("f", "10", ("n", "abc"), ("m", "75")),),
        expected=[[_reading(5, "Temperature", 10), _reading(5, "Humidity", 75)]],
    ),
)


def _matches(actual: Payload, expected: List[List[dict]]) -> bool:
    return encode_payload(actual, compact=True) == json.dumps(expected, separators=(",", ":"))


def run_self_checks(
    cases: Sequence[SelfCheckCase] = SELF_CHECK_CASES,
    builder: Callable[[Any, Any], Payload] = build_payload,
) -> SelfCheckSummary:
    """Run every case through ``builder`` and summarise the outcome.

    Never raises: an unexpected error is logged and reported as ``crashed``.
    """
    total = len(cases)
    try:
        passed = sum(1 for case in cases if _matches(builder(case.system_id, case.groups), case.expected))
    except Exception:  # noqa: BLE001 - the harness reports crashes instead of raising
        logger.exception("Self-checks crashed", extra={"total": total})
        return SelfCheckSummary(
            status=SelfCheckStatus.crashed,
            passed=0,
            total=total,
            message="Self-checks crashed - see logs for details.",
        )

    if passed == total:
        status = SelfCheckStatus.passed
        message = f"Self-checks passed ({passed}/{total})."
    else:
        status = SelfCheckStatus.failed
        message = f"Self-checks failed ({passed}/{total})."
    logger.info("Self-checks finished", extra={"status": status.value, "passed": passed, "total": total})
    return SelfCheckSummary(status=status, passed=passed, total=total, message=message)
