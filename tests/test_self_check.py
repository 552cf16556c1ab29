from __future__ import annotations

from dataclasses import replace

from services.builder import build_payload
from services.self_check import SELF_CHECK_CASES, SelfCheckStatus, run_self_checks


def test_self_checks_pass_against_builder() -> None:
    summary = run_self_checks()

    assert summary.status is SelfCheckStatus.passed
    assert summary.passed == summary.total == len(SELF_CHECK_CASES) == 6
    assert summary.message == "Self-checks passed (6/6)."


def test_self_checks_report_failures() -> None:
    def temperature_only(system_id, groups):
        return build_payload(system_id, [replace(group, humidities=()) for group in groups])

    summary = run_self_checks(builder=temperature_only)

    assert summary.status is SelfCheckStatus.failed
    assert summary.passed == 2
    assert summary.message == "Self-checks failed (2/6)."


def test_self_checks_report_crash_without_raising(caplog) -> None:
    def broken(system_id, groups):
        raise RuntimeError("boom")

    summary = run_self_checks(builder=broken)

    assert summary.status is SelfCheckStatus.crashed
    assert summary.passed == 0
    assert summary.message == "Self-checks crashed - see logs for details."
    assert "Self-checks crashed" in caplog.text
