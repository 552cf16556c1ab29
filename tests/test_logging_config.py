from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("setpoints", logging.INFO, __file__, 1, "Form updated", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_context() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    text = formatter.format(_record(revision=3, setpoint_count=2, unrelated="x"))

    assert text == "Form updated | revision=3 setpoint_count=2"


def test_formatter_quotes_values_with_spaces() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["status"])

    assert formatter.format(_record(status="not ready")) == "Form updated | status='not ready'"


def test_formatter_without_context() -> None:
    formatter = ContextualFormatter(fmt="%(levelname)s %(message)s")

    assert formatter.format(_record()) == "INFO Form updated"
