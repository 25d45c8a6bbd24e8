from __future__ import annotations

import logging

from logging_config import ContextualFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="services.telemetry",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Dropping malformed device reading",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_appends_known_extra_keys() -> None:
    formatter = ContextualFormatter(fmt="%(message)s")

    message = formatter.format(_record(reason="2_1.watts: missing value", serial="SN-1", other="x"))

    assert message == "Dropping malformed device reading | serial=SN-1 reason=2_1.watts: missing value"


def test_formatter_skips_none_values() -> None:
    formatter = ContextualFormatter(fmt="%(message)s", extra_keys=["reason"])

    assert formatter.format(_record(reason=None)) == "Dropping malformed device reading"
