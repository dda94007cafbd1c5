from __future__ import annotations

import json
import logging

from socialseed.utils.logging import _json_formatter

EXPECTED_INSERTED = 10


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.inserted = EXPECTED_INSERTED
    record.entity = "users"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["inserted"] == EXPECTED_INSERTED
    assert payload["entity"] == "users"
    assert "lineno" not in payload


def test_json_formatter_stringifies_unserializable_values() -> None:
    record = _record()
    record.pool = object()

    payload = json.loads(_json_formatter(record))

    assert payload["pool"].startswith("<object")


def test_json_formatter_keeps_extra_named_field_as_is() -> None:
    record = _record()
    record.extra = {"batch": 3}

    payload = json.loads(_json_formatter(record))

    assert payload["extra"] == {"batch": 3}
    assert "batch" not in payload
