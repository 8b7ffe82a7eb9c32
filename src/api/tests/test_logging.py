"""The configured log pipeline renders each record as a single JSON object."""

import io
import logging
import typing as t

import orjson
import pytest
import structlog
from django.conf import settings


@pytest.fixture
def json_stream() -> t.Iterator[tuple[logging.Logger, io.StringIO]]:
    spec = settings.LOGGING["formatters"]["json"]
    formatter = spec["()"](processor=spec["processor"], foreign_pre_chain=spec["foreign_pre_chain"])
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    target = logging.getLogger("felicity.logging_test")
    target.addHandler(handler)
    target.setLevel(logging.INFO)
    target.propagate = False
    yield target, stream
    target.removeHandler(handler)


def test_structlog_event_is_rendered_once(json_stream: tuple[logging.Logger, io.StringIO]) -> None:
    _, stream = json_stream

    structlog.get_logger("felicity.logging_test").info("ticket_issued", ticket_id="TKT-ABC123")

    line = orjson.loads(stream.getvalue().strip())
    assert isinstance(line, dict)
    assert line["event"] == "ticket_issued"
    assert line["ticket_id"] == "TKT-ABC123"
    assert line["level"] == "info"
    assert line["service"] == settings.SERVICE_NAME


def test_structlog_event_is_scrubbed(json_stream: tuple[logging.Logger, io.StringIO]) -> None:
    _, stream = json_stream

    structlog.get_logger("felicity.logging_test").info("login", note="from a@b.com", access_token="secret")

    line = orjson.loads(stream.getvalue().strip())
    assert line["note"] == "from [EMAIL]"
    assert line["access_token"] == "[REDACTED]"


def test_foreign_record_is_rendered(json_stream: tuple[logging.Logger, io.StringIO]) -> None:
    target, stream = json_stream

    target.warning("plain stdlib message")

    line = orjson.loads(stream.getvalue().strip())
    assert line["event"] == "plain stdlib message"
    assert line["level"] == "warning"
