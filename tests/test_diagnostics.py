from __future__ import annotations

import logging

import pytest

from gridsmith.core.diagnostics import (
    DiagnosticEmitter,
    LoggingEmitter,
    NullEmitter,
    RecordingEmitter,
    format_event_message,
)
from gridsmith.core.exceptions import (
    BlockNotFoundError,
    TemplateLoadError,
    exception_hint,
    exception_messages,
)


def test_null_emitter_is_noop(caplog: pytest.LogCaptureFixture) -> None:
    emitter = NullEmitter()
    with caplog.at_level(logging.WARNING):
        emitter.warning("nothing to see")
        emitter.error("still quiet")
    assert not caplog.records
    emitter.event("ignored", {"value": 1})
    assert emitter.debug_enabled is False


def test_emitters_satisfy_protocol() -> None:
    assert isinstance(NullEmitter(), DiagnosticEmitter)
    assert isinstance(LoggingEmitter(), DiagnosticEmitter)
    assert isinstance(RecordingEmitter(), DiagnosticEmitter)


def test_logging_emitter_logs_messages(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.ERROR):
        emitter.error("boom")
    assert any(record.message == "boom" for record in caplog.records)
    assert emitter.debug_enabled is True


def test_logging_emitter_reports_events_at_info_when_debugging(
    caplog: pytest.LogCaptureFixture,
) -> None:
    emitter = LoggingEmitter(debug_enabled=True)
    with caplog.at_level(logging.INFO, logger="gridsmith"):
        emitter.event("block_fallback", {"category": "cell", "block": "grid_column_cell"})

    assert [record.levelno for record in caplog.records] == [logging.INFO]
    assert "falling back to 'grid_column_cell'" in caplog.records[0].message


def test_logging_emitter_keeps_events_at_debug_otherwise(caplog: pytest.LogCaptureFixture) -> None:
    emitter = LoggingEmitter()
    with caplog.at_level(logging.DEBUG, logger="gridsmith"):
        emitter.event("block_resolved", {"block": "grid_column_cell", "tried": ["a"]})

    assert [record.levelno for record in caplog.records] == [logging.DEBUG]


def test_recording_emitter_filters_by_name() -> None:
    emitter = RecordingEmitter()
    emitter.event("a", {"x": 1})
    emitter.event("b", {"y": 2})
    emitter.event("a", {"x": 3})
    emitter.warning("careful")

    assert emitter.named("a") == [{"x": 1}, {"x": 3}]
    assert emitter.warnings == ["careful"]


@pytest.mark.parametrize(
    ("name", "payload", "expected"),
    [
        (
            "block_resolved",
            {"category": "cell", "block": "grid_column_c3_cell", "tried": ["grid_column_c3_cell"]},
            "Resolved cell block 'grid_column_c3_cell' after 1 candidate(s)",
        ),
        (
            "block_fallback",
            {"category": "filter", "block": None},
            "No filter block matched, rendering nothing",
        ),
        (
            "sources_loaded",
            {"sources": ["theme.html", "gridsmith/blocks.html.j2"]},
            "Grid template chain: theme.html > gridsmith/blocks.html.j2",
        ),
        ("unknown", {}, None),
    ],
)
def test_format_event_message(name: str, payload: dict, expected: str | None) -> None:
    assert format_event_message(name, payload) == expected


def test_exception_hint_reports_root_cause() -> None:
    try:
        try:
            raise FileNotFoundError("theme.html")
        except FileNotFoundError as exc:
            raise TemplateLoadError("Grid template 'theme.html' cannot be found.") from exc
    except TemplateLoadError as error:
        messages = exception_messages(error)
        hint = exception_hint(error)

    assert messages == ["Grid template 'theme.html' cannot be found.", "theme.html"]
    assert hint == "theme.html"


def test_block_not_found_without_theme() -> None:
    error = BlockNotFoundError("grid_x")

    assert isinstance(error, LookupError)
    assert str(error) == 'Block "grid_x" doesn\'t exist in grid template "".'
