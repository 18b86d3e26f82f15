"""Structured diagnostic events emitted by reconciliation stages.

Stages never call a logger directly. They hand ``DiagnosticEvent`` instances to
an injected sink; ``LoggingDiagnosticSink`` is the default and forwards them to
``logging`` under ``goodsreceipt.reconciliation.<stage>``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Protocol


class Severity(StrEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_LOG_LEVELS: dict[Severity, int] = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class DiagnosticEvent:
    stage: str
    severity: Severity
    message: str
    code: str | None = None
    context: Mapping[str, object] = field(default_factory=dict[str, object])

    def render_context(self) -> str:
        return " ".join(f"{key}={value}" for key, value in self.context.items())


class DiagnosticSink(Protocol):
    def __call__(self, event: DiagnosticEvent) -> None: ...


@dataclass(slots=True)
class LoggingDiagnosticSink:
    """Forward events to ``logging`` with a level derived from their severity."""

    logger_prefix: str = "goodsreceipt.reconciliation"

    def __call__(self, event: DiagnosticEvent) -> None:
        logger = logging.getLogger(f"{self.logger_prefix}.{event.stage}")
        level = _LOG_LEVELS[event.severity]
        if not logger.isEnabledFor(level):
            return
        context = event.render_context()
        if context:
            logger.log(level, "%s (%s)", event.message, context)
        else:
            logger.log(level, "%s", event.message)


@dataclass(slots=True)
class CollectingDiagnosticSink:
    """Keep every event and optionally forward it to another sink."""

    forward: DiagnosticSink | None = None
    events: list[DiagnosticEvent] = field(default_factory=list[DiagnosticEvent])

    def __call__(self, event: DiagnosticEvent) -> None:
        self.events.append(event)
        if self.forward is not None:
            self.forward(event)

    def with_code(self, code: str) -> list[DiagnosticEvent]:
        return [event for event in self.events if event.code == code]


def default_sink() -> DiagnosticSink:
    return LoggingDiagnosticSink()
