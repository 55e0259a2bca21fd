"""Structured logging helpers distilled into tiny orchestration phrases.

Purpose
    Keep every emission of logging data predictable, contextual, and ready for
    downstream aggregation pipelines without forcing applications to adopt a
    specific logging backend.

Contents
    - ``TRACE_ID``: context variable storing the active trace identifier.
    - ``get_logger``: returns the shared package logger (quiet by default).
    - ``bind_trace_id``: binds or clears the active trace identifier.
    - ``log_debug`` / ``log_info`` / ``log_error``: emit structured entries via a
      single private emitter.
    - ``make_event``: convenience builder for structured event payloads.
    - ``count_by_namespace``: per-namespace key counts for persistence events,
      so stored values never reach a log record.

System Integration
    Used by the store and the document adapters so claim and persistence
    diagnostics carry the same trace metadata. The domain layer stays free of
    logging concerns.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

from .domain.bucket import NAMESPACE_DELIMITER

TRACE_ID: ContextVar[str | None] = ContextVar("lib_namespaced_properties_trace_id", default=None)
"""Current trace identifier propagated through logging helpers."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_namespaced_properties")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Expose the package logger so applications may attach handlers.

    Why
        Leaves the library silent by default while giving host applications full
        control over handler and formatter configuration.
    """

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind or clear the active trace identifier.

    Examples
    --------
    >>> bind_trace_id('abc123')
    >>> TRACE_ID.get()
    'abc123'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    """Emit a structured debug log entry that includes the trace context."""

    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    """Emit a structured info log entry that includes the trace context."""

    _emit(logging.INFO, message, fields)


def log_error(message: str, **fields: Any) -> None:
    """Emit a structured error log entry that includes the trace context."""

    _emit(logging.ERROR, message, fields)


def make_event(
    namespace: str | None,
    path: str | None,
    payload: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a structured logging payload for store lifecycle events.

    Inputs
        namespace: Namespace the event concerns, if any.
        path: Document path associated with the event, if available.
        payload: Optional mapping with extra diagnostic detail.

    Examples
    --------
    >>> make_event('NS1', None, {'keys': 3})
    {'namespace': 'NS1', 'path': None, 'keys': 3}
    """

    event: dict[str, Any] = {"namespace": namespace, "path": path}
    if payload:
        event |= dict(payload)
    return event


def count_by_namespace(entries: Mapping[str, str]) -> dict[str, int]:
    """Count flat ``"<namespace>:<key>"`` entries per namespace, sorted by name.

    Guest-scoped keys count towards the namespace that stores them.

    Examples
    --------
    >>> count_by_namespace({"NS2:eep": "1000", "NS1:INT": "1", "NS1:NS2:eep": "2"})
    {'NS1': 2, 'NS2': 1}
    """

    counts: dict[str, int] = {}
    for qualified in entries:
        namespace = qualified.partition(NAMESPACE_DELIMITER)[0]
        counts[namespace] = counts.get(namespace, 0) + 1
    return dict(sorted(counts.items()))


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    """Send a log entry through the shared logger with contextual metadata."""

    _LOGGER.log(level, message, extra={"context": _with_trace(fields)})


def _with_trace(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Attach the current trace identifier to the provided structured fields."""

    context = {"trace_id": TRACE_ID.get()}
    context.update(fields)
    return context
