"""Timing spans for service operations.

Every ``@traced`` operation binds ``op`` into the structlog context, so log
records emitted while it runs (loader warnings included) carry the
operation name. With ``--verbose`` the operation also records a span, the
phases opened inside it with :func:`trace_span` nest under that span, and
the tree lands in ``ServiceResult.meta["telemetry"]`` together with the
number of unsatisfied vertices the operation left behind.
"""

from __future__ import annotations

import functools
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

import structlog

from nclctl.services.result import ServiceResult

log = structlog.get_logger("nclctl.telemetry")

_recording: ContextVar[bool] = ContextVar("_recording", default=False)
_open_span: ContextVar[Span | None] = ContextVar("_open_span", default=None)


@dataclass
class Span:
    """A timed operation or phase."""

    name: str
    phases: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    elapsed_ms: float = 0.0

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        tree: dict[str, Any] = {"name": self.name, "duration_ms": round(self.elapsed_ms, 2)}
        if self.annotations:
            tree["annotations"] = dict(self.annotations)
        if self.phases:
            tree["phases"] = [phase.to_dict() for phase in self.phases]
        return tree


@contextmanager
def _opened(span: Span) -> Generator[Span]:
    token = _open_span.set(span)
    try:
        yield span
    finally:
        span.elapsed_ms = (time.perf_counter() - span.started) * 1000
        _open_span.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Record a phase of the running operation; yields None when not recording."""
    parent = _open_span.get() if _recording.get() else None
    if parent is None:
        yield None
        return
    phase = Span(name)
    parent.phases.append(phase)
    with _opened(phase):
        yield phase


_P = ParamSpec("_P")
_R = TypeVar("_R")


def traced(func: Callable[_P, _R]) -> Callable[_P, _R]:  # noqa: UP047
    """Bind ``op`` for logging and, when recording, time the call."""

    @functools.wraps(func)
    def wrapper(*args: _P.args, **kwargs: _P.kwargs) -> _R:
        with structlog.contextvars.bound_contextvars(op=func.__name__):
            if not _recording.get():
                return func(*args, **kwargs)
            return _record(func.__qualname__, func, *args, **kwargs)

    return wrapper


def _record(name: str, func: Callable[_P, _R], *args: _P.args, **kwargs: _P.kwargs) -> _R:
    span = Span(name)
    try:
        with _opened(span):
            result = func(*args, **kwargs)
    finally:
        log.debug(
            "span.complete",
            span_name=span.name,
            duration_ms=round(span.elapsed_ms, 2),
            phases=len(span.phases),
        )
    if not isinstance(result, ServiceResult):
        return result
    if result.ok:
        span.annotate("unsatisfied", len(result.unsatisfied))
    meta = {**(result.meta or {}), "telemetry": span.to_dict()}
    return result.model_copy(update={"meta": meta})  # type: ignore[return-value]


def enable_telemetry() -> None:
    """Start recording spans (AppContext does this for ``--verbose``)."""
    _recording.set(True)


def disable_telemetry() -> None:
    _recording.set(False)
