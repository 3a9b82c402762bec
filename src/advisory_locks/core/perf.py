"""Span tracking for lock acquisition and release."""

from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Protocol

from advisory_locks.core.constants import BANNER_WIDTH, DEFAULT_MAX_SPANS


@dataclass
class SpanRecord:
    """A completed span."""

    span_id: int
    tags: dict[str, Any]
    result: dict[str, Any] = field(default_factory=dict)
    duration: float = 0.0


class Profiler(Protocol):
    """Observability hook used by locks. Has no functional effect."""

    def begin_span(self, tags: dict[str, Any]) -> int:
        """Start a span and return its correlation handle."""

    def end_span(self, handle: int, result: dict[str, Any]) -> SpanRecord | None:
        """Finish the span identified by handle."""


class NullProfiler:
    """Profiler that records nothing."""

    def begin_span(self, tags: dict[str, Any]) -> int:
        return 0

    def end_span(self, handle: int, result: dict[str, Any]) -> SpanRecord | None:
        return None


class ServiceProfiler:
    """Track how long locks are held (or how long a failed attempt took)"""

    def __init__(self, logger: logging.Logger | None = None, max_spans: int = DEFAULT_MAX_SPANS):
        self.logger = logger or logging.getLogger(__name__)
        self.max_spans = max(1, max_spans)
        self.spans: dict[int, SpanRecord] = {}
        self._open: dict[int, tuple[dict[str, Any], float]] = {}
        self._ids = itertools.count(1)
        self._mutex = threading.Lock()

    def begin_span(self, tags: dict[str, Any]) -> int:
        """Start timing an operation"""
        with self._mutex:
            span_id = next(self._ids)
            self._open[span_id] = (dict(tags), time.monotonic())
        return span_id

    def end_span(self, handle: int, result: dict[str, Any]) -> SpanRecord | None:
        """End timing an operation"""
        with self._mutex:
            started = self._open.pop(handle, None)
            if started is None:
                return None
            tags, start_time = started
            record = SpanRecord(
                span_id=handle,
                tags=tags,
                result=dict(result),
                duration=time.monotonic() - start_time,
            )
            if len(self.spans) >= self.max_spans:
                # Drop oldest entry to prevent unbounded growth
                oldest = next(iter(self.spans))
                del self.spans[oldest]
            self.spans[handle] = record

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "span %s %s finished in %.3fs result=%s",
                tags.get("type"),
                tags.get("name"),
                record.duration,
                record.result,
            )
        return record

    @property
    def open_spans(self) -> int:
        with self._mutex:
            return len(self._open)

    def get_summary(self) -> str:
        """Generate a summary of completed spans, longest first"""
        with self._mutex:
            records = list(self.spans.values())
        if not records:
            return "No lock spans recorded"

        lines = ["", "=" * BANNER_WIDTH, "LOCK SPAN SUMMARY", "=" * BANNER_WIDTH]
        for record in sorted(records, key=lambda r: r.duration, reverse=True):
            label = f"{record.tags.get('type', '?')} {record.tags.get('name', '?')}"
            outcome = "ok" if record.result.get("lock", True) else "failed"
            lines.append(f"{label:50s}: {record.duration:8.3f}s ({outcome})")

        total = sum(r.duration for r in records)
        lines.extend(["=" * BANNER_WIDTH, f"{'Total':50s}: {total:8.3f}s", "=" * BANNER_WIDTH])
        return "\n".join(lines)
