"""Metrics hook protocol and no-op default implementation.

tiptapify emits counters and timings at key points (document conversion,
warnings, exports, archive imports).  By default a :class:`NoopMetricsHook`
is used so there is zero overhead.  Users can supply their own
implementation that satisfies the :class:`MetricsHook` protocol to route
metrics to Prometheus, StatsD, or any other backend.

Emitted metric names:

* ``tiptapify.documents_converted_total``   -- counter (tag ``source``)
* ``tiptapify.conversion_warnings_total``   -- counter (tag ``code``)
* ``tiptapify.conversion_duration_ms``      -- timing (tag ``source``)
* ``tiptapify.notes_exported_total``        -- counter (tag ``format``)
* ``tiptapify.notes_imported_total``        -- counter
* ``tiptapify.import_errors_total``         -- counter (tag ``kind``)
* ``tiptapify.attachments_imported_total``  -- counter
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g.
            ``"tiptapify.documents_converted_total"``.
        value:
            Amount to increment by.  Defaults to ``1``.
        tags:
            Optional key-value tags for the data point.
        """
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a timing / duration metric in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that silently discards all data points.

    Used when the caller does not supply a custom :class:`MetricsHook`, so
    metrics call-sites never need ``if metrics is not None`` guards.
    """

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(metrics: Any | None) -> Any:
    """Return *metrics*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return metrics if metrics is not None else NoopMetricsHook()
