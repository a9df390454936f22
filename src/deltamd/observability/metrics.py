"""Metrics hook protocol and no-op default implementation.

deltamd emits counters and timings around every conversion.  By default a
:class:`NoopMetricsHook` is used so there is zero overhead.  Users can supply
their own implementation that satisfies the :class:`MetricsHook` protocol to
route metrics to Datadog, Prometheus, StatsD, or any other backend.

Usage::

    from deltamd.observability.metrics import MetricsHook, NoopMetricsHook

    # Verify that a custom class satisfies the protocol at runtime:
    assert isinstance(my_backend, MetricsHook)

Emitted metric names:

* ``deltamd.conversions_total``          -- counter (tag ``direction``)
* ``deltamd.conversion_duration_ms``     -- timing (tag ``direction``)
* ``deltamd.fallbacks_total``            -- counter (tag ``direction``)
* ``deltamd.conversion_warnings_total``  -- counter (tag ``direction``)
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict whose keys and values are
    strings.  Implementations are free to translate these tags into whatever
    tagging mechanism their backend supports.
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
            Dot-delimited metric name, e.g. ``"deltamd.conversions_total"``.
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
        """Record a timing / duration metric.

        Parameters
        ----------
        name:
            Dot-delimited metric name, e.g.
            ``"deltamd.conversion_duration_ms"``.
        ms:
            Duration in milliseconds.
        tags:
            Optional key-value tags for the data point.
        """
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

    Used when the caller does not supply a custom :class:`MetricsHook`
    backend, so metrics call-sites never need ``if metrics is not None``
    guards.
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
