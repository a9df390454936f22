"""Observability: structured logging and metrics hooks for deltamd."""

from __future__ import annotations

from .logger import StructuredFormatter, get_logger, log_event
from .metrics import MetricsHook, NoopMetricsHook

__all__ = [
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
    "log_event",
]
