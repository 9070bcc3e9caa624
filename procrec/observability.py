"""Self-metrics for the recorder service.

Thin wrappers around prometheus_client primitives with service name
prefixing and basic naming validation, plus the metrics the samplers and
handlers update.
"""

from __future__ import annotations

import re
from typing import Sequence

from prometheus_client import Counter, Gauge

SERVICE = "procrec"

_NAME_RE = re.compile(r"^[a-z_][a-z0-9_]*$")


def _validate(name: str) -> str:
    if not _NAME_RE.match(name):  # pragma: no cover - simple guard
        raise ValueError(
            f"Invalid metric name '{name}'. Use snake_case alphanumerics/underscores."
        )
    return name


def _prefix(name: str, service: str | None) -> str:
    if service and not name.startswith(service + "_"):
        return f"{service}_{name}"
    return name


def get_counter(
    name: str,
    documentation: str,
    service: str | None = SERVICE,
    labelnames: Sequence[str] = (),
) -> Counter:
    return Counter(_validate(_prefix(name, service)), documentation, labelnames)


def get_gauge(
    name: str,
    documentation: str,
    service: str | None = SERVICE,
    labelnames: Sequence[str] = (),
) -> Gauge:
    return Gauge(_validate(_prefix(name, service)), documentation, labelnames)


SAMPLES_TOTAL = get_counter("samples_total", "Records produced by samplers")
COLLECTION_ERRORS_TOTAL = get_counter(
    "collection_errors_total",
    "Optional stat group reads that failed and were zero-filled",
    labelnames=("group",),
)
WRITE_ERRORS_TOTAL = get_counter(
    "write_errors_total",
    "Response fragments the client sink rejected",
    labelnames=("handler",),
)
WINDOW_RECORDS = get_gauge("window_records", "Records currently held by the window")
STREAMS_ACTIVE = get_gauge("stream_sessions_active", "Open stream connections")
TICKERS_ACTIVE = get_gauge("tickers_active", "Periodic timers currently held")


__all__ = [
    "get_counter",
    "get_gauge",
    "SAMPLES_TOTAL",
    "COLLECTION_ERRORS_TOTAL",
    "WRITE_ERRORS_TOTAL",
    "WINDOW_RECORDS",
    "STREAMS_ACTIVE",
    "TICKERS_ACTIVE",
]
