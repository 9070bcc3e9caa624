"""Live HTML tables of process and runtime health metrics."""

from procrec.domain.models import (
    Capabilities,
    Record,
    StreamConfig,
    WindowConfig,
)
from procrec.exceptions import CollectionError, UnsupportedStatError
from procrec.infrastructure.metric_source import MetricSource, ProcessMetricSource
from procrec.services.stream import StreamRecorder
from procrec.services.window import WindowRecorder

__all__ = [
    "Capabilities",
    "Record",
    "StreamConfig",
    "WindowConfig",
    "CollectionError",
    "UnsupportedStatError",
    "MetricSource",
    "ProcessMetricSource",
    "StreamRecorder",
    "WindowRecorder",
]
