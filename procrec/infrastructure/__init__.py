from .metric_source import MetricSource, ProcessMetricSource

__all__ = ["MetricSource", "ProcessMetricSource"]
