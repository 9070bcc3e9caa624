from datetime import datetime

from procrec.core.logger import get_logger
from procrec.domain.models import OPTIONAL_STAT_TYPES, Capabilities, Record
from procrec.infrastructure.metric_source import MetricSource
from procrec.observability import COLLECTION_ERRORS_TOTAL, SAMPLES_TOTAL

logger = get_logger("procrec.sampler")


class Sampler:
    """Turns one reading of a metric source into a ``Record``.

    Mandatory groups are always read. Enabled optional groups that fail to
    read are logged and zero-filled; sampling never aborts and never retries.
    """

    def __init__(self, source: MetricSource):
        self.source = source

    def sample(self, capabilities: Capabilities) -> Record:
        timestamp = datetime.now().astimezone()
        optional = {}
        for group, stat_type in OPTIONAL_STAT_TYPES.items():
            if not getattr(capabilities, group):
                continue
            try:
                optional[group] = getattr(self.source, group)()
            except Exception as e:
                COLLECTION_ERRORS_TOTAL.labels(group=group).inc()
                logger.warning(
                    "stat_collection_failed (zero-filled)",
                    extra={"group": group, "error": str(e)},
                )
                optional[group] = stat_type()

        record = Record(
            timestamp=timestamp,
            profile=self.source.profile_counts(),
            runtime=self.source.runtime_memory_stats(),
            **optional,
        )
        SAMPLES_TOTAL.inc()
        return record
