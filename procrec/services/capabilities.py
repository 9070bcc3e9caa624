from procrec.core.logger import get_logger
from procrec.domain.models import OPTIONAL_GROUPS, Capabilities
from procrec.exceptions import UnsupportedStatError
from procrec.infrastructure.metric_source import MetricSource

logger = get_logger("procrec.capabilities")


def probe_capabilities(source: MetricSource) -> Capabilities:
    """Determine which optional stat groups ``source`` can provide.

    Each group is read once. Only ``UnsupportedStatError`` disables a group;
    any other failure is treated as transient and leaves the group enabled.
    """
    flags = {group: _is_available(source, group) for group in OPTIONAL_GROUPS}
    capabilities = Capabilities(**flags)
    logger.info("capabilities_probed", extra=capabilities.model_dump())
    return capabilities


def _is_available(source: MetricSource, group: str) -> bool:
    try:
        getattr(source, group)()
    except UnsupportedStatError as exc:
        logger.info("stat_group_unsupported", extra={"group": group, "reason": exc.reason})
        return False
    except Exception as e:
        logger.warning(
            "capability_probe_failed (group stays enabled)",
            extra={"group": group, "error": str(e)},
        )
    return True
