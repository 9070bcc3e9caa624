from procrec.core.config import settings
from procrec.core.logger import get_logger
from procrec.core.logging_config import configure_logging

logger = get_logger("procrec.startup")


def initialize_application():
    configure_logging()
    logger.info(
        "procrec initializing",
        extra={
            "service": settings.otel_service_name,
            "window_path": settings.window_path,
            "stream_path": settings.stream_path,
            "window_s": settings.window_seconds,
            "window_frequency_s": settings.window_frequency_seconds,
            "stream_frequency_s": settings.stream_frequency_seconds,
        },
    )
