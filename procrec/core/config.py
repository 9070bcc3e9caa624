from datetime import timedelta

from pydantic_settings import BaseSettings

from procrec.domain.models import StreamConfig, WindowConfig


class Settings(BaseSettings):
    # HTTP
    host: str = "0.0.0.0"
    port: int = 8080
    window_path: str = "/debug/procrec/window"
    stream_path: str = "/debug/procrec/stream"

    # Sampling
    window_seconds: float = 120.0
    window_frequency_seconds: float = 1.0
    stream_frequency_seconds: float = 0.5
    trace_allocations: bool = False  # start tracemalloc for allocator figures

    # Logging
    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "key",
        "authorization",
        "cookie",
    ]

    otel_service_name: str = "procrec"
    app_environment: str = "production"

    def window_config(self) -> WindowConfig:
        return WindowConfig(
            window=timedelta(seconds=self.window_seconds),
            frequency=timedelta(seconds=self.window_frequency_seconds),
        )

    def stream_config(self) -> StreamConfig:
        return StreamConfig(frequency=timedelta(seconds=self.stream_frequency_seconds))


settings = Settings()
