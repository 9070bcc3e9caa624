"""JSON logging configuration.

Exports: SensitiveDataFilter, CustomJsonFormatter, configure_logging.
Installs exactly one JSON StreamHandler on the root logger and redacts
configured sensitive key substrings (case-insensitive).
"""

from __future__ import annotations

import json
import logging
import os
import socket
import traceback
from datetime import datetime, timezone
from typing import Iterable

from procrec.core.config import settings


class SensitiveDataFilter:
    """Recursively redact sensitive keys from dictionaries."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = [p.lower() for p in patterns]

    def filter(self, data: dict) -> dict:
        redacted: dict = {}
        for key, value in data.items():
            lowered = key.lower()
            if any(p in lowered for p in self.patterns):
                redacted[key] = "[REDACTED]"
            elif isinstance(value, dict):
                redacted[key] = self.filter(value)
            else:
                redacted[key] = value
        return redacted


class CustomJsonFormatter(logging.Formatter):  # type: ignore[misc]
    def __init__(
        self,
        service: str,
        environment: str,
        redaction_patterns: Iterable[str],
    ):
        super().__init__()
        self.hostname = socket.gethostname()
        self.pid = os.getpid()
        self.service_name = service
        self.environment = environment
        self.sensitive_filter = SensitiveDataFilter(redaction_patterns)

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        data = record.__dict__.copy()
        data["message"] = record.getMessage()
        data["timestamp"] = datetime.now(timezone.utc).isoformat()
        data["service"] = self.service_name
        data["hostname"] = self.hostname
        data["pid"] = self.pid
        data["environment"] = self.environment
        data.pop("args", None)
        data.pop("exc_info", None)
        if record.exc_info:
            data["exception"] = self.format_exception(record.exc_info)
        data = self.sensitive_filter.filter(data)
        return json.dumps(data, default=str)

    @staticmethod
    def format_exception(exc_info):  # type: ignore[override]
        et, ev, tb = exc_info
        return {
            "type": et.__name__,
            "message": str(ev),
            "stack": traceback.format_tb(tb),
        }


_configured = False


def configure_logging(force: bool = False) -> logging.Logger:
    """Install a single JSON StreamHandler on the root logger (idempotent)."""
    global _configured
    root = logging.getLogger()
    if _configured and not force:
        return root
    handler = logging.StreamHandler()
    handler.setFormatter(
        CustomJsonFormatter(
            service=settings.otel_service_name,
            environment=settings.app_environment,
            redaction_patterns=settings.app_log_redaction_patterns,
        )
    )
    root.handlers = [handler]  # deterministic single handler
    root.setLevel(getattr(logging, settings.app_log_level.upper(), logging.INFO))
    _configured = True
    return root


__all__ = [
    "SensitiveDataFilter",
    "CustomJsonFormatter",
    "configure_logging",
]
