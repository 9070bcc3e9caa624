"""Streaming recorder: one sampler and one "previous" record per connection."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from procrec.core.logger import get_logger
from procrec.domain.models import StreamConfig
from procrec.domain.writer import Flusher, ResponseWriter
from procrec.infrastructure.metric_source import MetricSource
from procrec.observability import STREAMS_ACTIVE, WRITE_ERRORS_TOTAL
from procrec.render import CONTENT_TYPE, render_head, render_row
from procrec.utils.ticker import Ticker

from .capabilities import probe_capabilities
from .sampler import Sampler

logger = get_logger("procrec.stream")


class StreamRecorder:
    """Pushes one diff row per tick to each connected client.

    Nothing is shared between connections: every ``serve`` call builds its
    own source, capabilities and sampler, and keeps only the last record.
    A flush that waits on a slow client holds the loop back; the ticks it
    misses are dropped. ``shutdown_event`` (optional) ends every open stream at its next tick.
    """

    def __init__(
        self,
        source_factory: Callable[[], MetricSource],
        config: Optional[StreamConfig] = None,
        shutdown_event: Optional[asyncio.Event] = None,
    ):
        self.source_factory = source_factory
        self.config = config or StreamConfig()
        self.shutdown_event = shutdown_event

    def _stopped(self, stop_event: asyncio.Event) -> bool:
        if stop_event.is_set():
            return True
        return self.shutdown_event is not None and self.shutdown_event.is_set()

    async def serve(self, writer: ResponseWriter, stop_event: asyncio.Event) -> int:
        """Stream rows into ``writer`` until ``stop_event`` is set.

        Returns the number of rows written. Writers that cannot flush get a
        404 and nothing else.
        """
        if not isinstance(writer, Flusher):
            writer.status_code = 404
            logger.warning("stream_rejected_unflushable_writer")
            return 0

        source = self.source_factory()
        capabilities = probe_capabilities(source)
        sampler = Sampler(source)

        writer.headers["Content-Type"] = CONTENT_TYPE
        await self._push(writer, render_head(capabilities), "head")

        rows = 0
        STREAMS_ACTIVE.inc()
        try:
            previous = sampler.sample(capabilities)
            period = self.config.frequency.total_seconds()
            async with Ticker(period, wake=stop_event) as ticker:
                async for _ in ticker:
                    if self._stopped(stop_event):
                        break
                    current = sampler.sample(capabilities)
                    if await self._push(
                        writer, render_row(previous, current, capabilities), "row"
                    ):
                        rows += 1
                    previous = current
        finally:
            STREAMS_ACTIVE.dec()
            logger.info("stream_closed", extra={"rows": rows})
        return rows

    async def _push(self, writer: ResponseWriter, chunk: str, fragment: str) -> bool:
        try:
            writer.write(chunk)
            await writer.flush()  # type: ignore[attr-defined]
        except Exception as e:
            WRITE_ERRORS_TOTAL.labels(handler="stream").inc()
            logger.error(
                "response_write_failed",
                extra={"fragment": fragment, "error": str(e)},
            )
            return False
        return True
