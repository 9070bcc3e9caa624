"""Sliding-window recorder: one background sampler, many concurrent readers."""

from __future__ import annotations

import asyncio
import threading
from collections import deque
from typing import Iterator, Optional

from procrec.core.logger import get_logger
from procrec.domain.models import Record, WindowConfig
from procrec.domain.writer import ResponseWriter
from procrec.infrastructure.metric_source import MetricSource
from procrec.observability import WINDOW_RECORDS, WRITE_ERRORS_TOTAL
from procrec.render import CONTENT_TYPE, DOCUMENT_TAIL, render_head, render_row
from procrec.utils.ticker import Ticker

from .capabilities import probe_capabilities
from .sampler import Sampler

logger = get_logger("procrec.window")


class WindowBuffer:
    """Bounded FIFO of records; appending past capacity evicts the oldest.

    ``append`` and ``snapshot`` are serialized so readers never observe a
    half-applied append/evict.
    """

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("window capacity must be at least 1")
        self.capacity = capacity
        self._records: deque[Record] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def append(self, record: Record) -> Optional[Record]:
        """Append ``record``; return the evicted record, if any."""
        with self._lock:
            evicted = self._records[0] if len(self._records) == self.capacity else None
            self._records.append(record)
            return evicted

    def snapshot(self) -> tuple[Record, ...]:
        with self._lock:
            return tuple(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


def record_pairs(records: tuple[Record, ...]) -> Iterator[tuple[Record, Record]]:
    """(previous, current) pairs; the first record is paired with itself."""
    if not records:
        return
    yield records[0], records[0]
    yield from zip(records, records[1:])


class WindowRecorder:
    """Keeps the last ``config.window`` of samples and renders them on demand.

    Capabilities are probed once here. ``start()`` launches the sampling task
    on the running loop; it runs until ``stop_event`` is set. The buffer stays
    readable after the task exits.
    """

    def __init__(
        self,
        source: MetricSource,
        config: Optional[WindowConfig] = None,
        stop_event: Optional[asyncio.Event] = None,
    ):
        self.config = config or WindowConfig()
        self.stop_event = stop_event or asyncio.Event()
        self.sampler = Sampler(source)
        self.capabilities = probe_capabilities(source)
        self.buffer = WindowBuffer(self.config.capacity)
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="procrec-window-sampler")
        return self._task

    async def aclose(self) -> None:
        self.stop_event.set()
        if self._task is not None:
            await self._task

    async def _run(self) -> None:
        logger.info(
            "window_sampler_started",
            extra={
                "capacity": self.buffer.capacity,
                "frequency_s": self.config.frequency.total_seconds(),
            },
        )
        period = self.config.frequency.total_seconds()
        async with Ticker(period, wake=self.stop_event) as ticker:
            async for _ in ticker:
                if self.stop_event.is_set():
                    break
                self.buffer.append(self.sampler.sample(self.capabilities))
                WINDOW_RECORDS.set(len(self.buffer))
        logger.info("window_sampler_stopped", extra={"ticks": ticker.ticks})

    def serve(self, writer: ResponseWriter) -> None:
        """Write the full page for the current buffer contents to ``writer``.

        A failed head write abandons the page; a failed row write skips that
        row and moves on.
        """
        writer.headers["Content-Type"] = CONTENT_TYPE
        records = self.buffer.snapshot()
        try:
            writer.write(render_head(self.capabilities))
        except Exception as e:
            _write_failed(e, "head")
            return

        for previous, current in record_pairs(records):
            try:
                writer.write(render_row(previous, current, self.capabilities))
            except Exception as e:
                _write_failed(e, "row")

        try:
            writer.write(DOCUMENT_TAIL)
        except Exception as e:
            _write_failed(e, "tail")


def _write_failed(exc: Exception, fragment: str) -> None:
    WRITE_ERRORS_TOTAL.labels(handler="window").inc()
    logger.error(
        "response_write_failed",
        extra={"fragment": fragment, "error": str(exc)},
    )
