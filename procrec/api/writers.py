"""Response writers bridging the recorders to Starlette responses."""

from __future__ import annotations

import asyncio
from typing import AsyncIterator, Optional

from fastapi.responses import Response


class BufferedWriter:
    """Collects a whole page in memory; used for window renders."""

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.status_code = 200
        self._chunks: list[str] = []

    def write(self, chunk: str) -> None:
        self._chunks.append(chunk)

    def body(self) -> str:
        return "".join(self._chunks)

    def to_response(self) -> Response:
        return Response(
            content=self.body(),
            status_code=self.status_code,
            headers=self.headers,
        )


class QueueWriter:
    """Flushable writer feeding a streaming response body.

    ``write`` buffers; ``flush`` hands everything buffered to the consumer
    side as one chunk and waits while the previous chunk is still unread,
    so a slow client holds back the producer instead of queueing rows.
    ``close`` ends the chunk sequence once the producer is done; ``abort``
    is for a consumer that went away. Later writes fail in both cases.
    """

    def __init__(self) -> None:
        self.headers: dict[str, str] = {}
        self.status_code = 200
        self._pending: list[str] = []
        self._queue: asyncio.Queue[Optional[str]] = asyncio.Queue(maxsize=1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def backlog(self) -> int:
        """Flushed chunks the consumer has not read yet."""
        return self._queue.qsize()

    def write(self, chunk: str) -> None:
        if self._closed:
            raise RuntimeError("write to closed stream")
        self._pending.append(chunk)

    async def flush(self) -> None:
        if self._closed:
            raise RuntimeError("flush of closed stream")
        if self._pending:
            chunk = "".join(self._pending)
            self._pending.clear()
            await self._queue.put(chunk)

    def close(self) -> None:
        """End the sequence; an unread chunk stays readable."""
        if self._closed:
            return
        self._closed = True
        # a full queue means the consumer is not parked in get(); it sees
        # the end through next_chunk() once the last chunk is taken
        if not self._queue.full():
            self._queue.put_nowait(None)

    def abort(self) -> None:
        """Drop unread chunks and release a producer blocked in flush."""
        self._closed = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def next_chunk(self) -> Optional[str]:
        """Next flushed chunk, or None once the writer is closed and drained."""
        if self._queue.empty() and self._closed:
            return None
        return await self._queue.get()

    async def chunks(self) -> AsyncIterator[str]:
        while True:
            chunk = await self.next_chunk()
            if chunk is None:
                return
            yield chunk
