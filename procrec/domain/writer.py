"""Response sink protocols the recorders write HTML into."""

from typing import MutableMapping, Protocol, runtime_checkable


class ResponseWriter(Protocol):
    headers: MutableMapping[str, str]
    status_code: int

    def write(self, chunk: str) -> None: ...


@runtime_checkable
class Flusher(Protocol):
    """A writer that can push everything written so far to the client."""

    async def flush(self) -> None: ...
