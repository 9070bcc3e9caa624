import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import Response, StreamingResponse

from procrec.api.dependencies import get_stream_recorder, get_window_recorder
from procrec.api.writers import BufferedWriter, QueueWriter
from procrec.core.config import settings
from procrec.core.logger import get_logger
from procrec.services.stream import StreamRecorder
from procrec.services.window import WindowRecorder

router = APIRouter()
logger = get_logger(__name__)


@router.get(settings.window_path)
def window(recorder: WindowRecorder = Depends(get_window_recorder)):
    """Render every record currently held by the window."""
    writer = BufferedWriter()
    recorder.serve(writer)
    return writer.to_response()


@router.get(settings.stream_path)
async def stream(recorder: StreamRecorder = Depends(get_stream_recorder)):
    """Push one row per tick until the client goes away."""
    writer = QueueWriter()
    stop = asyncio.Event()
    task = asyncio.create_task(recorder.serve(writer, stop))
    task.add_done_callback(lambda t: _stream_finished(t, writer))

    first = await writer.next_chunk()
    if first is None:
        await task  # surfaces unexpected failures as a 500
        return Response(status_code=writer.status_code, headers=writer.headers)

    async def body():
        try:
            yield first
            async for chunk in writer.chunks():
                yield chunk
        finally:
            stop.set()
            writer.abort()

    return StreamingResponse(
        body(), status_code=writer.status_code, headers=writer.headers
    )


def _stream_finished(task: asyncio.Task, writer: QueueWriter) -> None:
    writer.close()
    if not task.cancelled() and task.exception() is not None:
        logger.error("stream_task_failed", exc_info=task.exception())
