from fastapi import Request

from procrec.services.stream import StreamRecorder
from procrec.services.window import WindowRecorder


def get_window_recorder(request: Request) -> WindowRecorder:
    return request.app.state.window_recorder  # type: ignore[return-value]


def get_stream_recorder(request: Request) -> StreamRecorder:
    return request.app.state.stream_recorder  # type: ignore[return-value]
