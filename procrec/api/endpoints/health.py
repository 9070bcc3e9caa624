import time

from fastapi import APIRouter, Depends

from procrec.api.dependencies import get_window_recorder
from procrec.services.window import WindowRecorder

router = APIRouter()
_start_time = time.time()


@router.get("/healthz")
def healthz(recorder: WindowRecorder = Depends(get_window_recorder)):
    return {
        "status": "ok",
        "uptime_s": time.time() - _start_time,
        "window_samples": len(recorder.buffer),
        "window_sampler_running": recorder.running,
    }
