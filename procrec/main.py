import asyncio
from contextlib import asynccontextmanager
from functools import partial

import uvicorn
from fastapi import FastAPI
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from procrec.api.router import api_router
from procrec.core.config import settings
from procrec.core.logger import get_logger
from procrec.infrastructure.metric_source import ProcessMetricSource
from procrec.services.stream import StreamRecorder
from procrec.services.window import WindowRecorder
from procrec.startup import initialize_application

logger = get_logger("procrec.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    initialize_application()
    logger.info("procrec_starting")
    app.state.shutdown_event = asyncio.Event()
    app.state.window_recorder = WindowRecorder(
        ProcessMetricSource(trace_allocations=settings.trace_allocations),
        settings.window_config(),
        app.state.shutdown_event,
    )
    app.state.window_recorder.start()
    app.state.stream_recorder = StreamRecorder(
        partial(ProcessMetricSource, trace_allocations=settings.trace_allocations),
        settings.stream_config(),
        shutdown_event=app.state.shutdown_event,
    )
    try:
        yield
    finally:
        logger.info("procrec_stopping")
        await app.state.window_recorder.aclose()


app = FastAPI(title="procrec", version="0.1.0", lifespan=lifespan)
app.include_router(api_router)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


def run():
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
