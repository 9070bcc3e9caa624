import asyncio
from datetime import timedelta

import pytest
from prometheus_client import REGISTRY

from procrec.api.writers import QueueWriter
from procrec.domain.models import StreamConfig
from procrec.infrastructure.metric_source import ProcessMetricSource
from procrec.services.stream import StreamRecorder


def _tickers() -> float:
    return REGISTRY.get_sample_value("procrec_tickers_active") or 0.0


def _fast(factory, **kwargs) -> StreamRecorder:
    return StreamRecorder(
        factory, StreamConfig(frequency=timedelta(milliseconds=100)), **kwargs
    )


@pytest.mark.asyncio
async def test_unflushable_writer_gets_404(fake_source_cls, plain_writer_cls):
    built = []

    def factory():
        built.append(fake_source_cls())
        return built[-1]

    writer = plain_writer_cls()
    rows = await _fast(factory).serve(writer, asyncio.Event())

    assert rows == 0
    assert writer.status_code == 404
    assert writer.chunks == []
    assert "Content-Type" not in writer.headers
    assert built == []


@pytest.mark.asyncio
async def test_streams_rows_until_stopped(fake_source_cls, recording_writer_cls):
    writer = recording_writer_cls()
    stop = asyncio.Event()
    task = asyncio.create_task(_fast(fake_source_cls).serve(writer, stop))

    await asyncio.sleep(0.55)
    stop.set()
    rows = await asyncio.wait_for(task, timeout=1)

    assert rows >= 4
    assert writer.headers["Content-Type"] == "text/html; charset=UTF-8"
    assert writer.flushed[0].startswith("<!DOCTYPE html>")
    # one flush for the head, then one per row
    assert len(writer.flushed) == rows + 1
    assert all(chunk.startswith("<tr>") for chunk in writer.flushed[1:])
    assert "MiB" in writer.body


@pytest.mark.asyncio
async def test_streams_real_process_metrics(recording_writer_cls):
    writer = recording_writer_cls()
    stop = asyncio.Event()
    task = asyncio.create_task(_fast(ProcessMetricSource).serve(writer, stop))

    await asyncio.sleep(0.5)
    stop.set()
    await asyncio.wait_for(task, timeout=1)

    assert "MiB" in writer.body


@pytest.mark.asyncio
async def test_each_connection_probes_its_own_source(fake_source_cls, recording_writer_cls):
    built = []

    def factory():
        built.append(fake_source_cls())
        return built[-1]

    recorder = _fast(factory)
    stop = asyncio.Event()
    stop.set()
    await recorder.serve(recording_writer_cls(), stop)
    await recorder.serve(recording_writer_cls(), stop)

    assert len(built) == 2
    assert all(s.calls["cpu_times"] >= 1 for s in built)


@pytest.mark.asyncio
async def test_stop_before_first_tick_writes_head_only(fake_source_cls, recording_writer_cls):
    writer = recording_writer_cls()
    stop = asyncio.Event()
    stop.set()

    rows = await _fast(fake_source_cls).serve(writer, stop)

    assert rows == 0
    assert len(writer.flushed) == 1
    assert '<tr><td class="tbl__col1">' not in writer.body


@pytest.mark.asyncio
async def test_shutdown_event_ends_stream(fake_source_cls, recording_writer_cls):
    shutdown = asyncio.Event()
    recorder = _fast(fake_source_cls, shutdown_event=shutdown)
    task = asyncio.create_task(recorder.serve(recording_writer_cls(), asyncio.Event()))

    await asyncio.sleep(0.25)
    shutdown.set()

    rows = await asyncio.wait_for(task, timeout=1)
    assert rows >= 1


@pytest.mark.asyncio
async def test_write_errors_do_not_end_stream(fake_source_cls, recording_writer_cls):
    # write 1 is the head, 2 the first row
    writer = recording_writer_cls(fail_on_writes={2})
    stop = asyncio.Event()
    task = asyncio.create_task(_fast(fake_source_cls).serve(writer, stop))

    await asyncio.sleep(0.45)
    stop.set()
    rows = await asyncio.wait_for(task, timeout=1)

    assert writer.writes >= 3
    assert rows == writer.writes - 2


@pytest.mark.asyncio
async def test_ticker_released_on_stop_and_cancel(fake_source_cls, recording_writer_cls):
    before = _tickers()
    recorder = _fast(fake_source_cls)

    stop = asyncio.Event()
    stopped = asyncio.create_task(recorder.serve(recording_writer_cls(), stop))
    cancelled = asyncio.create_task(recorder.serve(recording_writer_cls(), asyncio.Event()))
    await asyncio.sleep(0.15)
    assert _tickers() == before + 2

    stop.set()
    await asyncio.wait_for(stopped, timeout=1)
    cancelled.cancel()
    with pytest.raises(asyncio.CancelledError):
        await cancelled

    assert _tickers() == before


@pytest.mark.asyncio
async def test_unread_rows_do_not_pile_up(fake_source_cls):
    writer = QueueWriter()
    stop = asyncio.Event()
    recorder = StreamRecorder(
        fake_source_cls, StreamConfig(frequency=timedelta(milliseconds=5))
    )
    task = asyncio.create_task(recorder.serve(writer, stop))

    backlog = []
    for _ in range(20):
        await asyncio.sleep(0.01)
        backlog.append(writer.backlog)

    assert max(backlog) <= 1
    assert not task.done()

    # consumer gone: stop and release the blocked flush
    stop.set()
    writer.abort()
    rows = await asyncio.wait_for(task, timeout=1)
    assert rows <= 1
