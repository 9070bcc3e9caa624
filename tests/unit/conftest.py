from datetime import datetime, timedelta

import pytest

from procrec.domain.models import (
    Capabilities,
    CpuTimesStat,
    IOCountersStat,
    MemoryInfoStat,
    ProfileCounts,
    Record,
    RuntimeMemoryStats,
)
from procrec.exceptions import UnsupportedStatError

KIB = 1024


class FakeMetricSource:
    """Deterministic metric source.

    ``allocs`` feeds successive ``runtime.alloc`` values (the last one
    repeats). ``total_alloc`` grows by 512 KiB per read. Groups named in
    ``unsupported`` raise ``UnsupportedStatError``; groups in ``failing``
    raise ``RuntimeError``.
    """

    def __init__(self, allocs=None, unsupported=(), failing=()):
        self.allocs = list(allocs or [KIB])
        self.unsupported = set(unsupported)
        self.failing = set(failing)
        self.reads = 0
        self.calls: dict[str, int] = {}

    def _enter(self, group: str):
        self.calls[group] = self.calls.get(group, 0) + 1
        if group in self.unsupported:
            raise UnsupportedStatError(group)
        if group in self.failing:
            raise RuntimeError(f"{group} read failed")

    def profile_counts(self) -> ProfileCounts:
        return ProfileCounts(goroutine=3, threadcreate=2, heap=100 + self.reads)

    def runtime_memory_stats(self) -> RuntimeMemoryStats:
        alloc = self.allocs[min(self.reads, len(self.allocs) - 1)]
        self.reads += 1
        return RuntimeMemoryStats(
            alloc=alloc,
            total_alloc=512 * KIB * self.reads,
            sys=8 * KIB * KIB,
            num_gc=self.reads,
            last_gc=1_700_000_000_000_000_000 + self.reads * 1_000_000,
            pause_total_ns=self.reads * 250_000,
        )

    def cpu_times(self) -> CpuTimesStat:
        self._enter("cpu_times")
        return CpuTimesStat(user=0.5 * self.reads, system=0.25)

    def io_counters(self) -> IOCountersStat:
        self._enter("io_counters")
        return IOCountersStat(read_count=self.reads, read_bytes=4 * KIB * self.reads)

    def memory_info(self) -> MemoryInfoStat:
        self._enter("memory_info")
        return MemoryInfoStat(rss=2 * KIB * KIB, vms=64 * KIB * KIB)


class RecordingWriter:
    """Flushable writer that keeps every flushed chunk."""

    def __init__(self, fail_on_writes=()):
        self.headers: dict = {}
        self.status_code = 200
        self.pending: list[str] = []
        self.flushed: list[str] = []
        self.fail_on_writes = set(fail_on_writes)
        self.writes = 0

    def write(self, chunk: str) -> None:
        self.writes += 1
        if self.writes in self.fail_on_writes:
            raise OSError("broken pipe")
        self.pending.append(chunk)

    async def flush(self) -> None:
        if self.pending:
            self.flushed.append("".join(self.pending))
            self.pending.clear()

    @property
    def body(self) -> str:
        return "".join(self.flushed)


class PlainWriter:
    """Writer without flush support."""

    def __init__(self, fail_on_writes=()):
        self.headers: dict = {}
        self.status_code = 200
        self.chunks: list[str] = []
        self.fail_on_writes = set(fail_on_writes)
        self.writes = 0

    def write(self, chunk: str) -> None:
        self.writes += 1
        if self.writes in self.fail_on_writes:
            raise OSError("connection reset")
        self.chunks.append(chunk)

    @property
    def body(self) -> str:
        return "".join(self.chunks)


@pytest.fixture
def fake_source_cls():
    return FakeMetricSource


@pytest.fixture
def fake_source():
    return FakeMetricSource()


@pytest.fixture
def recording_writer_cls():
    return RecordingWriter


@pytest.fixture
def plain_writer_cls():
    return PlainWriter


@pytest.fixture
def all_capabilities():
    return Capabilities(cpu_times=True, io_counters=True, memory_info=True)


@pytest.fixture
def no_capabilities():
    return Capabilities()


@pytest.fixture
def make_record():
    base = datetime(2024, 5, 1, 12, 30, 0).astimezone()

    def _make(seconds=0, **groups):
        groups.setdefault("profile", ProfileCounts())
        groups.setdefault("runtime", RuntimeMemoryStats())
        return Record(timestamp=base + timedelta(seconds=seconds), **groups)

    return _make
