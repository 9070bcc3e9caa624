"""Metric sources: the collaborators that read raw process and runtime figures.

``MetricSource`` is the protocol the sampler depends on. The profile and
runtime groups are mandatory and must not raise. The three optional groups
raise ``UnsupportedStatError`` when the platform cannot provide them and may
raise any other exception for a failed read.

``ProcessMetricSource`` implements it for the current Python process using
psutil and the interpreter's own counters. The runtime columns follow the
allocator/collector accounting layout; where CPython has no equivalent the
field stays 0:

* profile: goroutine = live asyncio tasks of the running loop,
  threadcreate = live threads, heap = live allocated blocks, allocs = net
  allocations since the last young collection, block / mutex = voluntary /
  involuntary context switches.
* runtime: traced bytes from tracemalloc when tracing (RSS otherwise) for
  Alloc/HeapAlloc/HeapInuse, TotalAlloc accumulates observed Alloc growth,
  HeapObjects = allocated blocks, Frees = objects the collector freed,
  LastGC and PauseTotalNs come from ``gc.callbacks``, NumForcedGC counts
  full (oldest generation) collections.
"""

from __future__ import annotations

import asyncio
import gc
import os
import sys
import threading
import time
import tracemalloc
from typing import Any, Optional, Protocol

import psutil

from procrec.core.logger import get_logger
from procrec.domain.models import (
    CpuTimesStat,
    IOCountersStat,
    MemoryInfoStat,
    ProfileCounts,
    RuntimeMemoryStats,
)
from procrec.exceptions import CollectionError, UnsupportedStatError

logger = get_logger("procrec.metric_source")

# CPython leaves the thread stack size to the platform when unset.
_DEFAULT_THREAD_STACK = 8 * 1024 * 1024


class MetricSource(Protocol):
    def profile_counts(self) -> ProfileCounts: ...

    def runtime_memory_stats(self) -> RuntimeMemoryStats: ...

    def cpu_times(self) -> CpuTimesStat: ...

    def io_counters(self) -> IOCountersStat: ...

    def memory_info(self) -> MemoryInfoStat: ...


class _GcObserver:
    """Times collections through ``gc.callbacks``; installed once per process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._installed = False
        self._started_at = 0
        self.last_gc_ns = 0
        self.pause_total_ns = 0

    def install(self) -> None:
        with self._lock:
            if not self._installed:
                gc.callbacks.append(self._on_gc)
                self._installed = True

    def _on_gc(self, phase: str, info: dict) -> None:
        if phase == "start":
            self._started_at = time.perf_counter_ns()
        elif phase == "stop" and self._started_at:
            self.pause_total_ns += time.perf_counter_ns() - self._started_at
            self.last_gc_ns = time.time_ns()
            self._started_at = 0


_gc_observer = _GcObserver()


class ProcessMetricSource:
    """Reads figures for the current process (psutil + interpreter counters)."""

    def __init__(
        self,
        process: Optional[psutil.Process] = None,
        trace_allocations: bool = False,
    ):
        self._process = process if process is not None else psutil.Process(os.getpid())
        if trace_allocations and not tracemalloc.is_tracing():
            tracemalloc.start()
            logger.info("tracemalloc_started")
        _gc_observer.install()
        self._lock = threading.Lock()
        self._last_alloc: Optional[int] = None
        self._total_alloc = 0

    # Mandatory groups
    def profile_counts(self) -> ProfileCounts:
        voluntary, involuntary = self._ctx_switches()
        return ProfileCounts(
            goroutine=_running_tasks(),
            threadcreate=threading.active_count(),
            heap=sys.getallocatedblocks(),
            allocs=gc.get_count()[0],
            block=voluntary,
            mutex=involuntary,
        )

    def runtime_memory_stats(self) -> RuntimeMemoryStats:
        stats = gc.get_stats()
        collected = sum(s["collected"] for s in stats)
        rss = self._rss()
        if tracemalloc.is_tracing():
            current, peak = tracemalloc.get_traced_memory()
            bookkeeping = tracemalloc.get_tracemalloc_memory()
        else:
            current = peak = rss
            bookkeeping = 0

        with self._lock:
            if self._last_alloc is None:
                self._total_alloc = current
            elif current > self._last_alloc:
                self._total_alloc += current - self._last_alloc
            self._last_alloc = current
            total_alloc = self._total_alloc

        stack = threading.active_count() * (
            threading.stack_size() or _DEFAULT_THREAD_STACK
        )
        blocks = sys.getallocatedblocks()
        return RuntimeMemoryStats(
            alloc=current,
            total_alloc=total_alloc,
            sys=rss,
            mallocs=blocks + collected,
            frees=collected,
            heap_alloc=current,
            heap_sys=peak,
            heap_idle=max(peak - current, 0),
            heap_inuse=current,
            heap_objects=blocks,
            stack_inuse=stack,
            stack_sys=stack,
            buck_hash_sys=bookkeeping,
            other_sys=max(rss - peak - stack - bookkeeping, 0),
            next_gc=max(gc.get_threshold()[0] - gc.get_count()[0], 0),
            last_gc=_gc_observer.last_gc_ns,
            pause_total_ns=_gc_observer.pause_total_ns,
            num_gc=sum(s["collections"] for s in stats),
            num_forced_gc=stats[-1]["collections"] if stats else 0,
        )

    # Optional groups
    def cpu_times(self) -> CpuTimesStat:
        times = self._call("cpu_times")
        return CpuTimesStat(
            user=times.user,
            system=times.system,
            iowait=getattr(times, "iowait", 0.0),
        )

    def io_counters(self) -> IOCountersStat:
        counters = self._call("io_counters")
        return IOCountersStat(
            read_count=counters.read_count,
            write_count=counters.write_count,
            read_bytes=counters.read_bytes,
            write_bytes=counters.write_bytes,
        )

    def memory_info(self) -> MemoryInfoStat:
        info = self._call("memory_info")
        return MemoryInfoStat(
            rss=info.rss,
            vms=info.vms,
            hwm=getattr(info, "peak_wset", 0),
            data=getattr(info, "data", 0),
        )

    # Internals
    def _call(self, group: str) -> Any:
        method = getattr(self._process, group, None)
        if method is None:
            raise UnsupportedStatError(group)
        try:
            return method()
        except NotImplementedError as exc:
            raise UnsupportedStatError(group) from exc
        except psutil.Error as exc:
            raise CollectionError(group, str(exc)) from exc

    def _rss(self) -> int:
        try:
            return self._process.memory_info().rss
        except psutil.Error as exc:
            logger.debug("rss_unavailable", extra={"error": str(exc)})
            return 0

    def _ctx_switches(self) -> tuple[int, int]:
        try:
            switches = self._process.num_ctx_switches()
        except (psutil.Error, NotImplementedError) as exc:
            logger.debug("ctx_switches_unavailable", extra={"error": str(exc)})
            return 0, 0
        return switches.voluntary, switches.involuntary


def _running_tasks() -> int:
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        return 0
    return len(asyncio.all_tasks(loop))


__all__ = ["MetricSource", "ProcessMetricSource"]
