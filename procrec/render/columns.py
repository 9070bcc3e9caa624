"""Column schema of the metrics table.

Each column renders as a pair of cells: the current value and its delta
against the previous record. Groups appear in a fixed order; the optional
ones only when their capability was detected.
"""

from enum import Enum
from typing import NamedTuple, Optional

from procrec.domain.models import Capabilities


class Kind(str, Enum):
    COUNT = "count"
    BYTES = "bytes"
    DURATION = "duration"  # integer nanoseconds
    SECONDS = "seconds"  # fractional seconds
    TIMESTAMP = "timestamp"  # epoch nanoseconds


class Column(NamedTuple):
    label: str
    field: str
    kind: Kind


class ColumnGroup(NamedTuple):
    title: str
    href: str
    attr: str  # Record attribute holding the group
    capability: Optional[str]  # None for groups that are always present
    columns: tuple[Column, ...]


def _cols(kind: Kind, *pairs: tuple[str, str]) -> tuple[Column, ...]:
    return tuple(Column(label, field, kind) for label, field in pairs)


C, B = Kind.COUNT, Kind.BYTES

PROFILE = ColumnGroup(
    title="profile counters",
    href="https://docs.python.org/3/library/gc.html",
    attr="profile",
    capability=None,
    columns=_cols(
        C,
        ("goroutine", "goroutine"),
        ("threadcreate", "threadcreate"),
        ("heap", "heap"),
        ("allocs", "allocs"),
        ("block", "block"),
        ("mutex", "mutex"),
    ),
)

RUNTIME = ColumnGroup(
    title="runtime memory stats",
    href="https://docs.python.org/3/library/tracemalloc.html",
    attr="runtime",
    capability=None,
    columns=(
        Column(".Alloc", "alloc", B),
        Column(".TotalAlloc", "total_alloc", B),
        Column(".Sys", "sys", B),
        Column(".Lookups", "lookups", C),
        Column(".Mallocs", "mallocs", C),
        Column(".Frees", "frees", C),
        Column(".HeapAlloc", "heap_alloc", B),
        Column(".HeapSys", "heap_sys", B),
        Column(".HeapIdle", "heap_idle", B),
        Column(".HeapInuse", "heap_inuse", B),
        Column(".HeapReleased", "heap_released", B),
        Column(".HeapObjects", "heap_objects", C),
        Column(".StackInuse", "stack_inuse", B),
        Column(".StackSys", "stack_sys", B),
        Column(".MSpanInuse", "mspan_inuse", B),
        Column(".MSpanSys", "mspan_sys", B),
        Column(".MCacheInuse", "mcache_inuse", B),
        Column(".MCacheSys", "mcache_sys", B),
        Column(".BuckHashSys", "buck_hash_sys", B),
        Column(".GCSys", "gc_sys", B),
        Column(".OtherSys", "other_sys", B),
        Column(".NextGC", "next_gc", B),
        Column(".LastGC", "last_gc", Kind.TIMESTAMP),
        Column(".PauseTotalNs", "pause_total_ns", Kind.DURATION),
        Column(".NumGC", "num_gc", C),
        Column(".NumForcedGC", "num_forced_gc", C),
        Column(".OtherSys", "other_sys", B),
    ),
)

MEMORY_INFO = ColumnGroup(
    title="process memory info",
    href="https://psutil.readthedocs.io/en/latest/#psutil.Process.memory_info",
    attr="memory_info",
    capability="memory_info",
    columns=_cols(
        B,
        (".RSS", "rss"),
        (".VMS", "vms"),
        (".HWM", "hwm"),
        (".Data", "data"),
        (".Stack", "stack"),
        (".Locked", "locked"),
        (".Swap", "swap"),
    ),
)

CPU_TIMES = ColumnGroup(
    title="process cpu times",
    href="https://psutil.readthedocs.io/en/latest/#psutil.Process.cpu_times",
    attr="cpu_times",
    capability="cpu_times",
    columns=_cols(
        Kind.SECONDS,
        (".User", "user"),
        (".System", "system"),
        (".Idle", "idle"),
        (".Nice", "nice"),
        (".Iowait", "iowait"),
        (".Irq", "irq"),
        (".Softirq", "softirq"),
        (".Steal", "steal"),
        (".Guest", "guest"),
        (".GuestNice", "guest_nice"),
    ),
)

IO_COUNTERS = ColumnGroup(
    title="process io counters",
    href="https://psutil.readthedocs.io/en/latest/#psutil.Process.io_counters",
    attr="io_counters",
    capability="io_counters",
    columns=(
        Column(".ReadCount", "read_count", C),
        Column(".WriteCount", "write_count", C),
        Column(".ReadBytes", "read_bytes", B),
        Column(".WriteBytes", "write_bytes", B),
    ),
)

GROUPS = (PROFILE, RUNTIME, MEMORY_INFO, CPU_TIMES, IO_COUNTERS)


def visible_groups(capabilities: Capabilities) -> tuple[ColumnGroup, ...]:
    return tuple(
        g
        for g in GROUPS
        if g.capability is None or getattr(capabilities, g.capability)
    )
