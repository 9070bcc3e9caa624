from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator

DEFAULT_WINDOW = timedelta(seconds=30)
DEFAULT_FREQUENCY = timedelta(seconds=1)

# Optional stat groups, in the order their columns are rendered.
OPTIONAL_GROUPS = ("memory_info", "cpu_times", "io_counters")


class _Stat(BaseModel):
    model_config = ConfigDict(frozen=True)


class ProfileCounts(_Stat):
    """Item counts of the runtime's diagnostic buckets."""

    goroutine: int = 0
    threadcreate: int = 0
    heap: int = 0
    allocs: int = 0
    block: int = 0
    mutex: int = 0


class RuntimeMemoryStats(_Stat):
    """Allocator and garbage collector accounting.

    Byte counts unless noted otherwise. ``last_gc`` is a wall-clock timestamp
    in nanoseconds since the epoch (0 when no collection was observed) and
    ``pause_total_ns`` is a cumulative duration in nanoseconds.
    """

    alloc: int = 0
    total_alloc: int = 0
    sys: int = 0
    lookups: int = 0
    mallocs: int = 0
    frees: int = 0
    heap_alloc: int = 0
    heap_sys: int = 0
    heap_idle: int = 0
    heap_inuse: int = 0
    heap_released: int = 0
    heap_objects: int = 0
    stack_inuse: int = 0
    stack_sys: int = 0
    mspan_inuse: int = 0
    mspan_sys: int = 0
    mcache_inuse: int = 0
    mcache_sys: int = 0
    buck_hash_sys: int = 0
    gc_sys: int = 0
    other_sys: int = 0
    next_gc: int = 0
    last_gc: int = 0
    pause_total_ns: int = 0
    num_gc: int = 0
    num_forced_gc: int = 0


class CpuTimesStat(_Stat):
    """Process CPU time breakdown in fractional seconds."""

    user: float = 0.0
    system: float = 0.0
    idle: float = 0.0
    nice: float = 0.0
    iowait: float = 0.0
    irq: float = 0.0
    softirq: float = 0.0
    steal: float = 0.0
    guest: float = 0.0
    guest_nice: float = 0.0


class IOCountersStat(_Stat):
    read_count: int = 0
    write_count: int = 0
    read_bytes: int = 0
    write_bytes: int = 0


class MemoryInfoStat(_Stat):
    rss: int = 0
    vms: int = 0
    hwm: int = 0
    data: int = 0
    stack: int = 0
    locked: int = 0
    swap: int = 0


OPTIONAL_STAT_TYPES: dict[str, type[_Stat]] = {
    "memory_info": MemoryInfoStat,
    "cpu_times": CpuTimesStat,
    "io_counters": IOCountersStat,
}


class Capabilities(BaseModel):
    """Which optional stat groups the running platform can provide."""

    model_config = ConfigDict(frozen=True)

    cpu_times: bool = False
    io_counters: bool = False
    memory_info: bool = False


class Record(BaseModel):
    """Point-in-time snapshot of every enabled stat group.

    An optional group is ``None`` when its capability is off. When the
    capability is on but the read failed, the group holds zero values.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    profile: ProfileCounts
    runtime: RuntimeMemoryStats
    cpu_times: Optional[CpuTimesStat] = None
    io_counters: Optional[IOCountersStat] = None
    memory_info: Optional[MemoryInfoStat] = None


def _default_if_zero(
    value: timedelta, info: ValidationInfo, defaults: dict[str, timedelta]
) -> timedelta:
    if value < timedelta(0):
        raise ValueError(f"{info.field_name} must not be negative")
    if value == timedelta(0):
        return defaults[info.field_name]
    return value


class WindowConfig(BaseModel):
    """Window handler options; zero durations fall back to the defaults."""

    model_config = ConfigDict(frozen=True)

    window: timedelta = DEFAULT_WINDOW
    frequency: timedelta = DEFAULT_FREQUENCY

    @field_validator("window", "frequency")
    @classmethod
    def zero_means_default(cls, value: timedelta, info: ValidationInfo) -> timedelta:
        return _default_if_zero(
            value, info, {"window": DEFAULT_WINDOW, "frequency": DEFAULT_FREQUENCY}
        )

    @property
    def capacity(self) -> int:
        """Number of records the window keeps: floor(window / frequency) + 1."""
        return self.window // self.frequency + 1


class StreamConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: timedelta = DEFAULT_FREQUENCY

    @field_validator("frequency")
    @classmethod
    def zero_means_default(cls, value: timedelta, info: ValidationInfo) -> timedelta:
        return _default_if_zero(value, info, {"frequency": DEFAULT_FREQUENCY})
