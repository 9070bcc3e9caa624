from .models import (
    OPTIONAL_GROUPS,
    Capabilities,
    CpuTimesStat,
    IOCountersStat,
    MemoryInfoStat,
    ProfileCounts,
    Record,
    RuntimeMemoryStats,
    StreamConfig,
    WindowConfig,
)
from .writer import Flusher, ResponseWriter

__all__ = [
    "OPTIONAL_GROUPS",
    "Capabilities",
    "CpuTimesStat",
    "IOCountersStat",
    "MemoryInfoStat",
    "ProfileCounts",
    "Record",
    "RuntimeMemoryStats",
    "StreamConfig",
    "WindowConfig",
    "Flusher",
    "ResponseWriter",
]
