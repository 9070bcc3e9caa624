from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from procrec.domain.models import (
    DEFAULT_FREQUENCY,
    DEFAULT_WINDOW,
    OPTIONAL_GROUPS,
    OPTIONAL_STAT_TYPES,
    Capabilities,
    ProfileCounts,
    Record,
    RuntimeMemoryStats,
    StreamConfig,
    WindowConfig,
)


def test_window_config_defaults():
    config = WindowConfig()
    assert config.window == DEFAULT_WINDOW == timedelta(seconds=30)
    assert config.frequency == DEFAULT_FREQUENCY == timedelta(seconds=1)
    assert config.capacity == 31


def test_zero_durations_mean_default():
    assert WindowConfig(window=0, frequency=timedelta(seconds=2)).window == DEFAULT_WINDOW
    assert WindowConfig(frequency=timedelta(0)).frequency == DEFAULT_FREQUENCY
    assert StreamConfig(frequency=0).frequency == DEFAULT_FREQUENCY


@pytest.mark.parametrize(
    "window,frequency,capacity",
    [
        (timedelta(seconds=3), timedelta(seconds=1), 4),
        (timedelta(seconds=2.5), timedelta(seconds=1), 3),
        (timedelta(seconds=1), timedelta(seconds=5), 1),
        (timedelta(minutes=2), timedelta(milliseconds=500), 241),
    ],
)
def test_window_capacity(window, frequency, capacity):
    assert WindowConfig(window=window, frequency=frequency).capacity == capacity


def test_negative_durations_rejected():
    with pytest.raises(ValidationError):
        WindowConfig(window=timedelta(seconds=-1))
    with pytest.raises(ValidationError):
        StreamConfig(frequency=timedelta(seconds=-1))


def test_record_is_frozen_and_optional_groups_default_to_none():
    record = Record(
        timestamp=datetime.now().astimezone(),
        profile=ProfileCounts(goroutine=1),
        runtime=RuntimeMemoryStats(alloc=10),
    )
    assert record.cpu_times is None
    assert record.io_counters is None
    assert record.memory_info is None
    with pytest.raises(ValidationError):
        record.profile = ProfileCounts()


def test_optional_groups_have_stat_types():
    assert set(OPTIONAL_GROUPS) == set(OPTIONAL_STAT_TYPES)
    assert set(OPTIONAL_GROUPS) == set(Capabilities.model_fields)
    for stat_type in OPTIONAL_STAT_TYPES.values():
        assert all(v == 0 for v in stat_type().model_dump().values())
