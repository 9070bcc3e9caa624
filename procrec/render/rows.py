"""Diff rows: one table row per (previous, current) record pair."""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Union

from procrec.domain.models import Capabilities, Record

from .columns import Column, Kind, visible_groups
from .formatting import (
    format_bytes,
    format_clock,
    format_duration,
    format_timestamp_ns,
    seconds_to_ns,
)

Number = Union[int, float]


class Trend(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"

    @property
    def style(self) -> str:
        return _TREND_STYLES[self]


_TREND_STYLES = {
    Trend.POSITIVE: "color: green;",
    Trend.NEGATIVE: "color: red;",
    Trend.NEUTRAL: "color: gray;",
}


def classify(delta: Number) -> Trend:
    if delta > 0:
        return Trend.POSITIVE
    if delta < 0:
        return Trend.NEGATIVE
    return Trend.NEUTRAL


class Cell(NamedTuple):
    label: str
    value: str
    delta: str
    trend: Trend


def diff_cell(column: Column, previous: Number, current: Number) -> Cell:
    kind = column.kind
    if kind is Kind.SECONDS:
        delta = seconds_to_ns(current - previous)
        value, shown = format_duration(seconds_to_ns(current)), format_duration(delta)
    elif kind is Kind.TIMESTAMP:
        delta = int(current) - int(previous)
        value, shown = format_timestamp_ns(int(current)), format_duration(delta)
    elif kind is Kind.DURATION:
        delta = int(current) - int(previous)
        value, shown = format_duration(int(current)), format_duration(delta)
    elif kind is Kind.BYTES:
        delta = int(current) - int(previous)
        value, shown = format_bytes(int(current)), format_bytes(delta)
    else:
        delta = int(current) - int(previous)
        value, shown = str(int(current)), str(delta)
    return Cell(column.label, value, shown, classify(delta))


def diff_cells(
    previous: Record, current: Record, capabilities: Capabilities
) -> list[Cell]:
    cells: list[Cell] = []
    for group in visible_groups(capabilities):
        prev_stat = getattr(previous, group.attr)
        cur_stat = getattr(current, group.attr)
        if prev_stat is None or cur_stat is None:
            # group missing on one side: show it against itself
            prev_stat = cur_stat = prev_stat or cur_stat
        for column in group.columns:
            cells.append(
                diff_cell(
                    column,
                    getattr(prev_stat, column.field, 0),
                    getattr(cur_stat, column.field, 0),
                )
            )
    return cells


def render_cell(cell: Cell) -> str:
    return (
        f'<td style="padding-left: 10px;">{cell.value}</td>'
        f'<td style="{cell.trend.style}">{cell.delta}</td>'
    )


def render_row(previous: Record, current: Record, capabilities: Capabilities) -> str:
    cells = "".join(render_cell(c) for c in diff_cells(previous, current, capabilities))
    return f'<tr><td class="tbl__col1">{format_clock(current.timestamp)}</td>{cells}</tr>\n'
