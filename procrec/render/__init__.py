from .document import CONTENT_TYPE, DOCUMENT_TAIL, render_head
from .formatting import format_bytes, format_duration
from .rows import Cell, Trend, classify, diff_cells, render_row

__all__ = [
    "CONTENT_TYPE",
    "DOCUMENT_TAIL",
    "render_head",
    "format_bytes",
    "format_duration",
    "Cell",
    "Trend",
    "classify",
    "diff_cells",
    "render_row",
]
