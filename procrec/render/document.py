"""Document head and tail shared by the window and stream pages."""

from procrec.domain.models import Capabilities

from .columns import visible_groups

CONTENT_TYPE = "text/html; charset=UTF-8"

_STYLE = """
<style>
    body, table {
        font-family: Courier, monospace;
        font-size: 13px;
        white-space: nowrap;
        border-spacing: 0px;
        margin: 0px;
        padding: 0px;
    }
    table { overflow-y: auto; height: 100px; }
    table thead th {
        background-color: white;
        border-color: white;
        text-align: left;
    }
    table td { padding-left: 5px; }
    .tbl__head1 th {
        position: sticky;
        top: 0px;
        left: 69px;
        padding-left: 1px;
        background-color: white;
    }
    .tbl__head1__th1 {
        left: 0px !important;
        z-index: 50;
        border-right: 1px solid gray;
    }
    .tbl__head2 th {
        position: sticky;
        top: 15px;
        padding-bottom: 5px;
        border-bottom: 1px solid gray;
    }
    .tbl__th-time {
        position: sticky;
        top: 0;
        left: 0;
        border-right: 1px solid gray;
        z-index: 20;
    }
    .tbl__col1 {
        position: sticky;
        background-color: white;
        left: 0px;
        padding-left: 0px;
        padding-right: 5px;
        font-weight: bold;
        border-right: 1px solid gray;
    }
</style>
"""

DOCUMENT_TAIL = "</tbody></table></body></html>\n"


def render_head(capabilities: Capabilities, title: str = "procrec") -> str:
    """Everything up to and including the opening ``<tbody>``."""
    groups = visible_groups(capabilities)
    group_headers = "".join(
        f'<th colspan="{2 * len(g.columns)}">'
        f'<a target="_blank" href="{g.href}">{g.title}</a></th>'
        for g in groups
    )
    column_headers = "".join(
        f'<th colspan="2">{c.label}</th>' for g in groups for c in g.columns
    )
    return (
        "<!DOCTYPE html>\n<html>\n<head>"
        f"{_STYLE}<title>{title}</title>\n</head>\n<body>\n<table>\n"
        '<thead class="tbl__head1"><tr>'
        '<th class="tbl__head1__th1" colspan="1"></th>'
        f"{group_headers}</tr></thead>\n"
        '<thead class="tbl__head2"><tr><th class="tbl__th-time">time</th>'
        f"{column_headers}</tr></thead>\n<tbody>\n"
    )
