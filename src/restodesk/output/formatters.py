"""Rich/JSON output helpers.

The CLI renders a Result for humans (Rich tables and key-value lines) or
machines (``--json``). Payloads are pydantic models or lists of them;
both are flattened with ``model_dump(mode="json")`` before rendering.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from rich.markup import escape
from rich.table import Table

from restodesk.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from restodesk.services.result import Fail, Ok

# Columns shown for list payloads, in order, when present on the rows.
_LIST_COLUMNS = (
    "id",
    "status",
    "response_status",
    "title",
    "subject",
    "week_start",
    "mode",
    "catalog_item_id",
    "rating",
    "sender",
    "channel",
    "content",
    "retry_count",
    "entry_type",
    "amount",
    "reference_date",
)
_MAX_CELL = 60


def _plain(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if isinstance(data, list):
        return [_plain(item) for item in data]
    return data


def _cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if len(text) > _MAX_CELL:
        text = text[: _MAX_CELL - 1] + "…"
    return escape(text)


def _render_mapping(console: Console, data: dict[str, Any]) -> None:
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, dict | list):
            value = _json.dumps(value, separators=(",", ":"))
        style = style_for_status(str(value)) if key.endswith("status") else ""
        rendered = f"[{style}]{escape(str(value))}[/]" if style else escape(str(value))
        console.print(f"  [resto.key]{key}:[/] {rendered}")


def _render_rows(console: Console, rows: list[Any]) -> None:
    if not rows:
        console.print("  [resto.key](none)[/]")
        return
    if not isinstance(rows[0], dict):
        for row in rows:
            console.print(f"  {escape(str(row))}")
        return

    columns = [name for name in _LIST_COLUMNS if name in rows[0]]
    table = Table(show_header=True, header_style="resto.key", box=None, pad_edge=False)
    for name in columns:
        table.add_column(name, style="resto.id" if name == "id" else None)
    for row in rows:
        cells = []
        for name in columns:
            value = row.get(name)
            style = style_for_status(str(value)) if name.endswith("status") else ""
            cells.append(f"[{style}]{_cell(value)}[/]" if style else _cell(value))
        table.add_row(*cells)
    console.print(table)


def format_result(result: Ok[Any] | Fail, *, json_output: bool = False) -> str:
    """Format a Result for display.

    Args:
        result: The service result to format.
        json_output: If True, return JSON; otherwise return human-readable text.
    """
    if json_output:
        return result.model_dump_json(indent=2)

    console = create_console()
    if result.ok:
        console.print(f"[resto.ok]OK:[/] [resto.op]{result.op}[/]")
        data = _plain(result.data)
        if isinstance(data, dict):
            _render_mapping(console, data)
        elif isinstance(data, list):
            _render_rows(console, data)
        elif data is not None:
            console.print(f"  {escape(str(data))}")
    else:
        error = result.error
        console.print(
            f"[resto.error]ERROR:[/] [resto.op]{result.op}[/] "
            f"[resto.key]({error.code})[/] {escape(error.message)}"
        )
    return get_output(console).rstrip("\n")
