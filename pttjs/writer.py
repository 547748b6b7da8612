"""
PTTJS Writer - render a Store back into PTTJS text.

The output is the structural inverse of pttjs.reader: parsing it gives back an
equal Store, and re-serializing that Store gives the same bytes. As with the
reader there is a cooperative coroutine and a plain twin:

    text = await PTTJSWriter.serialize(store, show_index=True)
    text = PTTJSWriter.serialize_sync(store, show_pages=True)
"""

from __future__ import annotations

import asyncio
import logging

from pttjs.document import (
    CellAddress,
    CellItem,
    FunctionCall,
    PageItem,
    ScriptAddress,
    ScriptEntry,
    Store,
    check_id,
    check_title,
)
from pttjs.escape import escape_value
from pttjs.schedule import Steps, batches, run_cooperative, run_direct
from pttjs.spec import (
    CELL_LINE_END,
    DEFAULT_BATCH_SIZE,
    HEADER_FLAG,
    PAGE_END_MARKER,
    SCRIPT_END,
    SCRIPT_OPERATORS,
    SCRIPT_START,
    VERSION_LINE,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Script entries
# =============================================================================

def _axis(value: str | None, to_end: bool | None) -> str:
    value = value or ""
    return f"{value}:{value}" if to_end else value


def serialize_cell_address(address: CellAddress) -> str:
    page = f"{address.page}|" if address.page else ""
    return f"{page}{_axis(address.x, address.x_to_end)}|{_axis(address.y, address.y_to_end)}"


def serialize_script_address(address: ScriptAddress) -> str:
    parts = []
    if address.page:
        parts.append(address.page)
    if address.cell_start is not None:
        parts.append(serialize_cell_address(address.cell_start))
    elif address.cell_end is not None or not parts:
        parts.append("")
    if address.cell_end is not None:
        parts.append(serialize_cell_address(address.cell_end))
    return ",".join(parts)


def serialize_function_call(call: FunctionCall) -> str:
    args = []
    for arg in call.args:
        if isinstance(arg, FunctionCall):
            args.append(serialize_function_call(arg))
        elif isinstance(arg, CellAddress):
            args.append(serialize_cell_address(arg))
        else:
            args.append(str(arg))
    return f"{call.name}({','.join(args)})"


def serialize_script_entries(entries: list[ScriptEntry], operator: str) -> list[str]:
    return [
        f"({serialize_script_address(address)}){operator}{serialize_function_call(call)}"
        for address, call in entries
    ]


def serialize_scripts(store: Store) -> str:
    """The >>>SCRIPT block, or "" when there are no script entries."""
    lines = []
    for kind, operator in SCRIPT_OPERATORS.items():
        lines.extend(serialize_script_entries(getattr(store, kind), operator))
    if not lines:
        return ""
    return "\n\n" + "\n".join([SCRIPT_START, *lines, SCRIPT_END]) + "\n"


# =============================================================================
# Cells and pages
# =============================================================================

def serialize_cell(cell: CellItem, show_index: bool, row_index: int) -> str:
    """
    Render one cell marker plus its escaped value.

    The metadata block is written only when there is something to put in it:
    `[x|y]` (show_index), `col|row` (scale), and `@id`.
    """
    has_scale = cell.scale is not None and len(cell.scale) == 2
    meta = ""
    if show_index:
        meta += f"[{cell.index}|{row_index}]"
    if has_scale:
        meta += f"{cell.scale[0]}|{cell.scale[1]}"
    if cell.id:
        check_id(cell.id)
        meta += f"|{cell.id}" if show_index or has_scale else cell.id
    header = HEADER_FLAG if cell.is_header else ""
    meta = f"({meta})" if meta else ""
    return f"|{header}{meta}>{escape_value(cell.value)}"


def serialize_rows(
    rows: list[list[CellItem]], show_index: bool, batch_size: int | None = None
) -> Steps[list[str]]:
    lines: list[str] = []
    for start, end in batches(len(rows), batch_size):
        yield
        for i in range(start, end):
            cells = "".join(serialize_cell(cell, show_index, i) for cell in rows[i])
            lines.append(cells + CELL_LINE_END)
    return lines


def serialize_page(
    page_id: str, page: PageItem, show_index: bool, show_page: bool, batch_size: int | None = None
) -> Steps[str]:
    lines = yield from serialize_rows(page.rows, show_index, batch_size)
    block = "\n".join(lines) + "\n"
    if show_page:
        check_id(page_id, "page")
        header = f"{page_id}|{check_title(page.title)}" if page.title else page_id
        block = f"|({header}){{\n{block}{PAGE_END_MARKER}\n"
    return block


# =============================================================================
# Writer
# =============================================================================

class PTTJSWriter:
    """
    Serialize a Store.

    show_index: write the explicit [x|y] index on every cell
    show_pages: write page header/footer even for a single page
                (always written when there is more than one page)

    Raises ValueError for a page id, page title or cell id that the format
    cannot carry. An empty title is written as "|(@id){" and reads back as
    the default "Page <N>".
    """

    @classmethod
    async def serialize(
        cls,
        store: Store,
        show_index: bool = False,
        show_pages: bool = False,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> str:
        show_page = cls._show_page(store, show_pages)
        blocks = await asyncio.gather(*(
            run_cooperative(serialize_page(page_id, page, show_index, show_page, batch_size))
            for page_id, page in store.data.items()
        ))
        return cls._join(store, blocks, batch_size)

    @classmethod
    def serialize_sync(cls, store: Store, show_index: bool = False, show_pages: bool = False) -> str:
        show_page = cls._show_page(store, show_pages)
        blocks = [
            run_direct(serialize_page(page_id, page, show_index, show_page))
            for page_id, page in store.data.items()
        ]
        return cls._join(store, blocks)

    @staticmethod
    def _show_page(store: Store, show_pages: bool) -> bool:
        return bool(show_pages) or len(store.data) > 1

    @staticmethod
    def _join(store: Store, blocks: list[str], batch_size: int | None = None) -> str:
        logger.debug("Serializing %r (batch_size=%s)", store, batch_size)
        return f"{VERSION_LINE}\n" + "\n".join(blocks) + serialize_scripts(store)


async def serialize(store: Store, show_index: bool = False, show_pages: bool = False) -> str:
    return await PTTJSWriter.serialize(store, show_index, show_pages)


def serialize_sync(store: Store, show_index: bool = False, show_pages: bool = False) -> str:
    return PTTJSWriter.serialize_sync(store, show_index, show_pages)
