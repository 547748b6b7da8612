"""
PTTJS Cell-Line Parser - one cell line in, a row of CellItems out.

    |H([1|2]2|1|@c1)>Title|>Second<|
     ^ ^^^^^^^^^^^^^^      ^
     | metadata            marker of the second cell (no metadata)
     header flag

Values are the text between consecutive markers (the last one runs to "<|")
and are unescaped on the way out.
"""

from __future__ import annotations

import re

from pttjs.document import CellItem
from pttjs.escape import unescape_value
from pttjs.schedule import Steps, batches
from pttjs.spec import CELL_LINE_END

MARKER_RE = re.compile(r"\|(H)?(\((\[(\d+)\|(\d+)\])?(\d+\|\d+)?(\|)?(@\w+)?\))?>")


def _cell_from_marker(match: re.Match[str], default_index: int) -> CellItem:
    header, _, _, index_x, _, scale, _, cell_id = match.groups()
    cell = CellItem(index=default_index)
    if header:
        cell.is_header = True
    if index_x is not None:
        cell.index = int(index_x)
    if scale is not None:
        col_span, row_span = scale.split("|")
        cell.scale = (int(col_span), int(row_span))
    if cell_id is not None:
        cell.id = cell_id
    return cell


def get_cell_meta(marker: str, default_index: int) -> CellItem:
    """
    Decode a single marker such as "|H([1|2]2|1|@c1)>" into a CellItem with an
    empty value. Returns a plain cell at `default_index` if the marker is malformed.
    """
    match = MARKER_RE.fullmatch(marker)
    if match is None:
        return CellItem(index=default_index)
    return _cell_from_marker(match, default_index)


def find_cells_in_line(line: str) -> list[CellItem]:
    """Parse a cell line (already validated by the scanner) into its cells."""
    body = line[:-len(CELL_LINE_END)] if line.endswith(CELL_LINE_END) else line
    markers = list(MARKER_RE.finditer(body))
    cells: list[CellItem] = []
    for i, match in enumerate(markers):
        cell = _cell_from_marker(match, i)
        stop = markers[i + 1].start() if i + 1 < len(markers) else len(body)
        cell.value = unescape_value(body[match.end():stop])
        cells.append(cell)
    return cells


def parse_rows(lines: list[str], batch_size: int | None = None) -> Steps[list[list[CellItem]]]:
    """Parse cell lines into rows, dropping lines that hold no cells."""
    rows: list[list[CellItem]] = []
    for start, end in batches(len(lines), batch_size):
        yield
        for i in range(start, end):
            row = find_cells_in_line(lines[i])
            if row:
                rows.append(row)
    return rows
