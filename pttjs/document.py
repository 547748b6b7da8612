"""
PTTJS Document - in-memory model of a parsed table file.

A Store owns everything: pages keyed by page id (insertion ordered), and three
ordered collections of script entries. All types are plain dataclasses, so a
Store can be edited freely between parse and serialize.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple, Union

from pttjs.spec import DEFAULT_PAGE_ID, DEFAULT_PAGE_TITLE


# Page and cell ids are "@" plus word characters; titles may not hold the
# characters that delimit a page header.
ID_RE = re.compile(r"@\w+")
TITLE_RESERVED_RE = re.compile(r"[|(){}\\\n]")


def check_id(value: str, kind: str = "cell") -> str:
    """Return `value` if it can be written as a @id, else raise ValueError."""
    if not isinstance(value, str) or not ID_RE.fullmatch(value):
        raise ValueError(f"Invalid {kind} id: {value!r} (expected @ followed by letters, digits or _)")
    return value


def check_title(value: str) -> str:
    """Return `value` if it can be written in a page header, else raise ValueError."""
    if TITLE_RESERVED_RE.search(value):
        raise ValueError(f"Invalid page title: {value!r} (may not contain | ( ) {{ }} \\ or newlines)")
    return value


# =============================================================================
# Table data
# =============================================================================

@dataclass
class CellItem:
    """One table cell. `index` falls back to the cell's position on its line."""

    is_header: bool | None = None
    index: int = 0
    scale: tuple[int, int] | None = None  # (col_span, row_span)
    id: str | None = None
    value: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "isHeader": self.is_header,
            "index": self.index,
            "scale": list(self.scale) if self.scale is not None else None,
            "id": self.id,
            "value": self.value,
        }


@dataclass
class PageItem:
    """One page: a title and row-major cells."""

    title: str = ""
    rows: list[list[CellItem]] = field(default_factory=list)

    def add_row(self, cells: list[CellItem] | None = None) -> list[CellItem]:
        """Append a row and return it."""
        row = list(cells or [])
        self.rows.append(row)
        return row

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "rows": [[cell.to_dict() for cell in row] for row in self.rows],
        }


# =============================================================================
# Script addressing
# =============================================================================

@dataclass
class CellAddress:
    """
    A cell coordinate inside a script entry.

    `x`/`y` of None means "unspecified". `x_to_end`/`y_to_end` mark an axis that
    runs from the coordinate to the end of the table.
    """

    page: str | None = None
    x: str | None = None
    y: str | None = None
    x_to_end: bool | None = None
    y_to_end: bool | None = None

    def __post_init__(self) -> None:
        if self.x == "":
            self.x = None
        if self.y == "":
            self.y = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "x": self.x,
            "y": self.y,
            "xTE": self.x_to_end,
            "yTE": self.y_to_end,
        }


@dataclass
class ScriptAddress:
    """A single cell (`cell_end` is None) or a rectangular range, optionally page-qualified."""

    page: str | None = None
    cell_start: CellAddress | None = None
    cell_end: CellAddress | None = None

    @property
    def is_range(self) -> bool:
        return self.cell_end is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.page,
            "cellStart": self.cell_start.to_dict() if self.cell_start else None,
            "cellEnd": self.cell_end.to_dict() if self.cell_end else None,
        }


Argument = Union["FunctionCall", CellAddress, str]


@dataclass
class FunctionCall:
    """`name(arg, ...)` where each arg is a nested call, a literal, or a cell address."""

    name: str
    args: list[Argument] = field(default_factory=list)

    def to_list(self) -> list[Any]:
        """Nested list form: ["SUM", ["A", "1", "2"], "3"]."""
        result: list[Any] = [self.name]
        for arg in self.args:
            if isinstance(arg, FunctionCall):
                result.append(arg.to_list())
            elif isinstance(arg, CellAddress):
                result.append(arg.to_dict())
            else:
                result.append(arg)
        return result


class ScriptEntry(NamedTuple):
    address: ScriptAddress
    call: FunctionCall

    def to_list(self) -> list[Any]:
        return [self.address.to_dict(), self.call.to_list()]


# =============================================================================
# Store
# =============================================================================

@dataclass
class Store:
    """Document root: pages plus typings, expressions and styles."""

    data: dict[str, PageItem] = field(default_factory=dict)
    typings: list[ScriptEntry] = field(default_factory=list)
    expressions: list[ScriptEntry] = field(default_factory=list)
    styles: list[ScriptEntry] = field(default_factory=list)

    def add_page(
        self,
        title: str | None = None,
        rows: list[list[CellItem]] | None = None,
        page_id: str | None = None,
    ) -> PageItem:
        """
        Add a page, generating "@page<N>" / "Page <N>" for missing id and title.

        Raises ValueError for an id or title that cannot be written back out.
        """
        n = len(self.data) + 1
        page_id = check_id(page_id, "page") if page_id else DEFAULT_PAGE_ID.format(n=n)
        if title is None:
            title = DEFAULT_PAGE_TITLE.format(n=n)
        check_title(title)
        page = PageItem(title=title, rows=list(rows or []))
        self.data[page_id] = page
        return page

    def get_page(self, page_id: str) -> PageItem | None:
        return self.data.get(page_id)

    @property
    def pages(self) -> list[PageItem]:
        return list(self.data.values())

    @property
    def has_scripts(self) -> bool:
        return bool(self.typings or self.expressions or self.styles)

    def to_dict(self) -> dict[str, Any]:
        """Plain mapping, JSON-serializable."""
        return {
            "data": {page_id: page.to_dict() for page_id, page in self.data.items()},
            "typings": [entry.to_list() for entry in self.typings],
            "expressions": [entry.to_list() for entry in self.expressions],
            "styles": [entry.to_list() for entry in self.styles],
        }

    def __repr__(self) -> str:
        return (
            f"Store(pages={list(self.data.keys())}, typings={len(self.typings)}, "
            f"expressions={len(self.expressions)}, styles={len(self.styles)})"
        )
