"""
PTTJS Structural Scanner - find page boundaries, cell lines and the script section.

Speed features:
  - Literal prefix/suffix check before any regex (most lines are rejected there)
  - Batched scans that yield between batches (see pttjs.schedule)
  - Page-end scan stops at the first hit
"""

from __future__ import annotations

import re

from pttjs.schedule import Steps, batches
from pttjs.spec import (
    CELL_LINE_END,
    CELL_LINE_START,
    PAGE_END_MARKER,
    PAGE_END_PREFIX,
    PAGE_START_PREFIX,
    PAGE_START_SUFFIX,
    SCRIPT_END,
    SCRIPT_START,
)

PAGE_START_RE = re.compile(r"^\|(\((@\w+|[^|(){}\\]+|@\w+\|[^|(){}\\]+)?\))?\{$")
PAGE_END_RE = re.compile(r"\}\|$")
CELL_LINE_RE = re.compile(
    r"^\|(H)?(\((\[(\d+)\|(\d+)\])?(\d+\|\d+)?(\|)?(@\w+)?\))?>(.*)>?<\|$"
)
PAGE_META_RE = re.compile(r"\|\(?([^(){}]*)\)?\{")


def find_matching_indices(
    lines: list[str],
    pattern: re.Pattern[str],
    line_start: str = "",
    line_end: str = "",
    only_first: bool = False,
    batch_size: int | None = None,
) -> Steps[list[int]]:
    """Indices of lines that pass the literal checks and match `pattern`."""
    indices: list[int] = []
    for start, end in batches(len(lines), batch_size):
        yield
        for i in range(start, end):
            line = lines[i]
            if line_start and not line.startswith(line_start):
                continue
            if line_end and not line.endswith(line_end):
                continue
            if pattern.search(line):
                indices.append(i)
                if only_first:
                    return indices
    return indices


def find_page_starts(lines: list[str], batch_size: int | None = None) -> Steps[list[int]]:
    return find_matching_indices(
        lines, PAGE_START_RE, PAGE_START_PREFIX, PAGE_START_SUFFIX, batch_size=batch_size
    )


def find_page_ends(lines: list[str], batch_size: int | None = None) -> Steps[list[int]]:
    """Only the nearest page end is needed, so the scan stops at the first one."""
    return find_matching_indices(
        lines, PAGE_END_RE, PAGE_END_PREFIX, PAGE_END_MARKER, only_first=True, batch_size=batch_size
    )


def find_cell_lines(lines: list[str], batch_size: int | None = None) -> Steps[list[int]]:
    return find_matching_indices(
        lines, CELL_LINE_RE, CELL_LINE_START, CELL_LINE_END, batch_size=batch_size
    )


def find_script_lines(lines: list[str]) -> tuple[int, list[str]] | None:
    """
    Locate the script section.

    Returns (index of the >>>SCRIPT line, lines strictly inside the section), or
    None when there is no section. A missing <<<SCRIPT runs to the end.
    """
    start: int | None = None
    for i, line in enumerate(lines):
        if start is None:
            if line.startswith(SCRIPT_START):
                start = i
        elif line.startswith(SCRIPT_END):
            return start, lines[start + 1:i]
    if start is None:
        return None
    return start, lines[start + 1:]


def get_page_meta(line: str) -> tuple[str, str]:
    """
    Extract (id, name) from a page-start line. Missing parts are "".

        "|(@sales|Sales Q1){"  -> ("@sales", "Sales Q1")
        "|(Sales Q1){"         -> ("", "Sales Q1")
        "|(@sales){"           -> ("@sales", "")
    """
    match = PAGE_META_RE.search(line)
    if not match or not match.group(1):
        return "", ""
    parts = match.group(1).split("|")
    if len(parts) > 1:
        if parts[0].startswith("@"):
            return parts[0], parts[1]
        return "", parts[0]
    if parts[0].startswith("@"):
        return parts[0], ""
    return "", parts[0]


def page_body(lines: list[str], start: int, stop: int, batch_size: int | None = None) -> Steps[list[str]]:
    """Lines after the page-start at `start`, up to the nearest page end or `stop`."""
    content = lines[start + 1:stop]
    ends = yield from find_page_ends(content, batch_size)
    if ends:
        content = content[:ends[0]]
    return content
