"""
PTTJS Reader - turn PTTJS text into a Store.

Two entry points, same result:
  - PTTJSReader.parse(text)       coroutine; scans in batches and yields to the
                                  event loop between them, pages parsed concurrently
  - PTTJSReader.parse_sync(text)  plain call; no batching, no event loop

Malformed structure never raises: unrecognised lines are skipped, and bad
script lines are logged and dropped (see pttjs.script).
"""

from __future__ import annotations

import asyncio
import logging

from pttjs.cells import parse_rows
from pttjs.document import CellItem, PageItem, Store
from pttjs.schedule import Steps, run_cooperative, run_direct
from pttjs.scanner import find_cell_lines, find_page_starts, find_script_lines, get_page_meta, page_body
from pttjs.script import ScriptSections, classify_script_lines
from pttjs.spec import DEFAULT_BATCH_SIZE, DEFAULT_PAGE_ID, DEFAULT_PAGE_TITLE, MAGIC

logger = logging.getLogger(__name__)


class PTTJSReader:
    """
    PTTJS text reader.

    Usage:
        store = await PTTJSReader.parse(text)
        store = PTTJSReader.parse_sync(text)

        # Smaller batches hand control back to the event loop more often
        store = await PTTJSReader.parse(text, batch_size=1_000)
    """

    @staticmethod
    def is_pttjs(text: str) -> bool:
        """Fast check for the version line."""
        return text.startswith(MAGIC)

    @classmethod
    async def parse(cls, text: str, *, batch_size: int = DEFAULT_BATCH_SIZE) -> Store:
        """Parse text into a Store, cooperatively."""
        lines, scripts = cls._split(text)
        starts = await run_cooperative(find_page_starts(lines, batch_size))
        if not starts:
            pages = [await run_cooperative(cls._implicit_page(lines, batch_size))]
        else:
            pages = await asyncio.gather(*(
                run_cooperative(cls._page(lines, starts, n, batch_size))
                for n in range(len(starts))
            ))
        return cls._assemble(pages, scripts, batch_size)

    @classmethod
    def parse_sync(cls, text: str) -> Store:
        """Parse text into a Store without yielding."""
        lines, scripts = cls._split(text)
        starts = run_direct(find_page_starts(lines))
        if not starts:
            pages = [run_direct(cls._implicit_page(lines))]
        else:
            pages = [run_direct(cls._page(lines, starts, n)) for n in range(len(starts))]
        return cls._assemble(pages, scripts)

    # -------------------------------------------------------------------------
    # Shared steps
    # -------------------------------------------------------------------------

    @staticmethod
    def _split(text: str) -> tuple[list[str], ScriptSections]:
        """Drop the version line, cut off the script section and classify it."""
        lines = text.split("\n")
        if lines[0].startswith(MAGIC):
            lines = lines[1:]

        script_lines: list[str] = []
        found = find_script_lines(lines)
        if found is not None:
            start, script_lines = found
            lines = lines[:start]
        return lines, classify_script_lines(script_lines)

    @staticmethod
    def _rows(lines: list[str], batch_size: int | None) -> Steps[list[list[CellItem]]]:
        indices = yield from find_cell_lines(lines, batch_size)
        rows = yield from parse_rows([lines[i] for i in indices], batch_size)
        return rows

    @classmethod
    def _implicit_page(cls, lines: list[str], batch_size: int | None = None) -> Steps[tuple[str, PageItem]]:
        rows = yield from cls._rows(lines, batch_size)
        return DEFAULT_PAGE_ID.format(n=1), PageItem(title=DEFAULT_PAGE_TITLE.format(n=1), rows=rows)

    @classmethod
    def _page(
        cls, lines: list[str], starts: list[int], n: int, batch_size: int | None = None
    ) -> Steps[tuple[str, PageItem]]:
        """Parse the n-th page. Reads only its own slice of `lines`."""
        start = starts[n]
        stop = starts[n + 1] if n + 1 < len(starts) else len(lines)
        content = yield from page_body(lines, start, stop, batch_size)
        rows = yield from cls._rows(content, batch_size)

        page_id, title = get_page_meta(lines[start])
        return (
            page_id or DEFAULT_PAGE_ID.format(n=n + 1),
            PageItem(title=title or DEFAULT_PAGE_TITLE.format(n=n + 1), rows=rows),
        )

    @staticmethod
    def _assemble(
        pages: list[tuple[str, PageItem]], scripts: ScriptSections, batch_size: int | None = None
    ) -> Store:
        store = Store(
            typings=scripts.typings,
            expressions=scripts.expressions,
            styles=scripts.styles,
        )
        for page_id, page in pages:
            store.data[page_id] = page
        logger.debug("Parsed %r (batch_size=%s)", store, batch_size)
        return store


async def parse(text: str) -> Store:
    return await PTTJSReader.parse(text)


def parse_sync(text: str) -> Store:
    return PTTJSReader.parse_sync(text)
