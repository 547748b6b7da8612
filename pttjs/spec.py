"""
PTTJS Format Specification v1.0
================================

Layout:
    |PTTJS 1.0|                  <- Version line (optional on read, always written)
    |(@id|Page name){            <- Page start (header part optional: "|{" is valid)
    |H>Name|>Age<|               <- Cell line: one or more "|[H][(meta)]>value" groups, closed by "<|"
    |([0|1]2|1|@c1)>Merged<|     <- meta = [x|y] explicit index, colSpan|rowSpan, @id
    }|                           <- Page end
    >>>SCRIPT                    <- Script section start
    (@id,0|0,2:2|3)=>type(text)  <- Typing    (range address, "=>")
    (1|2)=SUM(0|0,0|1)           <- Expression (single cell, "=", cell-typed arguments)
    (0|0)<=style(bold)           <- Style     (range address, "<=")
    <<<SCRIPT                    <- Script section end (optional: runs to end of text)

Design Decisions:
    - Every structural line starts with "|" (or ">>>"/"<<<" for scripts) so the
      scanner can reject most lines with a prefix/suffix check before any regex
    - No pages at all means one implicit page (@page1, "Page 1")
    - Reserved characters inside values are percent-encoded (see ESCAPE_MAP);
      a value that already holds one of these tokens reads back decoded
    - Script entries are stored parsed, never evaluated

Priority: Plain text > Streaming-friendly line scan > Compactness
"""

# Version line - first line of every serialized document
MAGIC = "|PTTJS"
FORMAT_VERSION = "1.0"
VERSION_LINE = f"{MAGIC} {FORMAT_VERSION}|"

# Page boundaries
PAGE_START_PREFIX = "|"
PAGE_START_SUFFIX = "{"
PAGE_END_PREFIX = "}"
PAGE_END_MARKER = "}|"

# Cell lines
CELL_LINE_START = "|"
CELL_LINE_END = "<|"
HEADER_FLAG = "H"

# Script section
SCRIPT_START = ">>>SCRIPT"
SCRIPT_END = "<<<SCRIPT"

# Script entry kinds -> terminating operator
SCRIPT_OPERATORS = {
    "typings": "=>",
    "expressions": "=",
    "styles": "<=",
}

# Reserved character -> wire token
ESCAPE_MAP = {
    "\n": "%5Cn",
    "|": "%7C",
    ">": "%3E",
    "<": "%3C",
    "{": "%7B",
    "}": "%7D",
}

# Defaults for pages without a header
DEFAULT_PAGE_ID = "@page{n}"
DEFAULT_PAGE_TITLE = "Page {n}"

# Lines per batch in cooperative mode (yield to the event loop between batches)
DEFAULT_BATCH_SIZE = 50_000
