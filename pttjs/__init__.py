"""
PTTJS - plain-text multi-page tables with a cell scripting section.

    from pttjs import parse_sync, serialize_sync

    store = parse_sync("|PTTJS 1.0|\n|H>Name|H>Age<|\n|>Ann|>41<|\n")
    store.data["@page1"].rows[1][0].value   # "Ann"
    serialize_sync(store, show_pages=True)
"""

from pttjs.document import (
    CellAddress,
    CellItem,
    FunctionCall,
    PageItem,
    ScriptAddress,
    ScriptEntry,
    Store,
)
from pttjs.escape import escape_value, unescape_value
from pttjs.grammar import AddressError, FunctionCallError, PTTJSSyntaxError, parse_function_call
from pttjs.reader import PTTJSReader, parse, parse_sync
from pttjs.spec import FORMAT_VERSION
from pttjs.writer import PTTJSWriter, serialize, serialize_sync

__version__ = "1.0.0"

__all__ = [
    "AddressError",
    "CellAddress",
    "CellItem",
    "FORMAT_VERSION",
    "FunctionCall",
    "FunctionCallError",
    "PTTJSReader",
    "PTTJSSyntaxError",
    "PTTJSWriter",
    "PageItem",
    "ScriptAddress",
    "ScriptEntry",
    "Store",
    "escape_value",
    "parse",
    "parse_function_call",
    "parse_sync",
    "serialize",
    "serialize_sync",
    "unescape_value",
]
