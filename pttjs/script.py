"""
PTTJS Script Classifier - sort script-section lines into typings, expressions and styles.

Each line is matched against three prefix patterns in a fixed order (typings,
expressions, styles); the first match wins. The matched prefix is the address,
the rest of the line is the function call. Lines that match nothing are
ignored; lines that match but fail to parse are logged and skipped.
"""

from __future__ import annotations

import logging
import re
from typing import NamedTuple

from pttjs.document import ScriptEntry
from pttjs.grammar import PTTJSSyntaxError, parse_address_string, parse_function_call

logger = logging.getLogger(__name__)

_RANGE = r"\((@[\w\s]+,)?(\d+(?::\d+)?\|\d+(?::\d+)?)(,\d+(?::\d+)?\|\d+(?::\d+)?)?\)"

TYPINGS_RE = re.compile(rf"^{_RANGE}=>")
EXPRESSIONS_RE = re.compile(r"^\((@\w+\|)?\d+\|\d+\)=")
STYLES_RE = re.compile(rf"^{_RANGE}<=")


class ScriptSections(NamedTuple):
    typings: list[ScriptEntry]
    expressions: list[ScriptEntry]
    styles: list[ScriptEntry]


# (kind, prefix pattern, parse non-call arguments as cell addresses)
CLASSIFIERS = (
    ("typings", TYPINGS_RE, False),
    ("expressions", EXPRESSIONS_RE, True),
    ("styles", STYLES_RE, False),
)


def match_script_line(line: str) -> tuple[str, re.Match[str], bool] | None:
    """First classifier whose prefix matches: (kind, match, cell-typed arguments)."""
    for kind, pattern, cells in CLASSIFIERS:
        match = pattern.match(line)
        if match is not None:
            return kind, match, cells
    return None


def build_entry(line: str, match: re.Match[str], cells: bool) -> ScriptEntry:
    """Parse the matched prefix as the address and the rest as the call. Raises PTTJSSyntaxError."""
    address = parse_address_string(match.group(0))
    call = parse_function_call(line[match.end():].strip(), cells)
    return ScriptEntry(address, call)


def classify_script_lines(lines: list[str]) -> ScriptSections:
    """Route every script line into its collection, preserving line order."""
    sections = ScriptSections([], [], [])
    for raw in lines:
        line = raw.strip()
        matched = match_script_line(line)
        if matched is None:
            continue
        kind, match, cells = matched
        try:
            entry = build_entry(line, match, cells)
        except PTTJSSyntaxError as e:
            logger.error(
                "Failed to parse %s line %r: %s (address: %r, call: %r)",
                kind, raw, e, match.group(0), line[match.end():].strip(),
            )
            continue
        getattr(sections, kind).append(entry)
    return sections
