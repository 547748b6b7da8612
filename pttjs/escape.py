"""
PTTJS Escaper - reserved character encoding for cell values.

The six reserved characters (newline, |, >, <, {, }) are swapped for fixed
percent tokens in a single left-to-right pass. The transform is not a true
bijection: text that already contains one of the tokens (e.g. "%7C") reads
back as the decoded character.
"""

from __future__ import annotations

import re
from typing import Any

from pttjs.spec import ESCAPE_MAP

UNESCAPE_MAP = {token: char for char, token in ESCAPE_MAP.items()}

_ESCAPE_RE = re.compile("|".join(re.escape(char) for char in ESCAPE_MAP))
_UNESCAPE_RE = re.compile("|".join(re.escape(token) for token in UNESCAPE_MAP))


def escape_value(value: Any) -> str:
    """Encode reserved characters. Non-string input is converted with str() first."""
    if not isinstance(value, str):
        value = str(value)
    return _ESCAPE_RE.sub(lambda m: ESCAPE_MAP[m.group(0)], value)


def unescape_value(value: Any) -> str:
    """Decode percent tokens back to their reserved characters."""
    if not isinstance(value, str):
        value = str(value)
    return _UNESCAPE_RE.sub(lambda m: UNESCAPE_MAP[m.group(0)], value)
