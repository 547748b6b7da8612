"""
PTTJS Grammar - cell addresses, script addresses and function calls.

    cell address     x|y   page|x|y   x:x|y   (":" marks "to the end" on that axis)
    script address   (cell)=>   (@page,cell,cell)<=   (page|x|y)=
    function call    NAME(arg, NAME(arg, ...), ...)

Function-call arguments have no quoting: each argument is tried as a nested call
first and, if that fails, kept as a literal (or parsed as a cell address when
the caller asks for cell-typed arguments).
"""

from __future__ import annotations

from pttjs.document import Argument, CellAddress, FunctionCall, ScriptAddress


class PTTJSSyntaxError(ValueError):
    """Malformed script text. `text` is the offending input."""

    def __init__(self, message: str, text: str) -> None:
        super().__init__(f"{message}: {text!r}")
        self.text = text


class FunctionCallError(PTTJSSyntaxError):
    """Function-call text that is not NAME(ARGS) with balanced parentheses."""


class AddressError(PTTJSSyntaxError):
    """Script address without brackets or with an unknown terminator."""


# "<=" ends in "=", so the one-character terminator is tested last
ADDRESS_TERMINATORS = ("=>", "<=", "=")


# =============================================================================
# Cell addresses
# =============================================================================

def _split_axis(part: str) -> tuple[str | None, bool | None]:
    value, colon, _ = part.partition(":")
    return (value or None), (True if colon else None)


def parse_cell_string(text: str) -> CellAddress:
    """
    Parse "x|y" or "page|x|y". Any other shape (including "") is fully unset.

        "2:2|3"      -> x="2", y="3", x_to_end=True
        "@p|0|1"     -> page="@p", x="0", y="1"
    """
    parts = text.split("|")
    if len(parts) == 3:
        page, x_part, y_part = parts
    elif len(parts) == 2:
        page = None
        x_part, y_part = parts
    else:
        return CellAddress()

    x, x_to_end = _split_axis(x_part)
    y, y_to_end = _split_axis(y_part)
    return CellAddress(page=page or None, x=x, y=y, x_to_end=x_to_end, y_to_end=y_to_end)


# =============================================================================
# Script addresses
# =============================================================================

def parse_address_string(text: str) -> ScriptAddress:
    """
    Parse a matched address prefix such as "(@Sheet1,0|0,2:2|3)=>".

    Raises AddressError for an unknown terminator or missing brackets.
    """
    for terminator in ADDRESS_TERMINATORS:
        if text.endswith(terminator):
            break
    else:
        raise AddressError("Unknown address terminator", text)

    body = text[:-len(terminator)]
    if len(body) < 2 or not body.startswith("(") or not body.endswith(")"):
        raise AddressError("Address is not wrapped in brackets", text)
    content = body[1:-1]

    parts = [part.strip() for part in content.split(",")]
    page = None
    if parts[0].startswith("@") and "|" not in parts[0] and ":" not in parts[0]:
        page = parts.pop(0)

    cell_start = None
    cell_end = None
    if parts and parts[0]:
        cell_start = parse_cell_string(parts[0])
    elif content == "":
        cell_start = CellAddress()

    if len(parts) > 1:
        cell_end = parse_cell_string(parts[1])

    return ScriptAddress(page=page, cell_start=cell_start, cell_end=cell_end)


# =============================================================================
# Function calls
# =============================================================================

def _check_balance(text: str, open_index: int) -> None:
    depth = 0
    last = len(text) - 1
    for i in range(open_index, len(text)):
        char = text[i]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        if depth < 0:
            raise FunctionCallError("Unbalanced parentheses (too many closing)", text)
        if depth == 0 and i < last:
            raise FunctionCallError("Premature closing parenthesis or trailing characters", text)
    if depth != 0:
        raise FunctionCallError("Unbalanced parentheses (not all closed)", text)


def split_arguments(args: str) -> list[str]:
    """Split on commas that are not inside nested parentheses."""
    params: list[str] = []
    depth = 0
    start = 0
    for i, char in enumerate(args):
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth < 0:
                raise FunctionCallError("Unbalanced parentheses in arguments", args)
        elif char == "," and depth == 0:
            params.append(args[start:i])
            start = i + 1
    if depth != 0:
        raise FunctionCallError("Unbalanced parentheses at end of arguments", args)
    params.append(args[start:])
    return params


def _parse_argument(text: str, cells: bool) -> Argument:
    if text == "":
        return CellAddress() if cells else ""
    try:
        return parse_function_call(text, cells)
    except FunctionCallError:
        return parse_cell_string(text) if cells else text


def parse_function_call(text: str, cells: bool = False) -> FunctionCall:
    """
    Parse "NAME(ARGS)" into a FunctionCall tree.

    With `cells=True` (expressions), non-call arguments become CellAddress
    values instead of literal strings. Raises FunctionCallError.
    """
    stripped = text.strip()
    open_index = stripped.find("(")
    if open_index == -1 or not stripped.endswith(")"):
        raise FunctionCallError('Expected "NAME(...)"', text)

    name = stripped[:open_index]
    if not name:
        raise FunctionCallError("Missing function name", text)

    _check_balance(stripped, open_index)

    args = stripped[open_index + 1:-1]
    call = FunctionCall(name=name)
    if not args:
        return call
    for param in split_arguments(args):
        call.args.append(_parse_argument(param.strip(), cells))
    return call
