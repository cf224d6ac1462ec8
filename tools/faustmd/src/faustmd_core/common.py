from __future__ import annotations

import difflib
import sys
from pathlib import Path
from typing import TextIO


class FaustMdError(Exception):
    pass


class WorkspaceError(FaustMdError):
    pass


class CompilerError(FaustMdError):
    pass


class ReportError(FaustMdError):
    pass


class ExtractionError(FaustMdError):
    pass


class ScrapeError(FaustMdError):
    pass


class OutputError(FaustMdError):
    pass


_UNESCAPE_TABLE = {
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
}

_ESCAPE_TABLE = {value: "\\" + key for key, value in _UNESCAPE_TABLE.items()}
_ESCAPE_TABLE['"'] = '\\"'
_ESCAPE_TABLE["\\"] = "\\\\"


def unescape_c_string(literal: str) -> str | None:
    """Decode a double-quoted C string literal.

    Returns None when the literal is malformed (missing quotes or a trailing
    backslash with nothing after it).
    """
    n = len(literal)
    if n < 2 or literal[0] != '"' or literal[-1] != '"':
        return None

    out: list[str] = []
    i = 1
    while i < n - 1:
        ch = literal[i]
        if ch != "\\":
            out.append(ch)
        else:
            i += 1
            if i == n - 1:
                return None
            escaped = literal[i]
            out.append(_UNESCAPE_TABLE.get(escaped, escaped))
        i += 1
    return "".join(out)


def escape_c_string(text: str) -> str:
    return "".join(_ESCAPE_TABLE.get(ch, ch) for ch in text)


def c_string_literal(text: str) -> str:
    # "\0" followed by an octal digit would be read back as a longer octal
    # escape, so the literal is split there and concatenated by the compiler.
    parts: list[str] = []
    for index, ch in enumerate(text):
        parts.append(_ESCAPE_TABLE.get(ch, ch))
        if ch == "\0" and index + 1 < len(text) and text[index + 1] in "01234567":
            parts.append('" u8"')
    return 'u8"' + "".join(parts) + '"'


def mangle_identifier(name: str) -> str:
    chars: list[str] = []
    for index, ch in enumerate(name):
        is_alpha = ("a" <= ch <= "z") or ("A" <= ch <= "Z")
        is_digit = "0" <= ch <= "9"
        if not is_alpha and (not is_digit or index == 0):
            ch = "_"
        chars.append(ch)
    return "".join(chars)


def is_decimal_integer(text: str) -> bool:
    digits = text[1:] if text.startswith("-") else text
    if not digits:
        return False
    return all("0" <= ch <= "9" for ch in digits)


def write_if_changed(path: Path, content: str, check: bool, stream: TextIO | None = None) -> int:
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except (OSError, UnicodeDecodeError) as exc:
        raise OutputError(f"Unable to read existing output '{path}': {exc}") from exc
    if existing == content:
        return 0
    if check:
        diff = difflib.unified_diff(
            existing.splitlines(),
            content.splitlines(),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
            lineterm="",
        )
        print("\n".join(diff), file=stream or sys.stdout)
        return 1
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise OutputError(f"Unable to write output '{path}': {exc}") from exc
    return 0
