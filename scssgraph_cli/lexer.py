"""Low-level text helpers for scanning SCSS without a full grammar.

Both masking passes replace characters with spaces and keep newlines, so
offsets and line numbers computed on the masked text are valid for the
original text as well.
"""

from __future__ import annotations

import re
from typing import List

IDENTIFIER = r"[a-zA-Z_-][a-zA-Z0-9_-]*"
# Greedy, so "$base-size" is one reference and never "$base" + "-size"
REFERENCE_RE = re.compile(r"\$(" + IDENTIFIER + r")")


def _blank(text: str) -> str:
    return "".join("\n" if ch == "\n" else " " for ch in text)


def _string_end(text: str, start: int) -> int:
    """Return the index just past the quoted string opening at *start*."""
    quote = text[start]
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i + 1
        i += 1
    return n


def mask_comments(text: str) -> str:
    """Blank out ``/* */`` and ``//`` comments.

    A ``//`` directly preceded by ``:`` or ``(`` is part of a URL, not a
    comment.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'":
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            out.append(_blank(text[i:end]))
            i = end
        elif text.startswith("//", i) and (i == 0 or text[i - 1] not in ":("):
            end = text.find("\n", i)
            end = n if end == -1 else end
            out.append(_blank(text[i:end]))
            i = end
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _interpolation_end(text: str, start: int) -> int:
    """Return the index just past the ``#{...}`` opening at *start*."""
    depth = 0
    i = start + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch in "\"'":
            i = _string_end(text, i)
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return n


def mask_literals(code: str) -> str:
    """Blank out quoted strings and ``#{}`` interpolations.

    Expects comment-free input (see :func:`mask_comments`). The result keeps
    only the structural characters, so braces, parentheses and semicolons in
    it can be counted directly.
    """
    out: List[str] = []
    i = 0
    n = len(code)
    while i < n:
        ch = code[i]
        if ch in "\"'":
            end = _string_end(code, i)
        elif code.startswith("#{", i):
            end = _interpolation_end(code, i)
        else:
            out.append(ch)
            i += 1
            continue
        out.append(_blank(code[i:end]))
        i = end
    return "".join(out)


def find_references(value: str) -> List[str]:
    """Names referenced with the ``$`` sigil, deduplicated, in order."""
    seen: List[str] = []
    for match in REFERENCE_RE.finditer(value):
        name = match.group(1)
        if name not in seen:
            seen.append(name)
    return seen


def line_number_at(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1
