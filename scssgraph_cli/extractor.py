"""Variable definition extraction from raw SCSS text.

The extractor is a regex-driven scanner rather than a grammar: declarations
are found on a structural skeleton of the text (comments, strings and
interpolations blanked out) while values are read from the comment-free
text, so a ``;`` inside ``url("data:...;base64,...")`` does not end a value.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import Dict, List, Optional, Tuple

from .errors import ScssParseError
from .lexer import IDENTIFIER, find_references, line_number_at, mask_comments, mask_literals
from .models import ScssImportInfo, VariableDefinition, VariableScope

logger = logging.getLogger(__name__)

# A declaration starts a statement: beginning of a line or right after ; { }
_DECLARATION_RE = re.compile(r"(?:^|(?<=[;{}]))\s*\$(" + IDENTIFIER + r")\s*:", re.MULTILINE)
_RUNAWAY_RE = re.compile(r"\s*\$" + IDENTIFIER + r"\s*:")
_BLOCK_KEYWORD_RE = re.compile(r"@(?:mixin|function)\b")
_FLAG_RE = re.compile(r"\s*!(default|global)\b", re.IGNORECASE)

_IMPORT_RE = re.compile(r"@(import|use|forward)\b([^;{}]*);")
_QUOTED_RE = re.compile(r"""(["'])(.+?)\1""")
_SHOW_RE = re.compile(r"\bshow\s+(.+)$", re.DOTALL)
_EXTERNAL_PREFIXES = ("sass:", "http://", "https://", "//", "url(")


class _NestingTracker:
    """Walks the skeleton forward and reports the nesting at an offset.

    Offsets must be requested in increasing order; each character of the
    skeleton is visited once.
    """

    def __init__(self, skeleton: str):
        self.skeleton = skeleton
        self.pos = 0
        self.braces = 0
        self.parens = 0
        self.pending_block = False

    def advance(self, offset: int) -> None:
        text = self.skeleton
        for i in range(self.pos, offset):
            ch = text[i]
            if ch == "{":
                self.braces += 1
                self.parens = 0
                self.pending_block = False
            elif ch == "}":
                self.braces = max(0, self.braces - 1)
                self.parens = 0
                self.pending_block = False
            elif ch == ";":
                self.parens = 0
                self.pending_block = False
            elif ch == "(":
                self.parens += 1
            elif ch == ")":
                self.parens = max(0, self.parens - 1)
            elif ch == "@" and _BLOCK_KEYWORD_RE.match(text, i):
                self.pending_block = True
        self.pos = max(self.pos, offset)

    def scope(self) -> VariableScope:
        if self.braces > 0:
            return "local"
        # an @mixin/@function header whose block has not opened yet
        if self.pending_block:
            return "mixin"
        return "global"


def _statement_end(skeleton: str, start: int) -> Optional[int]:
    """Index of the character terminating the value that begins at *start*.

    Returns None for an unterminated declaration: a block opens, the text
    ends, or another declaration starts on a new line before any terminator.
    """
    parens = 0
    for i in range(start, len(skeleton)):
        ch = skeleton[i]
        if ch == ";" or ch == "}":
            return i
        if ch == "{":
            return None
        if ch == "(":
            parens += 1
        elif ch == ")":
            parens = max(0, parens - 1)
        elif ch == "\n" and parens == 0 and _RUNAWAY_RE.match(skeleton, i + 1):
            return None
    return None


def _split_flags(raw: str) -> Tuple[str, bool, bool]:
    flags = {flag.lower() for flag in _FLAG_RE.findall(raw)}
    value = _FLAG_RE.sub("", raw).strip()
    return value, "default" in flags, "global" in flags


class VariableExtractor:
    """Extracts ``$variable`` declarations from one stylesheet."""

    def extract(
        self,
        content: str,
        file_path: str,
    ) -> Tuple[Dict[str, VariableDefinition], List[str]]:
        """Scan *content* for variable declarations.

        Args:
            content: Raw SCSS text
            file_path: Label used for provenance and diagnostics only

        Returns:
            Tuple of (definitions by name, diagnostics for skipped declarations)

        Raises:
            ScssParseError: If *content* is not a string
        """
        if not isinstance(content, str):
            raise ScssParseError(
                f"Expected stylesheet text, got {type(content).__name__}",
                file_path=file_path,
            )

        code = mask_comments(content)
        skeleton = mask_literals(code)
        tracker = _NestingTracker(skeleton)

        variables: Dict[str, VariableDefinition] = {}
        errors: List[str] = []
        consumed = 0

        for match in _DECLARATION_RE.finditer(skeleton):
            name = match.group(1)
            offset = match.start(1) - 1
            if offset < consumed:
                continue

            tracker.advance(offset)
            if tracker.parens > 0:
                # keyword argument, e.g. @include button($size: 2px)
                continue

            line_number = line_number_at(content, offset)
            end = _statement_end(skeleton, match.end())
            if end is None:
                errors.append(f"{file_path}:{line_number}: unterminated declaration of ${name}")
                continue
            consumed = end

            value, is_default, is_global = _split_flags(code[match.end():end])
            if not value:
                errors.append(f"{file_path}:{line_number}: empty value for ${name}")
                continue

            variables[name] = VariableDefinition(
                name=name,
                value=value,
                file_path=file_path,
                line_number=line_number,
                scope=tracker.scope(),
                is_default=is_default,
                is_global=is_global,
                dependencies=find_references(value),
            )

        if errors:
            logger.debug("Skipped %d malformed declaration(s) in %s", len(errors), file_path)
        return variables, errors


def _is_external(path: str) -> bool:
    return path.startswith(_EXTERNAL_PREFIXES) or path.endswith(".css")


def _is_partial(path: str) -> bool:
    base = posixpath.basename(path)
    return base.startswith("_") or "." not in base


def extract_imports(content: str) -> List[ScssImportInfo]:
    """Find ``@import``, ``@use`` and ``@forward`` targets in *content*.

    Built-in modules (``sass:math``), URLs and plain ``.css`` imports are
    skipped because they never contribute variables. A ``@forward ... show``
    clause limits the imported items to the listed variables.
    """
    if not isinstance(content, str):
        raise ScssParseError(f"Expected stylesheet text, got {type(content).__name__}")

    code = mask_comments(content)
    imports: List[ScssImportInfo] = []
    for match in _IMPORT_RE.finditer(code):
        rule, body = match.group(1), match.group(2)
        line_number = line_number_at(code, match.start())

        items: Optional[List[str]] = None
        show = _SHOW_RE.search(body) if rule == "forward" else None
        if show:
            items = [
                item.strip()[1:]
                for item in show.group(1).split(",")
                if item.strip().startswith("$")
            ]

        for quoted in _QUOTED_RE.finditer(body):
            path = quoted.group(2).strip()
            if not path or _is_external(path):
                continue
            imports.append(
                ScssImportInfo(
                    path=path,
                    line_number=line_number,
                    is_partial=_is_partial(path),
                    imported_items=items,
                )
            )
    return imports
