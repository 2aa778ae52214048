"""Recording where variables are consumed by property declarations."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Tuple

from .errors import ScssParseError
from .lexer import find_references, line_number_at, mask_comments, mask_literals
from .models import VariableResolutionContext, VariableUsage

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"[{};]")
_PROPERTY_NAME_RE = re.compile(r"^-?[a-zA-Z][a-zA-Z0-9-]*$")


class UsageScanner:
    """Walks rule blocks and reports ``property: ...$var...`` declarations."""

    def scan(self, content: str, file_path: str) -> List[Tuple[str, VariableUsage]]:
        """Find every property declaration that references a variable.

        Args:
            content: Raw SCSS text
            file_path: Label stored on each usage

        Returns:
            List of (variable name, usage) pairs in source order
        """
        if not isinstance(content, str):
            raise ScssParseError(
                f"Expected stylesheet text, got {type(content).__name__}",
                file_path=file_path,
            )

        code = mask_comments(content)
        skeleton = mask_literals(code)

        found: List[Tuple[str, VariableUsage]] = []
        blocks: List[Tuple[str, str]] = []  # (kind, header)
        start = 0

        for match in _DELIMITER_RE.finditer(skeleton):
            segment = code[start:match.start()]
            statement = segment.strip()
            offset = start + len(segment) - len(segment.lstrip())
            start = match.end()

            if match.group() == "{":
                blocks.append(_open_block(statement))
                continue

            if statement and blocks:
                line_number = line_number_at(content, offset)
                found.extend(self._usages(statement, blocks, file_path, line_number))
            if match.group() == "}" and blocks:
                blocks.pop()

        return found

    def _usages(
        self,
        statement: str,
        blocks: List[Tuple[str, str]],
        file_path: str,
        line_number: int,
    ) -> List[Tuple[str, VariableUsage]]:
        if statement.startswith(("$", "@")) or ":" not in statement:
            return []
        prop, value = statement.split(":", 1)
        prop = prop.strip()
        if not _PROPERTY_NAME_RE.match(prop):
            return []

        refs = find_references(value)
        if not refs:
            return []

        selector = _selector(blocks)
        media = _media_query(blocks)
        rules = sum(1 for kind, _ in blocks if kind == "rule")
        text = f"{prop}: {' '.join(value.split())}"
        return [
            (
                ref,
                VariableUsage(
                    file_path=file_path,
                    line_number=line_number,
                    context=text,
                    selector=selector,
                    property=prop,
                    media_query=media,
                    nesting_level=max(0, rules - 1),
                ),
            )
            for ref in refs
        ]


def _open_block(header: str) -> Tuple[str, str]:
    header = " ".join(header.split())
    if header.startswith("@media"):
        return ("media", header[len("@media"):].strip())
    if header.startswith("@"):
        return ("at-rule", header)
    return ("rule", header)


def _selector(blocks: List[Tuple[str, str]]) -> str:
    selector = ""
    for kind, header in blocks:
        if kind != "rule":
            continue
        if not selector:
            selector = header
        elif "&" in header:
            selector = header.replace("&", selector)
        else:
            selector = f"{selector} {header}"
    return selector


def _media_query(blocks: List[Tuple[str, str]]) -> Optional[str]:
    for kind, header in reversed(blocks):
        if kind == "media":
            return header
    return None


def attach_usages(
    context: VariableResolutionContext,
    usages: Iterable[Tuple[str, VariableUsage]],
) -> int:
    """Append usages to the matching definitions; returns how many attached."""
    attached = 0
    for name, usage in usages:
        definition = context.variables.get(name)
        if definition is None:
            logger.debug("Usage of undefined $%s at %s:%d", name, usage.file_path, usage.line_number)
            continue
        definition.usage.append(usage)
        attached += 1
    return attached
