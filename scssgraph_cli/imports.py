"""Pluggable resolution of ``@import`` / ``@use`` targets to variable definitions."""

from __future__ import annotations

import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from .errors import ImportResolutionError
from .extractor import VariableExtractor
from .models import VariableDefinition

logger = logging.getLogger(__name__)


# ===================================================================
# Abstract resolver interface
# ===================================================================

class ImportResolver(ABC):
    """Turns an import path into the variables that file defines."""

    @abstractmethod
    def resolve(self, path: str) -> Dict[str, VariableDefinition]:
        """Return the variables defined by the stylesheet behind *path*.

        Raises:
            ImportResolutionError: If the import cannot be resolved
        """
        ...


class NullImportResolver(ImportResolver):
    """Default resolver: every import contributes no variables."""

    def resolve(self, path: str) -> Dict[str, VariableDefinition]:
        return {}


# ===================================================================
# File-system resolver
# ===================================================================

class FileSystemImportResolver(ImportResolver):
    """Resolves imports against a list of load paths, Sass-style.

    For ``@import "base/colors"`` the candidates under each load path are
    ``base/_colors.scss``, ``base/colors.scss``, ``base/colors/_index.scss``
    and ``base/colors/index.scss``, tried in that order.
    """

    def __init__(
        self,
        load_paths: Sequence[Path],
        extractor: Optional[VariableExtractor] = None,
    ) -> None:
        self.load_paths = [Path(p) for p in load_paths]
        self.extractor = extractor or VariableExtractor()

    @staticmethod
    def candidates(path: str) -> List[str]:
        directory, base = posixpath.split(path)
        if base.endswith(".scss"):
            base = base[:-5]
        if base.startswith("_"):
            base = base[1:]
        return [
            posixpath.join(directory, f"_{base}.scss"),
            posixpath.join(directory, f"{base}.scss"),
            posixpath.join(directory, base, "_index.scss"),
            posixpath.join(directory, base, "index.scss"),
        ]

    def find(self, path: str) -> Optional[Path]:
        for root in self.load_paths:
            for candidate in self.candidates(path):
                file_path = root / candidate
                if file_path.is_file():
                    return file_path
        return None

    def resolve(self, path: str) -> Dict[str, VariableDefinition]:
        file_path = self.find(path)
        if file_path is None:
            searched = ", ".join(str(p) for p in self.load_paths) or "<no load paths>"
            raise ImportResolutionError(path, f"Could not find '{path}' in {searched}")

        logger.debug("Resolved import '%s' to %s", path, file_path)
        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ImportResolutionError(path, f"Could not read {file_path}: {exc}") from exc

        variables, errors = self.extractor.extract(content, str(file_path))
        for error in errors:
            logger.debug("%s", error)
        return variables
