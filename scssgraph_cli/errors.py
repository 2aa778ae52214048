"""Error types raised by the variable analysis engine."""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class ScssGraphError(Exception):
    """Base class for all engine errors."""

    def __init__(
        self,
        message: str,
        file_path: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.file_path = file_path
        self.details = details or {}

    def __str__(self) -> str:
        if self.file_path:
            return f"{self.message} [{self.file_path}]"
        return self.message


class ScssParseError(ScssGraphError):
    """Raised when the input is not text at all."""

    pass


class CircularDependencyError(ScssGraphError):
    """Raised when variables reference each other in a loop."""

    def __init__(self, path: List[str], file_path: Optional[str] = None):
        self.path = list(path)
        super().__init__(
            f"Circular dependency detected: {' -> '.join(self.path)}",
            file_path=file_path,
            details={"path": self.path},
        )


class VariableResolutionError(ScssGraphError):
    """Raised when a variable has no definition in the context."""

    def __init__(self, variable_name: str, file_path: Optional[str] = None):
        self.variable_name = variable_name
        super().__init__(
            f"Variable not found: ${variable_name}",
            file_path=file_path,
            details={"variable": variable_name},
        )


class ImportResolutionError(ScssGraphError):
    """Raised by import resolvers; always handled at the merge boundary."""

    def __init__(self, import_path: str, message: Optional[str] = None, file_path: Optional[str] = None):
        self.import_path = import_path
        super().__init__(
            message or f"Could not resolve import '{import_path}'",
            file_path=file_path,
            details={"import": import_path},
        )
