"""High-level entry points tying extraction, graph, resolution and impact together."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import List, Optional, Set

from .comparator import compare_contexts
from .config_manager import AnalysisSettings
from .errors import CircularDependencyError, ImportResolutionError
from .extractor import VariableExtractor, extract_imports
from .graph import build_dependency_graph, detect_cycles
from .impact import ImpactAnalyzer, PropertyClassifier
from .imports import ImportResolver, NullImportResolver
from .models import (
    ContextComparison,
    PropertyContext,
    ResolvedVariable,
    ScssImportInfo,
    VariableImpactAnalysis,
    VariableResolutionContext,
)
from .resolver import VariableResolver
from .usage import UsageScanner, attach_usages

logger = logging.getLogger(__name__)


class VariableAnalyzer:
    """Builds one :class:`VariableResolutionContext` per analyzed snapshot.

    The analyzer itself holds no per-analysis state: everything, including
    the resolution cache, lives on the returned context. Analyses of
    different files can therefore share one analyzer.
    """

    def __init__(
        self,
        import_resolver: Optional[ImportResolver] = None,
        settings: Optional[AnalysisSettings] = None,
        classifier: Optional[PropertyClassifier] = None,
    ):
        self.import_resolver = import_resolver or NullImportResolver()
        self.settings = settings or AnalysisSettings()
        self.classifier = classifier
        self.extractor = VariableExtractor()

    def analyze_content(
        self,
        content: str,
        file_path: str,
        imports: Optional[List[ScssImportInfo]] = None,
    ) -> VariableResolutionContext:
        """Extract, merge imports, build the dependency graph and validate it.

        Args:
            content: Raw SCSS text
            file_path: Label for provenance and error messages
            imports: Import records supplied by the caller

        Returns:
            A fresh, acyclic VariableResolutionContext

        Raises:
            ScssParseError: If *content* is not text
            CircularDependencyError: If the variables form a cycle
        """
        variables, errors = self.extractor.extract(content, file_path)
        context = VariableResolutionContext(
            file_path=file_path,
            imports=list(imports or []),
            variables=variables,
            errors=errors,
        )

        for import_info in context.imports:
            self._merge_import(context, import_info)

        context.dependencies = build_dependency_graph(context.variables)
        try:
            detect_cycles(context.dependencies)
        except CircularDependencyError as exc:
            exc.file_path = file_path
            raise

        logger.debug(
            "Analyzed %s: %d variables, %d import(s), %d skipped declaration(s)",
            file_path, len(context.variables), len(context.imports), len(errors),
        )
        return context

    def analyze_file(self, path: Path, track_usage: bool = False) -> VariableResolutionContext:
        """Read a stylesheet from disk and analyze it with its own imports.

        With *track_usage*, property declarations in the file are scanned and
        attached to the variables they reference.
        """
        content = path.read_text(encoding="utf-8")
        context = self.analyze_content(content, str(path), imports=extract_imports(content))
        if track_usage:
            attach_usages(context, UsageScanner().scan(content, str(path)))
        return context

    def _merge_import(self, context: VariableResolutionContext, import_info: ScssImportInfo) -> None:
        try:
            imported = self.import_resolver.resolve(import_info.path)
        except Exception as exc:
            # a failed import contributes no variables
            if not isinstance(exc, ImportResolutionError):
                exc = ImportResolutionError(import_info.path, str(exc))
            exc.file_path = context.file_path
            logger.warning("Failed to resolve import: %s", exc)
            return

        wanted = _wanted_items(import_info)
        merged = 0
        for name, definition in imported.items():
            if name in context.variables:
                continue
            if wanted is not None and name not in wanted:
                continue
            context.variables[name] = dataclasses.replace(
                definition,
                scope="imported",
                dependencies=list(definition.dependencies),
                usage=[],
            )
            merged += 1
        logger.debug("Merged %d variable(s) from '%s'", merged, import_info.path)

    # ------------------------------------------------------------------
    # Queries against a built context
    # ------------------------------------------------------------------

    def resolve_variable_with_context(
        self,
        context: VariableResolutionContext,
        name: str,
        property_context: PropertyContext,
    ) -> ResolvedVariable:
        return VariableResolver(context).resolve(name, property_context)

    def analyze_variable_impact(
        self,
        context: VariableResolutionContext,
        name: str,
        new_value: str,
    ) -> VariableImpactAnalysis:
        analyzer = ImpactAnalyzer(context, classifier=self.classifier, settings=self.settings)
        return analyzer.analyze(name, new_value)

    def compare_variable_contexts(
        self,
        before: VariableResolutionContext,
        after: VariableResolutionContext,
    ) -> ContextComparison:
        return compare_contexts(before, after)


def _wanted_items(import_info: ScssImportInfo) -> Optional[Set[str]]:
    if import_info.imported_items is None:
        return None
    return {item.lstrip("$") for item in import_info.imported_items}
