"""End-to-end tests for VariableAnalyzer."""

from pathlib import Path

import pytest

from scssgraph_cli.analyzer import VariableAnalyzer
from scssgraph_cli.errors import CircularDependencyError, ScssParseError
from scssgraph_cli.imports import FileSystemImportResolver


class TestAnalyzeContent:
    """Test building a context from text."""

    def test_mutual_reference_is_rejected(self, analyzer):
        """Test that a two-variable loop fails eagerly."""
        with pytest.raises(CircularDependencyError) as exc_info:
            analyzer.analyze_content("$a: $b; $b: $a;", "loop.scss")

        assert exc_info.value.path == ["a", "b", "a"]
        assert exc_info.value.file_path == "loop.scss"

    def test_context_fields(self, analyzer):
        """Test the shape of a fresh context."""
        context = analyzer.analyze_content("$base: 16px; $large: $base * 1.5;", "a.scss")

        assert context.file_path == "a.scss"
        assert context.num_variables == 2
        assert context.dependencies == {"base": [], "large": ["base"]}
        assert context.imports == []
        assert context.errors == []
        assert context.resolution_cache == {}

    def test_analysis_is_idempotent(self, analyzer):
        """Test that the same text always yields equal contexts."""
        content = "$a: 1px;\n.x { $b: $a !global; }\n$c: $b $a !default;\n"

        first = analyzer.analyze_content(content, "a.scss")
        second = analyzer.analyze_content(content, "a.scss")

        assert first == second
        assert first.variables is not second.variables

    def test_non_text_input(self, analyzer):
        """Test that None is rejected with a parse error."""
        with pytest.raises(ScssParseError):
            analyzer.analyze_content(None, "a.scss")

    def test_malformed_input_is_best_effort(self, analyzer):
        """Test that broken SCSS still yields the parsable declarations."""
        content = "$ok: 1px;\n$broken: 2px\n.a {\n  color: red\n"
        context = analyzer.analyze_content(content, "a.scss")

        assert list(context.variables) == ["ok"]
        assert len(context.errors) == 1

    def test_unknown_reference_is_not_an_edge(self, analyzer):
        """Test that references to undefined names do not fail analysis."""
        context = analyzer.analyze_content("$a: $nowhere;", "a.scss")

        assert context.variables["a"].dependencies == ["nowhere"]
        assert context.dependencies == {"a": []}


class TestAnalyzeFile:
    """Test analysis of stylesheets on disk."""

    def test_theme_with_imports_and_usage(self, styles_path: Path):
        """Test a stylesheet that imports a partial and uses its variables."""
        analyzer = VariableAnalyzer(import_resolver=FileSystemImportResolver([styles_path]))
        context = analyzer.analyze_file(styles_path / "theme.scss", track_usage=True)

        assert [i.path for i in context.imports] == ["partials/colors"]
        assert context.variables["brand"].scope == "imported"
        assert context.dependencies["link-color"] == ["brand"]
        assert len(context.variables["gutter"].usage) == 2
        assert context.variables["brand-dark"].usage[0].selector == ".button:hover"

        analysis = analyzer.analyze_variable_impact(context, "brand", "#ff0000")
        assert analysis.cascading_variables == ["link-color", "brand-dark"]
        assert len(analysis.affected_properties) == 2

    def test_without_usage_tracking(self, styles_path: Path, analyzer):
        """Test that usages are only collected on request."""
        context = analyzer.analyze_file(styles_path / "theme.scss")

        assert context.variables["gutter"].usage == []
        # NullImportResolver: imported names stay unknown
        assert "brand" not in context.variables

    def test_cycle_file(self, styles_path: Path, analyzer):
        """Test that a looping file fails with its path attached."""
        with pytest.raises(CircularDependencyError) as exc_info:
            analyzer.analyze_file(styles_path / "cycle.scss")

        assert exc_info.value.file_path == str(styles_path / "cycle.scss")

    def test_compare_files(self, styles_path: Path, analyzer):
        """Test comparing two versions of a stylesheet."""
        before = analyzer.analyze_file(styles_path / "before.scss")
        after = analyzer.analyze_file(styles_path / "after.scss")

        comparison = analyzer.compare_variable_contexts(before, after)

        assert [d.name for d in comparison.added] == ["tertiary-color"]
        assert [d.name for d in comparison.removed] == ["secondary-color"]
        assert [m.variable for m in comparison.modified] == ["primary-color"]
