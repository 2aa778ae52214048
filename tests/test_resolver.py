"""Tests for recursive variable resolution."""

import pytest

from scssgraph_cli.errors import CircularDependencyError, VariableResolutionError
from scssgraph_cli.graph import build_dependency_graph
from scssgraph_cli.lexer import find_references
from scssgraph_cli.models import PropertyContext, VariableDefinition, VariableResolutionContext
from scssgraph_cli.resolver import VariableResolver


def _raw_context(values):
    """Context built by hand, bypassing the eager cycle check."""
    variables = {
        name: VariableDefinition(
            name=name,
            value=value,
            file_path="raw.scss",
            line_number=i + 1,
            dependencies=find_references(value),
        )
        for i, (name, value) in enumerate(values.items())
    }
    return VariableResolutionContext(
        file_path="raw.scss",
        variables=variables,
        dependencies=build_dependency_graph(variables),
    )


class TestResolve:
    """Test textual substitution."""

    def test_textual_substitution(self, analyzer, property_context):
        """Test that arithmetic is substituted, not evaluated."""
        context = analyzer.analyze_content("$base: 16px; $large: $base * 1.5;", "a.scss")
        resolved = analyzer.resolve_variable_with_context(context, "large", property_context)

        assert context.variables["large"].dependencies == ["base"]
        assert resolved.value == "16px * 1.5"
        assert resolved.definition.name == "large"
        assert resolved.dependency_chain == ["large", "base"]

    def test_literal_value(self, analyzer, property_context):
        """Test a variable without references."""
        context = analyzer.analyze_content("$base: 16px;", "a.scss")
        resolved = analyzer.resolve_variable_with_context(context, "base", property_context)

        assert resolved.value == "16px"
        assert resolved.dependency_chain == ["base"]

    def test_transitive_substitution(self, analyzer, property_context):
        """Test references several levels deep."""
        content = "$unit: 4px;\n$gap: $unit * 2;\n$pad: $gap $unit;\n"
        context = analyzer.analyze_content(content, "a.scss")
        resolved = analyzer.resolve_variable_with_context(context, "pad", property_context)

        assert resolved.value == "4px * 2 4px"
        assert resolved.dependency_chain == ["pad", "gap", "unit"]

    def test_longest_name_wins(self, analyzer, property_context):
        """Test that '$base-size' is not read as '$base' followed by '-size'."""
        content = "$base: 1px;\n$base-size: 2px;\n$both: $base-size $base;\n"
        context = analyzer.analyze_content(content, "a.scss")
        resolved = analyzer.resolve_variable_with_context(context, "both", property_context)

        assert resolved.value == "2px 1px"

    def test_repeated_reference(self, analyzer, property_context):
        """Test that every occurrence of a reference is replaced."""
        context = analyzer.analyze_content("$a: 2px;\n$b: $a $a;\n", "a.scss")
        resolved = analyzer.resolve_variable_with_context(context, "b", property_context)
        assert resolved.value == "2px 2px"

    def test_resolve_value(self, analyzer, property_context):
        """Test substituting an arbitrary property value."""
        context = analyzer.analyze_content("$base: 16px;", "a.scss")
        resolver = VariableResolver(context)
        assert resolver.resolve_value("calc($base + 2px)", property_context) == "calc(16px + 2px)"


class TestResolutionCache:
    """Test memoization on the context."""

    def test_cache_written_after_success(self, analyzer, property_context):
        """Test the cache key combines name, selector and property."""
        context = analyzer.analyze_content("$base: 16px; $large: $base * 1.5;", "a.scss")
        analyzer.resolve_variable_with_context(context, "large", property_context)

        assert context.resolution_cache[("large", ".button", "font-size")] == "16px * 1.5"

    def test_cache_hit_is_used(self, analyzer, property_context):
        """Test that a cached value is returned as-is."""
        context = analyzer.analyze_content("$base: 16px;", "a.scss")
        context.resolution_cache[("base", ".button", "font-size")] = "cached"

        resolved = analyzer.resolve_variable_with_context(context, "base", property_context)
        assert resolved.value == "cached"

    def test_cache_is_per_usage_site(self, analyzer, property_context):
        """Test that another property gets its own entry."""
        context = analyzer.analyze_content("$base: 16px;", "a.scss")
        other = PropertyContext(
            selector=".card",
            property="margin",
            value="",
            line_number=3,
            file_path="a.scss",
        )
        analyzer.resolve_variable_with_context(context, "base", property_context)
        analyzer.resolve_variable_with_context(context, "base", other)

        assert len(context.resolution_cache) == 2

    def test_idempotent(self, analyzer, property_context):
        """Test that repeated resolution gives identical results."""
        context = analyzer.analyze_content("$base: 16px; $large: $base * 1.5;", "a.scss")
        first = analyzer.resolve_variable_with_context(context, "large", property_context)
        second = analyzer.resolve_variable_with_context(context, "large", property_context)

        assert first == second


class TestResolutionErrors:
    """Test failures during resolution."""

    def test_unknown_variable(self, analyzer, property_context):
        """Test resolving a name that was never declared."""
        context = analyzer.analyze_content("$base: 16px;", "a.scss")
        with pytest.raises(VariableResolutionError) as exc_info:
            analyzer.resolve_variable_with_context(context, "nope", property_context)

        assert exc_info.value.variable_name == "nope"
        assert "Variable not found: $nope" in str(exc_info.value)

    def test_undefined_dependency_leaves_cache_empty(self, analyzer, property_context):
        """Test that a failing dependency does not poison the cache."""
        context = analyzer.analyze_content("$a: $missing + 1;", "a.scss")
        with pytest.raises(VariableResolutionError) as exc_info:
            analyzer.resolve_variable_with_context(context, "a", property_context)

        assert exc_info.value.variable_name == "missing"
        assert context.resolution_cache == {}

    def test_cycle_during_resolution(self, property_context):
        """Test the resolution-time cycle check on an unvalidated context."""
        context = _raw_context({"a": "$b", "b": "$a"})
        with pytest.raises(CircularDependencyError) as exc_info:
            VariableResolver(context).resolve("a", property_context)

        assert exc_info.value.path == ["a", "b", "a"]
        assert exc_info.value.file_path == "raw.scss"
        assert context.resolution_cache == {}
