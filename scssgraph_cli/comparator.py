"""Comparison of variable sets between two analyzed snapshots."""

from __future__ import annotations

from typing import List

from .models import (
    ContextComparison,
    ModifiedVariable,
    RiskLevel,
    ScopeChange,
    VariableDefinition,
    VariableResolutionContext,
)


def definitions_equal(before: VariableDefinition, after: VariableDefinition) -> bool:
    """Semantic equality; provenance (file, line) and usage are ignored."""
    return (
        before.value == after.value
        and before.scope == after.scope
        and before.is_default == after.is_default
        and before.dependencies == after.dependencies
    )


def compare_contexts(
    before: VariableResolutionContext,
    after: VariableResolutionContext,
) -> ContextComparison:
    """Report added, removed, and modified variables between two contexts.

    Neither context is modified.
    """
    comparison = ContextComparison()

    for name, definition in after.variables.items():
        if name not in before.variables:
            comparison.added.append(definition)

    for name, old in before.variables.items():
        new = after.variables.get(name)
        if new is None:
            comparison.removed.append(old)
            continue
        if definitions_equal(old, new):
            continue
        comparison.modified.append(ModifiedVariable(variable=name, before=old, after=new))
        if old.scope != new.scope:
            comparison.scope_changes.append(
                ScopeChange(variable=name, before_scope=old.scope, after_scope=new.scope)
            )

    return comparison


def rate_variable_change(definition: VariableDefinition) -> RiskLevel:
    """Heuristic impact of changing *definition*, based on its name and scope."""
    name = definition.name.lower()
    if "color" in name or "bg" in name:
        return "high"
    if "font" in name or "text" in name:
        return "medium"
    if definition.scope == "global":
        return "high"
    return "low"


def comparison_recommendations(comparison: ContextComparison) -> List[str]:
    """Advisories for a before/after comparison."""
    recommendations: List[str] = []
    changed = comparison.added + [m.after for m in comparison.modified]

    if any(rate_variable_change(d) == "high" for d in changed):
        recommendations.append("Review high-impact variable changes for visual consistency.")
    if len(comparison.modified) > 5:
        recommendations.append("Consider testing components that use the affected variables.")
    if comparison.removed:
        recommendations.append("Verify that removed variables are not used elsewhere.")
    if comparison.scope_changes:
        recommendations.append("Scope changes can hide or expose variables; check nested rules that use them.")
    return recommendations
