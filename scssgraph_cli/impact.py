"""Impact analysis for hypothetical variable changes.

Given a variable and a new value, finds the variables built on top of it and
the property declarations that consume either, then rates how far the change
reaches. Nothing here mutates the analyzed context.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional, Tuple

from .config_manager import AnalysisSettings
from .errors import VariableResolutionError
from .models import (
    ImpactScope,
    PropertyCategory,
    PropertyContext,
    RiskLevel,
    VariableImpactAnalysis,
    VariableResolutionContext,
    VariableUsage,
)

PropertyClassifier = Callable[[str], PropertyCategory]

_VENDOR_PREFIX_RE = re.compile(r"^-(?:webkit|moz|ms|o)-")

# (category, impact, exact names, prefixes)
_PROPERTY_TABLE: List[Tuple[str, str, set, Tuple[str, ...]]] = [
    (
        "typography", "high",
        {"font", "font-family", "font-size", "font-weight", "line-height"},
        (),
    ),
    (
        "typography", "medium",
        {"letter-spacing", "word-spacing", "white-space"},
        ("font-", "text-"),
    ),
    (
        "layout", "high",
        {"display", "position", "float", "clear", "overflow", "width", "height", "flex", "grid"},
        ("flex-", "grid-", "overflow-"),
    ),
    (
        "layout", "medium",
        {"top", "right", "bottom", "left", "margin", "padding", "gap", "z-index", "align-items",
         "justify-content", "order", "box-sizing", "min-width", "max-width", "min-height",
         "max-height", "inset"},
        ("margin-", "padding-", "align-", "justify-", "inset-"),
    ),
    (
        "color", "medium",
        {"color", "background", "background-color", "border-color", "outline-color", "fill",
         "stroke", "box-shadow", "text-shadow", "opacity", "caret-color", "accent-color"},
        ("background-",),
    ),
    (
        "animation", "low",
        {"transform", "transition", "animation", "will-change"},
        ("transition-", "animation-", "transform-"),
    ),
]


def classify_property(property_name: str) -> PropertyCategory:
    """Default classifier: map a CSS property name to a category and impact.

    Callers with a richer categorization service can pass their own
    classifier to :class:`ImpactAnalyzer` instead.
    """
    name = _VENDOR_PREFIX_RE.sub("", property_name.strip().lower())
    for category, impact, exact, prefixes in _PROPERTY_TABLE:
        if name in exact:
            return PropertyCategory(category=category, impact=impact)
    for category, impact, exact, prefixes in _PROPERTY_TABLE:
        if prefixes and name.startswith(prefixes):
            return PropertyCategory(category=category, impact=impact)
    return PropertyCategory(category="other", impact="low")


def usage_to_property_context(usage: VariableUsage) -> PropertyContext:
    return PropertyContext(
        selector=usage.selector or usage.context,
        property=usage.property,
        value=usage.context,
        line_number=usage.line_number,
        file_path=usage.file_path,
        media_query=usage.media_query,
        nesting_level=usage.nesting_level,
    )


class ImpactAnalyzer:
    """Analyze what a change to one variable would touch."""

    def __init__(
        self,
        context: VariableResolutionContext,
        classifier: Optional[PropertyClassifier] = None,
        settings: Optional[AnalysisSettings] = None,
    ):
        self.context = context
        self.classifier = classifier or classify_property
        self.settings = settings or AnalysisSettings()

    def analyze(self, name: str, new_value: str) -> VariableImpactAnalysis:
        """Analyze the impact of giving *name* the value *new_value*.

        Args:
            name: Variable name without the ``$`` sigil
            new_value: Hypothetical replacement value

        Returns:
            VariableImpactAnalysis for the change

        Raises:
            VariableResolutionError: If *name* is not defined in the context
        """
        definition = self.context.variables.get(name)
        if definition is None:
            raise VariableResolutionError(name, file_path=self.context.file_path)

        # Out-edges of *name*: what it depends on, not what depends on it.
        # Use graph.dependents() for the reverse direction.
        direct_dependents = list(self.context.dependencies.get(name, []))

        cascading: List[str] = []
        for other_name, other in self.context.variables.items():
            if other_name != name and name in other.dependencies and other_name not in cascading:
                cascading.append(other_name)

        usages: List[VariableUsage] = []
        for other_name in cascading:
            usages.extend(self.context.variables[other_name].usage)
        usages.extend(definition.usage)
        affected = self._deduplicate(usage_to_property_context(u) for u in usages)

        scope = self._impact_scope(affected)
        risk = self._risk_level(len(affected) + len(cascading))

        analysis = VariableImpactAnalysis(
            variable_name=name,
            new_value=new_value,
            current_value=definition.value,
            direct_dependents=direct_dependents,
            cascading_variables=cascading,
            affected_properties=affected,
            impact_scope=scope,
            risk_level=risk,
        )
        analysis.recommendations = self._recommendations(analysis, definition.is_default)
        return analysis

    @staticmethod
    def _deduplicate(contexts) -> List[PropertyContext]:
        seen = set()
        unique: List[PropertyContext] = []
        for ctx in contexts:
            key = (ctx.file_path, ctx.selector, ctx.property)
            if key in seen:
                continue
            seen.add(key)
            unique.append(ctx)
        return unique

    def _impact_scope(self, affected: List[PropertyContext]) -> ImpactScope:
        files = {ctx.file_path for ctx in affected}
        # no usages at all stays local
        if len(files) <= 1:
            return "local"
        if len(files) <= self.settings.component_max_files:
            return "component"
        return "global"

    def _risk_level(self, total: int) -> RiskLevel:
        if total <= self.settings.risk_low_max:
            return "low"
        if total <= self.settings.risk_medium_max:
            return "medium"
        return "high"

    def _recommendations(self, analysis: VariableImpactAnalysis, is_default: bool) -> List[str]:
        name = analysis.variable_name
        recommendations: List[str] = []

        if analysis.new_value.strip() == analysis.current_value:
            recommendations.append(f"New value for ${name} matches the current value; no visual change expected.")

        if not analysis.affected_properties and not analysis.cascading_variables:
            recommendations.append(f"No recorded usages of ${name}; the change is isolated to its definition.")

        if analysis.cascading_variables:
            names = ", ".join(f"${v}" for v in analysis.cascading_variables)
            recommendations.append(
                f"Re-check {len(analysis.cascading_variables)} dependent variable(s) derived from ${name}: {names}."
            )

        counts: Dict[str, int] = {}
        high_impact: List[str] = []
        for ctx in analysis.affected_properties:
            classified = self.classifier(ctx.property)
            counts[classified.category] = counts.get(classified.category, 0) + 1
            if classified.impact == "high" and ctx.property not in high_impact:
                high_impact.append(ctx.property)

        if high_impact:
            recommendations.append(
                f"High-impact properties are affected ({', '.join(high_impact)}); review these first."
            )

        if counts.get("typography", 0) >= self.settings.typography_threshold:
            recommendations.append(
                f"{counts['typography']} typography properties are affected; review text rendering and line wrapping."
            )
        if counts.get("layout", 0) > self.settings.layout_threshold:
            recommendations.append(
                f"{counts['layout']} layout properties are affected; verify layouts at every breakpoint."
            )
        if counts.get("color", 0):
            recommendations.append("Color properties are affected; re-check contrast for accessibility.")

        if analysis.risk_level == "high":
            recommendations.append(f"High-risk change: consider introducing a new variable instead of editing ${name}.")
        if analysis.impact_scope == "global":
            recommendations.append("The change spans many files; roll it out behind a visual regression run.")
        if is_default:
            recommendations.append(f"${name} is declared !default; consumers may already override it.")

        return recommendations
