"""Core data models shared by extraction, resolution, and impact analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

VariableScope = Literal["global", "local", "mixin", "imported", "file", "component", "function"]
ImpactScope = Literal["local", "component", "global"]
RiskLevel = Literal["low", "medium", "high"]


@dataclass
class VariableUsage:
    """A place where a variable is consumed by a property declaration."""
    file_path: str
    line_number: int
    context: str
    selector: str = ""
    property: str = ""
    media_query: Optional[str] = None
    nesting_level: int = 0


@dataclass
class VariableDefinition:
    name: str
    value: str
    file_path: str
    line_number: int
    scope: VariableScope = "global"
    is_default: bool = False
    is_global: bool = False
    dependencies: List[str] = field(default_factory=list)
    usage: List[VariableUsage] = field(default_factory=list)

    def __str__(self) -> str:
        return f"${self.name}: {self.value} ({self.file_path}:{self.line_number})"


@dataclass
class ScssImportInfo:
    path: str
    line_number: int
    is_partial: bool = False
    imported_items: Optional[List[str]] = None


@dataclass
class PropertyContext:
    """One point of variable use, also the resolution cache key component."""
    selector: str
    property: str
    value: str
    line_number: int
    file_path: str
    media_query: Optional[str] = None
    nesting_level: int = 0

    def cache_key(self, variable_name: str) -> Tuple[str, str, str]:
        return (variable_name, self.selector, self.property)


@dataclass
class VariableResolutionContext:
    """Everything known about the variables of one analyzed snapshot.

    The context owns its resolution cache; throwing the context away is the
    only way to invalidate it.
    """
    file_path: str
    imports: List[ScssImportInfo] = field(default_factory=list)
    variables: Dict[str, VariableDefinition] = field(default_factory=dict)
    dependencies: Dict[str, List[str]] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    resolution_cache: Dict[Tuple[str, str, str], str] = field(
        default_factory=dict, repr=False, compare=False
    )

    @property
    def num_variables(self) -> int:
        return len(self.variables)


@dataclass
class ResolvedVariable:
    value: str
    definition: VariableDefinition
    dependency_chain: List[str]


@dataclass
class PropertyCategory:
    """Classification of a CSS property name."""
    category: Literal["typography", "layout", "color", "animation", "other"]
    impact: RiskLevel


@dataclass
class VariableImpactAnalysis:
    variable_name: str
    new_value: str
    current_value: str
    direct_dependents: List[str]
    cascading_variables: List[str]
    affected_properties: List[PropertyContext]
    impact_scope: ImpactScope
    risk_level: RiskLevel
    recommendations: List[str] = field(default_factory=list)

    @property
    def total_impact(self) -> int:
        return len(self.affected_properties) + len(self.cascading_variables)


@dataclass
class ModifiedVariable:
    variable: str
    before: VariableDefinition
    after: VariableDefinition


@dataclass
class ScopeChange:
    variable: str
    before_scope: VariableScope
    after_scope: VariableScope


@dataclass
class ContextComparison:
    added: List[VariableDefinition] = field(default_factory=list)
    removed: List[VariableDefinition] = field(default_factory=list)
    modified: List[ModifiedVariable] = field(default_factory=list)
    scope_changes: List[ScopeChange] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified)
