"""Recursive, memoized substitution of variable references."""

from __future__ import annotations

import logging
from typing import Dict, List

from .errors import CircularDependencyError, VariableResolutionError
from .graph import dependency_chain
from .lexer import REFERENCE_RE, find_references
from .models import PropertyContext, ResolvedVariable, VariableResolutionContext

logger = logging.getLogger(__name__)


class VariableResolver:
    """Resolves variables of one context to literal text.

    Resolution is textual: ``$base * 1.5`` with ``$base: 16px`` resolves to
    ``16px * 1.5``. Results are cached on the context, keyed by
    ``(name, selector, property)``, and the cache is only written after a
    top-level call succeeds.
    """

    def __init__(self, context: VariableResolutionContext):
        self.context = context

    def resolve(self, name: str, property_context: PropertyContext) -> ResolvedVariable:
        """Resolve *name* as used by *property_context*.

        Raises:
            CircularDependencyError: If *name* reaches itself while resolving
            VariableResolutionError: If *name* or one of its dependencies is undefined
        """
        cache = self.context.resolution_cache
        key = property_context.cache_key(name)
        definition = self.context.variables.get(name)

        cached = cache.get(key)
        if cached is not None and definition is not None:
            logger.debug("Resolution cache hit for $%s", name)
            return ResolvedVariable(
                value=cached,
                definition=definition,
                dependency_chain=dependency_chain(self.context.dependencies, name),
            )

        value = self._resolve_recursive(name, property_context, [])
        # _resolve_recursive raised already if the definition was missing
        definition = self.context.variables[name]
        cache[key] = value
        return ResolvedVariable(
            value=value,
            definition=definition,
            dependency_chain=dependency_chain(self.context.dependencies, name),
        )

    def resolve_value(self, text: str, property_context: PropertyContext) -> str:
        """Substitute every ``$reference`` in an arbitrary value string."""
        resolved: Dict[str, str] = {
            ref: self.resolve(ref, property_context).value for ref in find_references(text)
        }
        return REFERENCE_RE.sub(lambda m: resolved[m.group(1)], text)

    def _resolve_recursive(
        self,
        name: str,
        property_context: PropertyContext,
        chain: List[str],
    ) -> str:
        if name in chain:
            cycle = chain[chain.index(name):] + [name]
            raise CircularDependencyError(cycle, file_path=self.context.file_path)

        definition = self.context.variables.get(name)
        if definition is None:
            raise VariableResolutionError(name, file_path=property_context.file_path)

        chain = chain + [name]
        resolved: Dict[str, str] = {}
        for ref in find_references(definition.value):
            resolved[ref] = self._resolve_recursive(ref, property_context, chain)

        if not resolved:
            return definition.value
        return REFERENCE_RE.sub(lambda m: resolved[m.group(1)], definition.value)
