"""Composition engine configuration domain.

Reads the ``composition`` section:

    composition:
      singletonTypes: [storage, caching]
      defaults:
        failOnConflicts: false
        autoResolveDependencies: false
      generation:
        parallel: false
        maxWorkers: 4
        timeoutSeconds: 30
"""
from __future__ import annotations

from functools import cached_property
from typing import Any, Dict, FrozenSet, Optional

from ..base import BaseDomainConfig
from stackforge.core.features.types import DEFAULT_SINGLETON_TYPES, FeatureType


class CompositionConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "composition"

    @cached_property
    def singleton_types(self) -> FrozenSet[FeatureType]:
        raw = self.section.get("singletonTypes")
        if raw is None:
            return DEFAULT_SINGLETON_TYPES
        return frozenset(FeatureType(str(t)) for t in raw)

    @cached_property
    def _defaults(self) -> Dict[str, Any]:
        return self.section.get("defaults") or {}

    @cached_property
    def fail_on_conflicts(self) -> bool:
        return bool(self._defaults.get("failOnConflicts", False))

    @cached_property
    def auto_resolve_dependencies(self) -> bool:
        return bool(self._defaults.get("autoResolveDependencies", False))

    @cached_property
    def _generation(self) -> Dict[str, Any]:
        return self.section.get("generation") or {}

    @cached_property
    def parallel(self) -> bool:
        return bool(self._generation.get("parallel", False))

    @cached_property
    def max_workers(self) -> int:
        return max(1, int(self._generation.get("maxWorkers", 4) or 4))

    @cached_property
    def timeout_seconds(self) -> Optional[float]:
        """Per-provider timeout; None when disabled (0 or unset)."""
        value = float(self._generation.get("timeoutSeconds", 0) or 0)
        return value if value > 0 else None


__all__ = ["CompositionConfig"]
