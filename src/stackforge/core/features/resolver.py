"""Dependency resolution for feature compositions.

Computes the transitive closure of a requested feature set and a safe
application order (every feature after all of its dependencies).

Resolution runs in two passes over the declared graph:

1. Classification: a three-colour depth-first search (white = unvisited,
   grey = on the current path, black = finished) that detects cycles,
   reports unknown ids and marks features whose dependencies cannot be
   satisfied. Reaching a grey node is a back edge and therefore a cycle;
   reaching a black node is a shared dependency (a diamond), which is valid.
2. Ordering: a post-order walk over the classified graph, in request order
   and declared dependency order, that emits each includable feature once.

Splitting the passes means a feature skipped because of an unknown
dependency never drags its other dependencies into the output.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from stackforge.core.exceptions import CyclicDependencyError, FeatureNotFoundError
from stackforge.core.utils.merge import unique_in_order

from .catalog import FeatureCatalog
from .types import CompositionOptions

logger = logging.getLogger(__name__)


class _Color(Enum):
    WHITE = 0
    GREY = 1
    BLACK = 2


class _Status(Enum):
    OK = "ok"
    EXCLUDED = "excluded"
    UNKNOWN = "unknown"
    UNRESOLVED = "unresolved"


@dataclass
class Resolution:
    """Outcome of dependency resolution.

    Attributes:
        order: Feature ids in application order (dependencies first), no duplicates
        warnings: Non-fatal issues (exclusions, skipped unknown ids)
        skipped: Ids left out because they, or a dependency, are unknown
    """

    order: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


class DependencyResolver:
    """Resolve requested feature ids against a catalog."""

    def __init__(self, catalog: FeatureCatalog) -> None:
        self._catalog = catalog

    def resolve(
        self,
        feature_ids: Iterable[str],
        options: Optional[CompositionOptions] = None,
    ) -> Resolution:
        """Return the ordered closure of ``feature_ids``.

        Raises:
            FeatureNotFoundError: Unknown id and ``auto_resolve_dependencies`` is off.
            CyclicDependencyError: A cycle is reachable from the request.
        """
        options = options or CompositionOptions()
        requested = unique_in_order(feature_ids)
        excluded = options.excluded_feature_ids
        auto_resolve = options.auto_resolve_dependencies

        status: Dict[str, _Status] = {}
        color: Dict[str, _Color] = {}
        path: List[str] = []
        warnings: List[str] = []
        skipped: List[str] = []

        def classify(feature_id: str, required_by: Optional[str]) -> _Status:
            state = color.get(feature_id, _Color.WHITE)
            if state is _Color.GREY:
                start = path.index(feature_id)
                raise CyclicDependencyError(path[start:] + [feature_id])
            if state is _Color.BLACK:
                return status[feature_id]

            if feature_id in excluded:
                result = _Status.EXCLUDED
            elif feature_id not in self._catalog:
                if not auto_resolve:
                    raise FeatureNotFoundError(feature_id, required_by=required_by)
                if required_by:
                    warnings.append(f"Feature {feature_id} (required by {required_by}) not found; skipping")
                else:
                    warnings.append(f"Feature {feature_id} not found; skipping")
                logger.warning("Unknown feature %s skipped", feature_id)
                result = _Status.UNKNOWN
            else:
                color[feature_id] = _Color.GREY
                path.append(feature_id)
                result = _Status.OK
                for dep in self._catalog.lookup(feature_id).dependencies:
                    dep_status = classify(dep, feature_id)
                    if dep_status in (_Status.UNKNOWN, _Status.UNRESOLVED) and result is _Status.OK:
                        result = _Status.UNRESOLVED
                        warnings.append(
                            f"Skipping feature {feature_id}: dependency {dep} could not be resolved"
                        )
                path.pop()

            color[feature_id] = _Color.BLACK
            status[feature_id] = result
            if result in (_Status.UNKNOWN, _Status.UNRESOLVED):
                skipped.append(feature_id)
            return result

        for feature_id in requested:
            if classify(feature_id, None) is _Status.EXCLUDED:
                warnings.append(f"Feature {feature_id} was requested but is excluded")

        order: List[str] = []
        emitted: Set[str] = set()

        def emit(feature_id: str) -> None:
            if feature_id in emitted:
                return
            emitted.add(feature_id)
            for dep in self._catalog.lookup(feature_id).dependencies:
                if status[dep] is _Status.EXCLUDED:
                    warnings.append(
                        f"Feature {feature_id} depends on excluded feature {dep}; "
                        "the generated output may be incomplete"
                    )
                    logger.warning("Excluded feature %s is a dependency of %s", dep, feature_id)
                    continue
                emit(dep)
            order.append(feature_id)

        for feature_id in requested:
            if status[feature_id] is _Status.OK:
                emit(feature_id)

        logger.debug("Resolved %s -> %s", requested, order)
        return Resolution(order=order, warnings=unique_in_order(warnings), skipped=skipped)


__all__ = ["DependencyResolver", "Resolution"]
