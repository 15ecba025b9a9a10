"""Composition validation: conflicts and tier compatibility.

The validator only classifies. It never aborts a composition; whether
conflicts are fatal is decided by the composer from ``fail_on_conflicts``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from stackforge.core.schemas.validation import schema_errors
from stackforge.core.utils.merge import deep_merge

from .catalog import FeatureCatalog
from .types import ConflictInfo, ConflictKind, Feature, ProjectProfile

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    conflicts: List[ConflictInfo] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.conflicts


def feature_config(feature: Feature, overrides: Optional[Mapping[str, Mapping[str, Any]]]) -> Dict[str, Any]:
    """Effective configuration for ``feature``: defaults overlaid with the caller's override."""
    override = (overrides or {}).get(feature.id)
    if override is None:
        return deep_merge({}, feature.default_config)
    return deep_merge(feature.default_config, override)


class CompositionValidator:
    """Detect conflicts between resolved features and advisory tier mismatches."""

    def __init__(self, catalog: FeatureCatalog) -> None:
        self._catalog = catalog

    def validate(
        self,
        feature_ids: Sequence[str],
        profile: ProjectProfile,
        feature_configs: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> ValidationReport:
        """Check every unordered pair of ``feature_ids`` and every single feature.

        Conflicts are collected exhaustively. Pair order in each
        ``ConflictInfo`` follows the resolved order.
        """
        features = [self._catalog.lookup(fid) for fid in feature_ids]
        report = ValidationReport()

        for i, first in enumerate(features):
            if not first.is_compatible_with(profile.tier):
                report.warnings.append(
                    f"Feature {first.id} may not be compatible with tier {profile.tier.value}"
                    f" ({self._tier_range(first)})"
                )

            for second in features[i + 1:]:
                explicit = self._explicit_conflict(first, second)
                if explicit is not None:
                    report.conflicts.append(explicit)
                exclusive = self._type_conflict(first, second, profile)
                if exclusive is not None:
                    report.conflicts.append(exclusive)

            if first.config_schema:
                config = feature_config(first, feature_configs)
                for message in schema_errors(config, first.config_schema):
                    report.warnings.append(f"Feature {first.id} configuration is invalid: {message}")

        if report.conflicts:
            logger.info("Composition has %d conflict(s)", len(report.conflicts))
        return report

    @staticmethod
    def _tier_range(feature: Feature) -> str:
        low = feature.min_tier.value if feature.min_tier else "*"
        high = feature.max_tier.value if feature.max_tier else "*"
        return f"supported tiers: {low}..{high}"

    @staticmethod
    def _explicit_conflict(first: Feature, second: Feature) -> Optional[ConflictInfo]:
        # Declarations are often one-sided; check both directions, report once.
        if second.id not in first.conflicts and first.id not in second.conflicts:
            return None
        declared_by = first.id if second.id in first.conflicts else second.id
        return ConflictInfo(
            feature_a=first.id,
            feature_b=second.id,
            kind=ConflictKind.EXPLICIT,
            description=f"Feature {first.id} explicitly conflicts with {second.id} (declared by {declared_by})",
            resolution="Remove one of the conflicting features",
        )

    @staticmethod
    def _type_conflict(first: Feature, second: Feature, profile: ProjectProfile) -> Optional[ConflictInfo]:
        if first.id == second.id or first.type != second.type:
            return None
        if first.type not in profile.singleton_types:
            return None
        return ConflictInfo(
            feature_a=first.id,
            feature_b=second.id,
            kind=ConflictKind.TYPE_EXCLUSIVE,
            description=(
                f"Features {first.id} and {second.id} are both of type {first.type.value}, "
                "which allows only one active feature"
            ),
            resolution=f"Choose only one {first.type.value} feature",
        )


__all__ = ["CompositionValidator", "ValidationReport", "feature_config"]
