"""Feature recommendations for a project profile."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from stackforge.core.utils.merge import unique_in_order

from .catalog import FeatureCatalog
from .types import ProjectProfile, Tier

TIER_BASELINE: Dict[Tier, Tuple[str, ...]] = {
    Tier.BASIC: ("health-basic", "observability-basic"),
    Tier.INTERMEDIATE: ("health-intermediate", "observability-metrics"),
    Tier.ADVANCED: ("health-advanced", "observability-full", "security-rbac"),
    Tier.ENTERPRISE: ("health-enterprise", "observability-enterprise", "security-enterprise"),
}

# Profile feature flag -> features it implies.
FLAG_FEATURES: Dict[str, Tuple[str, ...]] = {
    "database": ("storage-database",),
    "cache": ("storage-cache",),
    "rest": ("api-rest",),
    "graphql": ("api-graphql",),
    "grpc": ("api-grpc",),
}


def recommend_features(profile: ProjectProfile, *, catalog: Optional[FeatureCatalog] = None) -> List[str]:
    """Suggest feature ids for ``profile``.

    Tier baseline first, then features implied by enabled flags in
    ``FLAG_FEATURES`` order. Ids missing from ``catalog`` (when given) are
    dropped.
    """
    ids: List[str] = list(TIER_BASELINE[profile.tier])
    for flag, features in FLAG_FEATURES.items():
        if profile.features.get(flag):
            ids.extend(features)
    ids = unique_in_order(ids)
    if catalog is not None:
        ids = [fid for fid in ids if fid in catalog]
    return ids


__all__ = ["recommend_features", "TIER_BASELINE", "FLAG_FEATURES"]
