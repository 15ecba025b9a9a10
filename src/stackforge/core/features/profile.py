"""Project profile loading from YAML files or mappings."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional

import yaml

from stackforge.core.exceptions import ConfigError
from stackforge.core.schemas.validation import validate_payload
from stackforge.core.utils.io import read_yaml

from .types import DEFAULT_SINGLETON_TYPES, FeatureType, ProjectProfile, Tier

PROFILE_SCHEMA = "project-profile.schema.yaml"


def profile_from_mapping(
    data: Mapping[str, Any],
    *,
    singleton_types: Optional[FrozenSet[FeatureType]] = None,
) -> ProjectProfile:
    """Build a ``ProjectProfile`` from a mapping after schema validation.

    Args:
        data: Profile document (``name``, ``tier``, optional ``config``,
            ``features`` and ``singletonTypes``)
        singleton_types: Fallback singleton types when the document has none
            (typically ``CompositionConfig.singleton_types``)

    Raises:
        SchemaValidationError: The document does not match the profile schema.
    """
    validate_payload(dict(data), PROFILE_SCHEMA)
    raw_singletons = data.get("singletonTypes")
    if raw_singletons is not None:
        singletons = frozenset(FeatureType(t) for t in raw_singletons)
    else:
        singletons = singleton_types if singleton_types is not None else DEFAULT_SINGLETON_TYPES
    return ProjectProfile(
        name=str(data["name"]),
        tier=Tier.parse(data["tier"]),
        config=dict(data.get("config") or {}),
        features={str(k): bool(v) for k, v in (data.get("features") or {}).items()},
        singleton_types=singletons,
    )


def profile_feature_configs(profile: ProjectProfile) -> Dict[str, Dict[str, Any]]:
    """Per-feature overrides declared under the profile's ``config.features``."""
    raw = profile.config.get("features") or {}
    return {str(fid): dict(cfg) for fid, cfg in raw.items() if isinstance(cfg, Mapping)}


def load_profile(
    path: Path,
    *,
    singleton_types: Optional[FrozenSet[FeatureType]] = None,
) -> ProjectProfile:
    """Load and validate a project profile YAML file.

    Raises:
        ConfigError: The file is missing, unreadable or not a mapping.
        SchemaValidationError: The document does not match the profile schema.
    """
    try:
        data = read_yaml(Path(path), default=None, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read project profile {path}: {exc}", context={"path": str(path)}) from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Project profile {path} must be a YAML mapping", context={"path": str(path)})
    return profile_from_mapping(data, singleton_types=singleton_types)


__all__ = ["load_profile", "profile_from_mapping", "profile_feature_configs", "PROFILE_SCHEMA"]
