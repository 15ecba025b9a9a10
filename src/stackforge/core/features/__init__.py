"""Feature composition: catalog, dependency resolution, validation and generation."""
from __future__ import annotations

from .types import (
    DEFAULT_SINGLETON_TYPES,
    CompositionOptions,
    CompositionRequest,
    CompositionResult,
    ConflictInfo,
    ConflictKind,
    Feature,
    FeatureArtifacts,
    FeatureType,
    GeneratedBundle,
    PostAction,
    ProjectProfile,
    Tier,
)
from .provider import ArtifactProvider, BaseArtifactProvider, CallableProvider
from .catalog import FeatureCatalog
from .resolver import DependencyResolver, Resolution
from .validator import CompositionValidator, ValidationReport, feature_config
from .generator import CompositionGenerator
from .composer import FeatureComposer
from .builtin import build_builtin_catalog, create_builtin_features
from .recommend import recommend_features
from .report import format_summary, result_to_dict
from .profile import load_profile, profile_feature_configs, profile_from_mapping

__all__ = [
    "DEFAULT_SINGLETON_TYPES",
    "CompositionOptions",
    "CompositionRequest",
    "CompositionResult",
    "ConflictInfo",
    "ConflictKind",
    "Feature",
    "FeatureArtifacts",
    "FeatureType",
    "GeneratedBundle",
    "PostAction",
    "ProjectProfile",
    "Tier",
    "ArtifactProvider",
    "BaseArtifactProvider",
    "CallableProvider",
    "FeatureCatalog",
    "DependencyResolver",
    "Resolution",
    "CompositionValidator",
    "ValidationReport",
    "feature_config",
    "CompositionGenerator",
    "FeatureComposer",
    "build_builtin_catalog",
    "create_builtin_features",
    "recommend_features",
    "format_summary",
    "result_to_dict",
    "load_profile",
    "profile_from_mapping",
    "profile_feature_configs",
]
