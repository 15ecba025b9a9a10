"""Feature composition data model.

Features are immutable descriptors registered once into a catalog. Requests
and results are created fresh for every composition run and are owned by the
caller.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

if TYPE_CHECKING:
    from .provider import ArtifactProvider


class FeatureType(str, Enum):
    CORE = "core"
    OBSERVABILITY = "observability"
    SECURITY = "security"
    STORAGE = "storage"
    API = "api"
    DEPLOYMENT = "deployment"
    MESSAGING = "messaging"
    CACHING = "caching"


DEFAULT_SINGLETON_TYPES: FrozenSet[FeatureType] = frozenset({FeatureType.STORAGE, FeatureType.CACHING})


_TIER_DESCRIPTIONS = {
    "basic": "Basic health endpoints with ServerTime API (~5 min deployment)",
    "intermediate": "Production-ready with dependency checks and basic observability (~15 min deployment)",
    "advanced": "Full observability with OpenTelemetry and CloudEvents (~30 min deployment)",
    "enterprise": "Enterprise-grade with compliance and advanced monitoring (~45 min deployment)",
}


class Tier(str, Enum):
    """Project complexity tier, ordered basic < intermediate < advanced < enterprise."""

    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    ENTERPRISE = "enterprise"

    @property
    def level(self) -> int:
        return _TIER_ORDER.index(self) + 1

    @property
    def description(self) -> str:
        return _TIER_DESCRIPTIONS[self.value]

    @classmethod
    def parse(cls, value: "Tier | str") -> "Tier":
        if isinstance(value, Tier):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(t.value for t in cls)
            raise ValueError(f"invalid tier: {value} (must be one of: {names})") from None


_TIER_ORDER: Tuple[Tier, ...] = (Tier.BASIC, Tier.INTERMEDIATE, Tier.ADVANCED, Tier.ENTERPRISE)


class ConflictKind(str, Enum):
    EXPLICIT = "explicit"
    TYPE_EXCLUSIVE = "type-exclusive"


@dataclass(frozen=True)
class Feature:
    """A composable unit of generated functionality.

    ``dependencies`` keeps declaration order (it drives traversal order in the
    resolver); ``conflicts`` is a set and is treated as symmetric by the
    validator regardless of which side declares it.
    """

    id: str
    name: str
    type: FeatureType
    provider: Optional["ArtifactProvider"] = field(default=None, compare=False, repr=False)
    description: str = ""
    version: str = "1.0.0"
    dependencies: Tuple[str, ...] = ()
    conflicts: FrozenSet[str] = frozenset()
    min_tier: Optional[Tier] = None
    max_tier: Optional[Tier] = None
    priority: int = 0
    category: str = ""
    tags: Tuple[str, ...] = ()
    default_config: Mapping[str, Any] = field(default_factory=dict, compare=False)
    config_schema: Optional[Mapping[str, Any]] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Accept lists/sets/strings from callers; store normalized immutable forms.
        object.__setattr__(self, "type", FeatureType(self.type))
        object.__setattr__(self, "dependencies", tuple(self.dependencies))
        object.__setattr__(self, "conflicts", frozenset(self.conflicts))
        object.__setattr__(self, "tags", tuple(self.tags))
        if self.min_tier is not None:
            object.__setattr__(self, "min_tier", Tier.parse(self.min_tier))
        if self.max_tier is not None:
            object.__setattr__(self, "max_tier", Tier.parse(self.max_tier))

    def is_compatible_with(self, tier: Tier) -> bool:
        """True when ``tier`` falls inside ``[min_tier, max_tier]``."""
        level = Tier.parse(tier).level
        if self.min_tier is not None and level < self.min_tier.level:
            return False
        if self.max_tier is not None and level > self.max_tier.level:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "version": self.version,
            "dependencies": list(self.dependencies),
            "conflicts": sorted(self.conflicts),
            "minTier": self.min_tier.value if self.min_tier else None,
            "maxTier": self.max_tier.value if self.max_tier else None,
            "priority": self.priority,
            "category": self.category,
            "tags": list(self.tags),
            "defaultConfig": dict(self.default_config),
        }


@dataclass(frozen=True)
class PostAction:
    """An external command the materialization layer runs after writing files."""

    type: str
    description: str
    command: str
    args: Tuple[str, ...] = ()
    env: Mapping[str, str] = field(default_factory=dict)
    working_dir: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "description": self.description,
            "command": self.command,
            "args": list(self.args),
            "env": dict(self.env),
            "workingDir": self.working_dir,
        }


@dataclass
class FeatureArtifacts:
    """Output of a single feature's artifact provider."""

    files: Dict[str, str] = field(default_factory=dict)
    templates: List[str] = field(default_factory=list)
    assets: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    post_actions: List[PostAction] = field(default_factory=list)


@dataclass
class GeneratedBundle:
    """Merged output of every feature in a composition.

    ``file_owners`` maps each path to the feature that last wrote it.
    """

    files: Dict[str, str] = field(default_factory=dict)
    templates: List[str] = field(default_factory=list)
    assets: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    post_actions: List[PostAction] = field(default_factory=list)
    file_owners: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files": dict(self.files),
            "templates": list(self.templates),
            "assets": list(self.assets),
            "metadata": dict(self.metadata),
            "postActions": [a.to_dict() for a in self.post_actions],
            "fileOwners": dict(self.file_owners),
        }


@dataclass
class ProjectProfile:
    """Target project: complexity tier plus arbitrary base configuration."""

    name: str
    tier: Tier = Tier.BASIC
    config: Dict[str, Any] = field(default_factory=dict)
    features: Dict[str, bool] = field(default_factory=dict)
    singleton_types: FrozenSet[FeatureType] = DEFAULT_SINGLETON_TYPES

    def __post_init__(self) -> None:
        self.tier = Tier.parse(self.tier)
        self.singleton_types = frozenset(FeatureType(t) for t in self.singleton_types)


@dataclass(frozen=True)
class CompositionOptions:
    """Controls how a composition run behaves.

    ``include_optional`` is accepted for request compatibility; features have
    no optional dependencies, so the resolver does not act on it.
    ``parallel`` and ``timeout_seconds`` default to configuration when None.
    """

    auto_resolve_dependencies: bool = False
    fail_on_conflicts: bool = False
    excluded_feature_ids: FrozenSet[str] = frozenset()
    include_optional: bool = False
    dry_run: bool = False
    parallel: Optional[bool] = None
    timeout_seconds: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "excluded_feature_ids", frozenset(self.excluded_feature_ids))


@dataclass
class CompositionRequest:
    features: List[str]
    profile: ProjectProfile
    feature_configs: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    options: CompositionOptions = field(default_factory=CompositionOptions)


@dataclass(frozen=True)
class ConflictInfo:
    feature_a: str
    feature_b: str
    kind: ConflictKind
    description: str
    resolution: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "featureA": self.feature_a,
            "featureB": self.feature_b,
            "kind": self.kind.value,
            "description": self.description,
            "resolution": self.resolution,
        }


@dataclass
class CompositionResult:
    resolved_features: List[str] = field(default_factory=list)
    bundle: Optional[GeneratedBundle] = None
    dependency_edges: Dict[str, List[str]] = field(default_factory=dict)
    conflicts: List[ConflictInfo] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    post_actions: List[PostAction] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def summary(self) -> str:
        from .report import format_summary

        return format_summary(self)

    def to_dict(self) -> Dict[str, Any]:
        from .report import result_to_dict

        return result_to_dict(self)


__all__ = [
    "FeatureType",
    "Tier",
    "ConflictKind",
    "DEFAULT_SINGLETON_TYPES",
    "Feature",
    "PostAction",
    "FeatureArtifacts",
    "GeneratedBundle",
    "ProjectProfile",
    "CompositionOptions",
    "CompositionRequest",
    "ConflictInfo",
    "CompositionResult",
]
