"""Artifact provider capability.

Every feature carries an ``ArtifactProvider``: the behaviour that turns a
project profile and a feature-specific configuration map into
``FeatureArtifacts``. Providers must not touch the filesystem or run
processes; they describe files and post-actions for the materialization
layer to apply.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Mapping, Optional

from .types import FeatureArtifacts, ProjectProfile


class ArtifactProvider(ABC):
    """Abstract base class for feature artifact providers."""

    @abstractmethod
    def generate(self, profile: ProjectProfile, config: Mapping[str, Any]) -> FeatureArtifacts:
        """Produce this feature's artifacts.

        Args:
            profile: Target project profile (tier and base configuration)
            config: Feature configuration (defaults merged with caller overrides)

        Returns:
            The files, template/asset references, metadata and post-actions
            this feature contributes.
        """
        ...

    def validate(self, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        """Reject unusable configuration by raising ``ValueError``. No-op by default."""
        return None


class BaseArtifactProvider(ArtifactProvider):
    """Provider with static template and asset lists.

    Subclasses implement ``build`` and get the declared ``templates`` and
    ``assets`` prepended to their artifacts.
    """

    def __init__(
        self,
        *,
        templates: Optional[Iterable[str]] = None,
        assets: Optional[Iterable[str]] = None,
    ) -> None:
        self.templates: List[str] = list(templates or [])
        self.assets: List[str] = list(assets or [])

    def generate(self, profile: ProjectProfile, config: Mapping[str, Any]) -> FeatureArtifacts:
        self.validate(profile, config)
        artifacts = FeatureArtifacts(templates=list(self.templates), assets=list(self.assets))
        self.build(artifacts, profile, config)
        return artifacts

    @abstractmethod
    def build(self, artifacts: FeatureArtifacts, profile: ProjectProfile, config: Mapping[str, Any]) -> None:
        """Populate ``artifacts`` in place."""
        ...


class CallableProvider(ArtifactProvider):
    """Adapt a plain function ``(profile, config) -> FeatureArtifacts``."""

    def __init__(self, func: Callable[[ProjectProfile, Mapping[str, Any]], FeatureArtifacts]) -> None:
        self._func = func

    def generate(self, profile: ProjectProfile, config: Mapping[str, Any]) -> FeatureArtifacts:
        return self._func(profile, config)

    def __repr__(self) -> str:
        name = getattr(self._func, "__name__", repr(self._func))
        return f"CallableProvider({name})"


__all__ = ["ArtifactProvider", "BaseArtifactProvider", "CallableProvider"]
