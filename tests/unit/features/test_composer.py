"""Tests for FeatureComposer end-to-end composition runs."""
from __future__ import annotations

import pytest

from stackforge.core.config import CompositionConfig
from stackforge.core.exceptions import (
    CompositionConflictError,
    CyclicDependencyError,
    FeatureGenerationError,
    FeatureNotFoundError,
)
from stackforge.core.features import (
    CompositionOptions,
    CompositionRequest,
    ConflictKind,
    FeatureComposer,
    FeatureType,
    ProjectProfile,
    Tier,
)

from helpers.features import RecordingProvider, action, make_catalog, make_feature


def _config(**generation) -> CompositionConfig:
    return CompositionConfig(config={"composition": {"generation": generation}})


def _request(features, *, tier: Tier = Tier.BASIC, **options) -> CompositionRequest:
    return CompositionRequest(
        features=list(features),
        profile=ProjectProfile(name="demo", tier=tier),
        options=CompositionOptions(**options),
    )


@pytest.fixture
def storage_catalog():
    database = RecordingProvider(files={"internal/storage/database.go": "db"})
    cache = RecordingProvider(files={"internal/storage/cache.go": "cache"})
    catalog = make_catalog(
        make_feature("storage-database", type=FeatureType.STORAGE, provider=database),
        make_feature("storage-cache", type=FeatureType.STORAGE, provider=cache),
    )
    return catalog, database, cache


class TestStorageScenario:
    """Two storage features conflict by type."""

    def test_conflict_reported_but_generated(self, storage_catalog) -> None:
        """Without fail_on_conflicts the composition still generates."""
        catalog, database, cache = storage_catalog
        composer = FeatureComposer(catalog, config=_config())

        result = composer.compose(_request(["storage-database", "storage-cache"]))

        assert result.resolved_features == ["storage-database", "storage-cache"]
        assert len(result.conflicts) == 1
        assert result.conflicts[0].kind is ConflictKind.TYPE_EXCLUSIVE
        assert result.bundle is not None
        assert set(result.bundle.files) == {"internal/storage/database.go", "internal/storage/cache.go"}

    def test_fail_on_conflicts_aborts_before_generation(self, storage_catalog) -> None:
        """No provider runs when the composition aborts on conflicts."""
        catalog, database, cache = storage_catalog
        composer = FeatureComposer(catalog, config=_config())

        with pytest.raises(CompositionConflictError) as exc_info:
            composer.compose(_request(["storage-database", "storage-cache"], fail_on_conflicts=True))

        error = exc_info.value
        assert len(error.conflicts) == 1
        assert error.result.bundle is None
        assert error.result.resolved_features == ["storage-database", "storage-cache"]
        assert "durationMs" in error.result.metadata
        assert database.calls == [] and cache.calls == []


class TestApiScenario:
    """Dependencies are pulled in automatically."""

    def test_api_rest_pulls_health_basic(self) -> None:
        """Requesting api-rest resolves health-basic first."""
        catalog = make_catalog(
            make_feature("health-basic"),
            make_feature("api-rest", type=FeatureType.API, dependencies=["health-basic"]),
        )

        result = FeatureComposer(catalog, config=_config()).compose(_request(["api-rest"]))

        assert result.resolved_features == ["health-basic", "api-rest"]
        assert result.dependency_edges == {"health-basic": [], "api-rest": ["health-basic"]}


class TestResultShape:
    """Results carry diagnostics, metadata and post-actions."""

    def test_dry_run_skips_generation(self) -> None:
        """A dry run resolves and validates only."""
        provider = RecordingProvider(files={"x": "1"})
        catalog = make_catalog(make_feature("a", provider=provider))

        result = FeatureComposer(catalog, config=_config()).compose(_request(["a"], dry_run=True))

        assert result.bundle is None
        assert result.resolved_features == ["a"]
        assert result.metadata["dryRun"] is True
        assert provider.calls == []

    def test_metadata(self) -> None:
        """Metadata records the project, tier and count."""
        catalog = make_catalog(make_feature("a"), make_feature("b"))

        result = FeatureComposer(catalog, config=_config()).compose(_request(["a", "b"], tier=Tier.ADVANCED))

        assert result.metadata["project"] == "demo"
        assert result.metadata["tier"] == "advanced"
        assert result.metadata["featureCount"] == 2
        assert result.metadata["dryRun"] is False
        assert isinstance(result.metadata["durationMs"], int)

    def test_post_actions_concatenated(self) -> None:
        """Result post-actions equal the bundle's, without dedup."""
        shared = action("go", "mod", "tidy")
        catalog = make_catalog(
            make_feature("a", provider=RecordingProvider(post_actions=[shared])),
            make_feature("b", provider=RecordingProvider(post_actions=[shared, action("make")])),
        )

        result = FeatureComposer(catalog, config=_config()).compose(_request(["a", "b"]))

        assert len(result.post_actions) == 3
        assert result.post_actions == result.bundle.post_actions

    def test_warnings_combined(self) -> None:
        """Resolution and validation warnings both reach the result."""
        catalog = make_catalog(make_feature("sre", min_tier=Tier.ENTERPRISE))

        result = FeatureComposer(catalog, config=_config()).compose(
            _request(["sre", "ghost"], auto_resolve_dependencies=True)
        )

        assert result.warnings == [
            "Feature ghost not found; skipping",
            "Feature sre may not be compatible with tier basic (supported tiers: enterprise..*)",
        ]
        assert result.bundle is not None

    def test_to_dict_and_summary(self) -> None:
        """Result renders to JSON-ready data and text."""
        catalog = make_catalog(make_feature("a", provider=RecordingProvider(files={"f": "1"})))

        result = FeatureComposer(catalog, config=_config()).compose(_request(["a"]))

        data = result.to_dict()
        assert data["resolvedFeatures"] == ["a"]
        assert data["bundle"]["files"] == {"f": "1"}
        assert result.summary().startswith("Feature Composition Summary:")


class TestErrors:
    """Resolution and generation errors propagate."""

    def test_unknown_feature(self) -> None:
        """Unknown ids fail without auto-resolve."""
        with pytest.raises(FeatureNotFoundError):
            FeatureComposer(make_catalog(), config=_config()).compose(_request(["ghost"]))

    def test_cycle(self) -> None:
        """Cycles fail the composition."""
        catalog = make_catalog(make_feature("a", dependencies=["b"]), make_feature("b", dependencies=["a"]))

        with pytest.raises(CyclicDependencyError):
            FeatureComposer(catalog, config=_config()).compose(_request(["a"]))

    def test_generation_failure(self) -> None:
        """A failing provider fails the composition."""
        catalog = make_catalog(make_feature("bad", provider=RecordingProvider(error=OSError("disk"))))

        with pytest.raises(FeatureGenerationError):
            FeatureComposer(catalog, config=_config()).compose(_request(["bad"]))

    def test_generation_failure_keeps_diagnostics(self) -> None:
        """The error carries the warnings and conflicts found before generation."""
        catalog = make_catalog(
            make_feature("storage-database", type=FeatureType.STORAGE),
            make_feature("storage-cache", type=FeatureType.STORAGE, provider=RecordingProvider(error=OSError("disk"))),
        )
        composer = FeatureComposer(catalog, config=_config())

        with pytest.raises(FeatureGenerationError) as exc_info:
            composer.compose(
                _request(["storage-database", "storage-cache", "ghost"], auto_resolve_dependencies=True)
            )

        result = exc_info.value.result
        assert exc_info.value.feature_id == "storage-cache"
        assert result is not None
        assert result.bundle is None
        assert result.resolved_features == ["storage-database", "storage-cache"]
        assert result.warnings == ["Feature ghost not found; skipping"]
        assert len(result.conflicts) == 1
        assert result.conflicts[0].kind is ConflictKind.TYPE_EXCLUSIVE
        assert "durationMs" in result.metadata


class TestGenerationSettings:
    """Options override configured generation settings."""

    def test_configured_parallel_generation(self) -> None:
        """Parallel generation from config yields the same bundle."""
        catalog = make_catalog(
            make_feature("a", provider=RecordingProvider(files={"p": "a"}, delay=0.05)),
            make_feature("b", provider=RecordingProvider(files={"p": "b"})),
        )
        composer = FeatureComposer(catalog, config=_config(parallel=True, maxWorkers=2))

        result = composer.compose(_request(["a", "b"]))

        assert result.bundle.files == {"p": "b"}

    def test_option_timeout_overrides_config(self) -> None:
        """timeout_seconds on the request wins over configuration."""
        catalog = make_catalog(make_feature("slow", provider=RecordingProvider(delay=1.0)))
        composer = FeatureComposer(catalog, config=_config(timeoutSeconds=30))

        with pytest.raises(FeatureGenerationError):
            composer.compose(_request(["slow"], timeout_seconds=0.1))

    def test_recommend(self) -> None:
        """The composer recommends only features in its catalog."""
        composer = FeatureComposer.with_builtin_features(config=_config())

        assert composer.recommend(ProjectProfile(name="demo", tier=Tier.BASIC)) == [
            "health-basic",
            "observability-basic",
        ]
