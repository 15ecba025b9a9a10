"""Tests for feature recommendations."""
from __future__ import annotations

from stackforge.core.features import FeatureCatalog, ProjectProfile, Tier, build_builtin_catalog, recommend_features

from helpers.features import make_feature


class TestRecommendations:
    """Tier baseline plus features implied by profile flags."""

    def test_tier_baselines(self) -> None:
        """Each tier maps to its health and observability features."""
        assert recommend_features(ProjectProfile(name="x", tier=Tier.BASIC)) == [
            "health-basic",
            "observability-basic",
        ]
        assert recommend_features(ProjectProfile(name="x", tier=Tier.ENTERPRISE)) == [
            "health-enterprise",
            "observability-enterprise",
            "security-enterprise",
        ]

    def test_flags_add_features(self) -> None:
        """Enabled flags append their features; disabled flags do not."""
        profile = ProjectProfile(
            name="x",
            tier=Tier.INTERMEDIATE,
            features={"database": True, "grpc": True, "cache": False},
        )

        assert recommend_features(profile) == [
            "health-intermediate",
            "observability-metrics",
            "storage-database",
            "api-grpc",
        ]

    def test_filtered_by_catalog(self) -> None:
        """Ids absent from the catalog are dropped."""
        catalog = FeatureCatalog([make_feature("health-basic")])

        assert recommend_features(ProjectProfile(name="x"), catalog=catalog) == ["health-basic"]

    def test_builtin_catalog_covers_all_recommendations(self) -> None:
        """Every recommendation exists in the built-in catalog."""
        catalog = build_builtin_catalog()
        flags = {"database": True, "cache": True, "rest": True, "graphql": True, "grpc": True}

        for tier in Tier:
            profile = ProjectProfile(name="x", tier=tier, features=flags)
            assert recommend_features(profile, catalog=catalog) == recommend_features(profile)
