"""Tests for CompositionGenerator produce and merge phases."""
from __future__ import annotations

import threading

import pytest

from stackforge.core.exceptions import (
    FeatureGenerationError,
    GenerationTimeoutError,
    SchemaValidationError,
)
from stackforge.core.features import CallableProvider, CompositionGenerator, ProjectProfile

from helpers.features import RecordingProvider, action, make_catalog, make_feature


@pytest.fixture
def profile() -> ProjectProfile:
    return ProjectProfile(name="demo")


def _two_writers():
    return make_catalog(
        make_feature("a", provider=RecordingProvider(files={"p": "from-a", "only-a": "1"})),
        make_feature("b", provider=RecordingProvider(files={"p": "from-b"})),
    )


class TestMerge:
    """The merge is a fold in resolved order."""

    def test_last_writer_wins(self, profile: ProjectProfile) -> None:
        """The later feature's content wins for a shared path."""
        bundle = CompositionGenerator(_two_writers()).generate(["a", "b"], profile)

        assert bundle.files == {"p": "from-b", "only-a": "1"}
        assert bundle.file_owners == {"p": "b", "only-a": "a"}

    def test_reversed_order_reverses_winner(self, profile: ProjectProfile) -> None:
        """Reversing resolved order reverses the outcome."""
        bundle = CompositionGenerator(_two_writers()).generate(["b", "a"], profile)

        assert bundle.files["p"] == "from-a"
        assert bundle.file_owners["p"] == "a"

    def test_templates_and_assets_deduplicated(self, profile: ProjectProfile) -> None:
        """Templates and assets keep first-seen order without repeats."""
        catalog = make_catalog(
            make_feature("a", provider=RecordingProvider(templates=["t1", "t2"], assets=["x"])),
            make_feature("b", provider=RecordingProvider(templates=["t2", "t3", "t1"], assets=["x", "y"])),
        )

        bundle = CompositionGenerator(catalog).generate(["a", "b"], profile)

        assert bundle.templates == ["t1", "t2", "t3"]
        assert bundle.assets == ["x", "y"]

    def test_metadata_last_writer_wins(self, profile: ProjectProfile) -> None:
        """Metadata keys are overwritten in resolved order."""
        catalog = make_catalog(
            make_feature("a", provider=RecordingProvider(metadata={"k": 1, "a": True})),
            make_feature("b", provider=RecordingProvider(metadata={"k": 2})),
        )

        bundle = CompositionGenerator(catalog).generate(["a", "b"], profile)

        assert bundle.metadata == {"k": 2, "a": True}

    def test_post_actions_concatenated(self, profile: ProjectProfile) -> None:
        """Post-actions are appended without deduplication."""
        shared = action("go", "mod", "tidy")
        catalog = make_catalog(
            make_feature("a", provider=RecordingProvider(post_actions=[shared, action("make")])),
            make_feature("b", provider=RecordingProvider(post_actions=[shared])),
        )

        bundle = CompositionGenerator(catalog).generate(["a", "b"], profile)

        assert len(bundle.post_actions) == 3
        assert bundle.post_actions == [shared, action("make"), shared]

    def test_empty_feature_list(self, profile: ProjectProfile) -> None:
        """No features produce an empty bundle."""
        bundle = CompositionGenerator(make_catalog()).generate([], profile)

        assert bundle.files == {}
        assert bundle.post_actions == []


class TestProviderInvocation:
    """Providers receive merged configuration; failures abort."""

    def test_provider_receives_merged_config(self, profile: ProjectProfile) -> None:
        """Overrides are merged over defaults before the call."""
        provider = RecordingProvider()
        catalog = make_catalog(make_feature("svc", provider=provider, default_config={"a": 1, "b": 2}))

        CompositionGenerator(catalog).generate(["svc"], profile, {"svc": {"b": 3}})

        assert provider.calls == [{"a": 1, "b": 3}]

    def test_failure_is_wrapped(self, profile: ProjectProfile) -> None:
        """Provider exceptions surface as FeatureGenerationError with the cause."""
        boom = RuntimeError("boom")
        catalog = make_catalog(
            make_feature("ok"),
            make_feature("bad", provider=RecordingProvider(error=boom)),
        )

        with pytest.raises(FeatureGenerationError) as exc_info:
            CompositionGenerator(catalog).generate(["ok", "bad"], profile)

        assert exc_info.value.feature_id == "bad"
        assert exc_info.value.cause is boom

    def test_wrong_return_type(self, profile: ProjectProfile) -> None:
        """A provider returning something else fails the feature."""
        catalog = make_catalog(make_feature("odd", provider=CallableProvider(lambda p, c: {"files": {}})))

        with pytest.raises(FeatureGenerationError) as exc_info:
            CompositionGenerator(catalog).generate(["odd"], profile)

        assert isinstance(exc_info.value.cause, TypeError)

    def test_invalid_config_fails_before_provider(self, profile: ProjectProfile) -> None:
        """Schema violations fail generation without calling the provider."""
        provider = RecordingProvider()
        schema = {"type": "object", "properties": {"port": {"type": "integer"}}}
        catalog = make_catalog(make_feature("svc", provider=provider, config_schema=schema))

        with pytest.raises(FeatureGenerationError) as exc_info:
            CompositionGenerator(catalog).generate(["svc"], profile, {"svc": {"port": "x"}})

        assert isinstance(exc_info.value.cause, SchemaValidationError)
        assert provider.calls == []


class TestConcurrentGeneration:
    """Parallel production never changes the merged result."""

    def test_parallel_matches_sequential(self, profile: ProjectProfile) -> None:
        """Completion order does not affect the bundle."""
        catalog = make_catalog(
            make_feature("slow", provider=RecordingProvider(files={"p": "slow"}, delay=0.1)),
            make_feature("fast", provider=RecordingProvider(files={"p": "fast"})),
        )
        generator = CompositionGenerator(catalog, max_workers=4)

        sequential = generator.generate(["slow", "fast"], profile)
        parallel = generator.generate(["slow", "fast"], profile, parallel=True)

        assert parallel.files == sequential.files == {"p": "fast"}
        assert parallel.file_owners == {"p": "fast"}

    def test_parallel_failure_aborts(self, profile: ProjectProfile) -> None:
        """One failing provider fails the whole generation."""
        catalog = make_catalog(
            make_feature("ok", provider=RecordingProvider(delay=0.05)),
            make_feature("bad", provider=RecordingProvider(error=ValueError("nope"))),
        )

        with pytest.raises(FeatureGenerationError) as exc_info:
            CompositionGenerator(catalog).generate(["ok", "bad"], profile, parallel=True)

        assert exc_info.value.feature_id == "bad"

    def test_failure_skips_queued_providers(self, profile: ProjectProfile) -> None:
        """Jobs still queued when a provider fails never reach their provider."""
        queued = [RecordingProvider() for _ in range(4)]
        catalog = make_catalog(
            make_feature("bad", provider=RecordingProvider(error=ValueError("nope"))),
            make_feature("slow", provider=RecordingProvider(delay=0.3)),
            *(make_feature(f"queued-{i}", provider=p) for i, p in enumerate(queued)),
        )
        order = ["bad", "slow"] + [f"queued-{i}" for i in range(4)]

        with pytest.raises(FeatureGenerationError) as exc_info:
            CompositionGenerator(catalog, max_workers=2).generate(order, profile, parallel=True)

        assert exc_info.value.feature_id == "bad"
        assert [len(p.calls) for p in queued] == [0, 0, 0, 0]

    def test_timeout(self, profile: ProjectProfile) -> None:
        """A provider exceeding the per-call timeout fails with a timeout cause."""
        release = threading.Event()

        def hang(p, c):
            release.wait(5)
            raise RuntimeError("released")

        catalog = make_catalog(
            make_feature("quick"),
            make_feature("hang", provider=CallableProvider(hang)),
        )
        try:
            with pytest.raises(FeatureGenerationError) as exc_info:
                CompositionGenerator(catalog).generate(["quick", "hang"], profile, parallel=True, timeout=0.2)
        finally:
            release.set()

        assert exc_info.value.feature_id == "hang"
        assert isinstance(exc_info.value.cause, GenerationTimeoutError)
        assert exc_info.value.cause.timeout == 0.2

    def test_timeout_applies_sequentially(self, profile: ProjectProfile) -> None:
        """A timeout without parallelism still bounds each call."""
        release = threading.Event()

        def hang(p, c):
            release.wait(5)
            raise RuntimeError("released")

        catalog = make_catalog(make_feature("hang", provider=CallableProvider(hang)))
        try:
            with pytest.raises(FeatureGenerationError) as exc_info:
                CompositionGenerator(catalog).generate(["hang"], profile, timeout=0.2)
        finally:
            release.set()

        assert isinstance(exc_info.value.cause, GenerationTimeoutError)

    def test_fast_providers_within_timeout(self, profile: ProjectProfile) -> None:
        """A generous timeout does not affect normal generation."""
        catalog = _two_writers()

        bundle = CompositionGenerator(catalog).generate(["a", "b"], profile, parallel=True, timeout=5)

        assert bundle.files["p"] == "from-b"
