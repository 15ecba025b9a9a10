"""Feature composer: the single entry point for composition runs.

Sequence: resolve -> validate -> (abort on conflicts) -> (stop on dry run)
-> generate -> result. Only the composer decides whether conflicts are fatal.
"""
from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional

from stackforge.core.exceptions import CompositionConflictError, FeatureGenerationError

from .catalog import FeatureCatalog
from .generator import CompositionGenerator
from .resolver import DependencyResolver
from .types import CompositionRequest, CompositionResult, ProjectProfile
from .validator import CompositionValidator

if TYPE_CHECKING:
    from stackforge.core.config.domains.composition import CompositionConfig

logger = logging.getLogger(__name__)


class FeatureComposer:
    """Compose features from a catalog into a generated bundle.

    Args:
        catalog: Read-only feature catalog shared by every run
        config: Composition settings (generation concurrency and timeout);
            loaded from the project configuration when omitted
        repo_root: Project root used to locate configuration when ``config``
            is omitted
    """

    def __init__(
        self,
        catalog: FeatureCatalog,
        *,
        config: Optional["CompositionConfig"] = None,
        repo_root: Optional[Path] = None,
    ) -> None:
        if config is None:
            # Lazy import to avoid circular dependencies
            from stackforge.core.config.domains.composition import CompositionConfig

            config = CompositionConfig(repo_root=repo_root)
        self.catalog = catalog
        self.config = config
        self.resolver = DependencyResolver(catalog)
        self.validator = CompositionValidator(catalog)
        self.generator = CompositionGenerator(catalog, max_workers=config.max_workers)

    @classmethod
    def with_builtin_features(
        cls,
        *,
        config: Optional["CompositionConfig"] = None,
        repo_root: Optional[Path] = None,
    ) -> "FeatureComposer":
        from .builtin import build_builtin_catalog

        return cls(build_builtin_catalog(), config=config, repo_root=repo_root)

    def compose(self, request: CompositionRequest) -> CompositionResult:
        """Run one composition.

        Returns:
            The result. ``bundle`` is None on a dry run.

        Raises:
            FeatureNotFoundError, CyclicDependencyError: Resolution failed.
            CompositionConflictError: Conflicts exist and ``fail_on_conflicts``
                is set; ``error.result`` holds the diagnostics.
            FeatureGenerationError: A provider failed; no bundle is returned and
                ``error.result`` holds the diagnostics.
        """
        options = request.options
        profile = request.profile
        started = time.monotonic()
        logger.info("Composing %d requested feature(s) for %s", len(request.features), profile.name)

        resolution = self.resolver.resolve(request.features, options)
        report = self.validator.validate(resolution.order, profile, request.feature_configs)

        result = CompositionResult(
            resolved_features=list(resolution.order),
            dependency_edges={
                fid: list(self.catalog.lookup(fid).dependencies) for fid in resolution.order
            },
            conflicts=list(report.conflicts),
            warnings=[*resolution.warnings, *report.warnings],
            metadata={
                "project": profile.name,
                "tier": profile.tier.value,
                "featureCount": len(resolution.order),
                "dryRun": options.dry_run,
            },
        )

        if result.conflicts and options.fail_on_conflicts:
            result.metadata["durationMs"] = self._elapsed_ms(started)
            raise CompositionConflictError(result.conflicts, result)

        if options.dry_run:
            result.metadata["durationMs"] = self._elapsed_ms(started)
            return result

        parallel = self.config.parallel if options.parallel is None else options.parallel
        timeout = self.config.timeout_seconds if options.timeout_seconds is None else options.timeout_seconds
        try:
            bundle = self.generator.generate(
                resolution.order,
                profile,
                request.feature_configs,
                parallel=parallel,
                timeout=timeout or None,
            )
        except FeatureGenerationError as exc:
            result.metadata["durationMs"] = self._elapsed_ms(started)
            exc.result = result
            raise
        result.bundle = bundle
        result.post_actions = list(bundle.post_actions)
        result.metadata["durationMs"] = self._elapsed_ms(started)
        logger.info(
            "Composed %d feature(s) into %d file(s)", len(result.resolved_features), len(bundle.files)
        )
        return result

    def recommend(self, profile: ProjectProfile) -> List[str]:
        """Suggest feature ids for ``profile`` that exist in this catalog."""
        from .recommend import recommend_features

        return recommend_features(profile, catalog=self.catalog)

    @staticmethod
    def _elapsed_ms(started: float) -> int:
        return int((time.monotonic() - started) * 1000)


__all__ = ["FeatureComposer"]
