"""Composition generation: invoke artifact providers and merge their output.

Generation has two phases:

- produce: call each feature's provider, inline or fanned out over a
  thread pool, with an optional per-call timeout;
- merge: fold the artifacts into one bundle strictly in resolved order.

Completion order never affects the bundle. Any failure aborts the whole
generation and nothing produced so far is returned.
"""
from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence

from stackforge.core.exceptions import (
    FeatureGenerationError,
    GenerationTimeoutError,
    SchemaValidationError,
)
from stackforge.core.schemas.validation import schema_errors
from stackforge.core.utils.merge import unique_in_order

from .catalog import FeatureCatalog
from .types import Feature, FeatureArtifacts, GeneratedBundle, ProjectProfile
from .validator import feature_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Job:
    index: int
    feature: Feature
    config: Dict[str, Any]


class CompositionGenerator:
    """Produce and merge artifacts for an ordered list of features."""

    def __init__(self, catalog: FeatureCatalog, *, max_workers: int = 4) -> None:
        self._catalog = catalog
        self.max_workers = max(1, int(max_workers))

    def generate(
        self,
        feature_ids: Sequence[str],
        profile: ProjectProfile,
        feature_configs: Optional[Mapping[str, Mapping[str, Any]]] = None,
        *,
        parallel: bool = False,
        timeout: Optional[float] = None,
    ) -> GeneratedBundle:
        """Generate the merged bundle for ``feature_ids`` (already resolved and ordered).

        Args:
            feature_ids: Resolved feature ids, dependencies first
            profile: Target project profile
            feature_configs: Per-feature overrides merged over each feature's defaults
            parallel: Invoke providers concurrently
            timeout: Per-provider time budget in seconds (None = unbounded)

        Raises:
            FeatureGenerationError: A provider failed, returned the wrong type,
                received invalid configuration, or timed out (cause is
                ``GenerationTimeoutError``).
        """
        jobs = [
            _Job(index=i, feature=feature, config=feature_config(feature, feature_configs))
            for i, feature in enumerate(self._catalog.lookup(fid) for fid in feature_ids)
        ]
        if not jobs:
            return GeneratedBundle()

        if not parallel and timeout is None:
            produced = [self._invoke(job, profile) for job in jobs]
        else:
            workers = min(self.max_workers, len(jobs)) if parallel else 1
            produced = self._produce_concurrently(jobs, profile, workers=workers, timeout=timeout)

        return self._merge(jobs, produced)

    # ------------------------------------------------------------------
    # Produce phase
    # ------------------------------------------------------------------

    def _invoke(self, job: _Job, profile: ProjectProfile) -> FeatureArtifacts:
        feature = job.feature
        try:
            if feature.config_schema:
                errors = schema_errors(job.config, feature.config_schema)
                if errors:
                    raise SchemaValidationError(
                        f"Invalid configuration for feature '{feature.id}': {'; '.join(errors)}",
                        errors=errors,
                    )
            artifacts = feature.provider.generate(profile, job.config)
            if not isinstance(artifacts, FeatureArtifacts):
                raise TypeError(
                    f"provider returned {type(artifacts).__name__}, expected FeatureArtifacts"
                )
        except FeatureGenerationError:
            raise
        except Exception as exc:
            logger.error("Feature '%s' failed to generate: %s", feature.id, exc)
            raise FeatureGenerationError(feature.id, exc) from exc
        return artifacts

    def _produce_concurrently(
        self,
        jobs: List[_Job],
        profile: ProjectProfile,
        *,
        workers: int,
        timeout: Optional[float],
    ) -> List[FeatureArtifacts]:
        # Start times are recorded by the worker so queued jobs are not charged
        # for time spent waiting on a free thread.
        started: Dict[int, float] = {}
        aborted = threading.Event()

        def run(job: _Job) -> Optional[FeatureArtifacts]:
            # A worker freed by a failure can dequeue the next job before the
            # pool is shut down; such jobs never reach their provider.
            if aborted.is_set():
                return None
            started[job.index] = time.monotonic()
            try:
                return self._invoke(job, profile)
            except BaseException:
                aborted.set()
                raise

        results: Dict[int, FeatureArtifacts] = {}
        executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="stackforge-generate"
        )
        try:
            futures = {executor.submit(run, job): job for job in jobs}
            pending = set(futures)
            while pending:
                wait_for = self._next_deadline(pending, futures, started, timeout)
                done, pending = concurrent.futures.wait(
                    pending, timeout=wait_for, return_when=concurrent.futures.FIRST_COMPLETED
                )
                for future in sorted(done, key=lambda f: futures[f].index):
                    artifacts = future.result()
                    if artifacts is not None:
                        results[futures[future].index] = artifacts

                if timeout is None:
                    continue
                now = time.monotonic()
                for future in sorted(pending, key=lambda f: futures[f].index):
                    job = futures[future]
                    start = started.get(job.index)
                    if start is not None and now - start >= timeout:
                        logger.error("Feature '%s' timed out after %ss", job.feature.id, timeout)
                        aborted.set()
                        raise FeatureGenerationError(
                            job.feature.id, GenerationTimeoutError(job.feature.id, timeout)
                        )
        finally:
            # Drop queued work; a provider already running cannot be interrupted
            # and its result is discarded.
            executor.shutdown(wait=False, cancel_futures=True)

        return [results[job.index] for job in jobs]

    @staticmethod
    def _next_deadline(
        pending: set,
        futures: Dict["concurrent.futures.Future[FeatureArtifacts]", _Job],
        started: Dict[int, float],
        timeout: Optional[float],
    ) -> Optional[float]:
        if timeout is None:
            return None
        starts = [started[futures[f].index] for f in pending if futures[f].index in started]
        if not starts:
            return timeout
        return max(0.0, min(starts) + timeout - time.monotonic())

    # ------------------------------------------------------------------
    # Merge phase
    # ------------------------------------------------------------------

    def _merge(self, jobs: List[_Job], produced: List[FeatureArtifacts]) -> GeneratedBundle:
        bundle = GeneratedBundle()
        templates: List[str] = []
        assets: List[str] = []

        for job, artifacts in zip(jobs, produced):
            feature_id = job.feature.id
            for path, content in artifacts.files.items():
                previous = bundle.file_owners.get(path)
                if previous is not None and previous != feature_id:
                    logger.debug("File %s from %s overwritten by %s", path, previous, feature_id)
                bundle.files[path] = content
                bundle.file_owners[path] = feature_id
            templates.extend(artifacts.templates)
            assets.extend(artifacts.assets)
            bundle.metadata.update(artifacts.metadata)
            bundle.post_actions.extend(artifacts.post_actions)

        bundle.templates = unique_in_order(templates)
        bundle.assets = unique_in_order(assets)
        logger.debug(
            "Merged %d feature(s): %d file(s), %d post-action(s)",
            len(jobs),
            len(bundle.files),
            len(bundle.post_actions),
        )
        return bundle


__all__ = ["CompositionGenerator"]
