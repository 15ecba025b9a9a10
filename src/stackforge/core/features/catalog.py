"""Feature catalog: append-only in-memory registry of feature descriptors."""
from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Iterator, List

from stackforge.core.exceptions import DuplicateFeatureError, FeatureNotFoundError, InvalidFeatureError

from .types import Feature, FeatureType

logger = logging.getLogger(__name__)


def _display_order(features: Iterable[Feature]) -> List[Feature]:
    # Descending priority, then ascending id: a total order.
    return sorted(features, key=lambda f: (-f.priority, f.id))


class FeatureCatalog:
    """Registry of features indexed by id, type and category.

    The catalog is built once before any composition runs and is read-only
    afterwards; only ``register`` takes the lock.
    """

    def __init__(self, features: Iterable[Feature] = ()) -> None:
        self._features: Dict[str, Feature] = {}
        self._by_type: Dict[FeatureType, List[Feature]] = {}
        self._by_category: Dict[str, List[Feature]] = {}
        self._lock = threading.Lock()
        self.register_all(features)

    def register(self, feature: Feature) -> None:
        """Add ``feature`` to the catalog.

        Raises:
            InvalidFeatureError: Empty id or missing artifact provider.
            DuplicateFeatureError: The id is already registered.
        """
        feature_id = (feature.id or "").strip()
        if not feature_id:
            raise InvalidFeatureError("Feature ID cannot be empty")
        provider = feature.provider
        if provider is None or not callable(getattr(provider, "generate", None)):
            raise InvalidFeatureError(f"Feature {feature.id} must have an artifact provider", feature_id=feature.id)

        with self._lock:
            existing = self._features.get(feature.id)
            if existing is not None:
                raise DuplicateFeatureError(feature.id, existing_version=existing.version)
            self._features[feature.id] = feature
            self._by_type.setdefault(feature.type, []).append(feature)
            if feature.category:
                self._by_category.setdefault(feature.category, []).append(feature)

        logger.debug("Registered feature %s (%s)", feature.id, feature.type.value)

    def register_all(self, features: Iterable[Feature]) -> None:
        for feature in features:
            self.register(feature)

    def lookup(self, feature_id: str) -> Feature:
        try:
            return self._features[feature_id]
        except KeyError:
            raise FeatureNotFoundError(feature_id) from None

    def __contains__(self, feature_id: object) -> bool:
        return feature_id in self._features

    def __len__(self) -> int:
        return len(self._features)

    def __iter__(self) -> Iterator[Feature]:
        return iter(self.list_all())

    def ids(self) -> List[str]:
        return sorted(self._features)

    def list_all(self) -> List[Feature]:
        return _display_order(self._features.values())

    def list_by_type(self, feature_type: FeatureType | str) -> List[Feature]:
        return _display_order(self._by_type.get(FeatureType(feature_type), []))

    def list_by_category(self, category: str) -> List[Feature]:
        return _display_order(self._by_category.get(category, []))

    def categories(self) -> List[str]:
        return sorted(self._by_category)


__all__ = ["FeatureCatalog"]
