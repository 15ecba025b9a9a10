from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from stackforge.core.features.types import CompositionResult, ConflictInfo


class StackforgeError(Exception):
    """Base exception for stackforge."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class ConfigError(StackforgeError):
    """Raised when configuration cannot be loaded or is invalid."""


# ---------------------------------------------------------------------------
# Registration-time errors
# ---------------------------------------------------------------------------


class RegistrationError(StackforgeError):
    """Raised when a feature cannot be registered in a catalog."""


class DuplicateFeatureError(RegistrationError):
    """Raised when a feature id is registered twice."""

    def __init__(self, feature_id: str, *, existing_version: str = "") -> None:
        message = f"Feature '{feature_id}' is already registered"
        if existing_version:
            message += f" with version {existing_version}"
        super().__init__(message, context={"feature_id": feature_id})
        self.feature_id = feature_id


class InvalidFeatureError(RegistrationError):
    """Raised when a feature descriptor is incomplete."""

    def __init__(self, message: str, *, feature_id: str = "") -> None:
        super().__init__(message, context={"feature_id": feature_id})
        self.feature_id = feature_id


# ---------------------------------------------------------------------------
# Resolution-time errors
# ---------------------------------------------------------------------------


class FeatureNotFoundError(StackforgeError, LookupError):
    """Raised when a feature id is not present in the catalog."""

    def __init__(self, feature_id: str, *, required_by: Optional[str] = None) -> None:
        message = f"Feature '{feature_id}' not found"
        if required_by:
            message += f" (required by '{required_by}')"
        ctx: Dict[str, Any] = {"feature_id": feature_id}
        if required_by:
            ctx["required_by"] = required_by
        StackforgeError.__init__(self, message, context=ctx)
        self.feature_id = feature_id
        self.required_by = required_by


class CyclicDependencyError(StackforgeError):
    """Raised when the declared dependency graph contains a cycle.

    ``cycle`` lists the full path, starting and ending with the same id,
    e.g. ``["a", "b", "c", "a"]``.
    """

    def __init__(self, cycle: List[str]) -> None:
        self.cycle = list(cycle)
        super().__init__(
            "Cyclic feature dependency: " + " -> ".join(self.cycle),
            context={"cycle": self.cycle},
        )


# ---------------------------------------------------------------------------
# Validation-time errors
# ---------------------------------------------------------------------------


class CompositionConflictError(StackforgeError):
    """Raised by the composer when conflicts exist and fail_on_conflicts is set.

    ``result`` carries the resolved features, conflicts and warnings collected
    before the abort; its bundle is always None.
    """

    def __init__(self, conflicts: List["ConflictInfo"], result: "CompositionResult") -> None:
        self.conflicts = list(conflicts)
        self.result = result
        pairs = [f"{c.feature_a}/{c.feature_b}" for c in self.conflicts]
        super().__init__(
            f"Composition has {len(self.conflicts)} conflict(s): {', '.join(pairs)}",
            context={"conflicts": [c.to_dict() for c in self.conflicts]},
        )


class SchemaValidationError(StackforgeError, ValueError):
    """Raised when a payload fails JSON Schema validation."""

    def __init__(self, message: str = "", *, errors: Optional[List[str]] = None) -> None:
        StackforgeError.__init__(self, message, context={"errors": list(errors or [])})
        self.errors = list(errors or [])


# ---------------------------------------------------------------------------
# Generation-time errors
# ---------------------------------------------------------------------------


class GenerationTimeoutError(StackforgeError, TimeoutError):
    """Raised when an artifact provider exceeds its time budget."""

    def __init__(self, feature_id: str, timeout: float) -> None:
        StackforgeError.__init__(
            self,
            f"Feature '{feature_id}' did not finish generating within {timeout:g}s",
            context={"feature_id": feature_id, "timeout": timeout},
        )
        self.feature_id = feature_id
        self.timeout = timeout


class FeatureGenerationError(StackforgeError):
    """Raised when a feature's artifact provider fails.

    Generation is all-or-nothing: when this is raised no bundle is produced.
    When raised from a composition, ``result`` holds the resolved features,
    conflicts and warnings collected before the failure; its bundle is None.
    """

    def __init__(
        self,
        feature_id: str,
        cause: BaseException,
        *,
        result: Optional["CompositionResult"] = None,
    ) -> None:
        super().__init__(
            f"Failed to generate feature '{feature_id}': {cause}",
            context={"feature_id": feature_id, "cause": type(cause).__name__},
        )
        self.feature_id = feature_id
        self.cause = cause
        self.result = result


__all__ = [
    "StackforgeError",
    "ConfigError",
    "RegistrationError",
    "DuplicateFeatureError",
    "InvalidFeatureError",
    "FeatureNotFoundError",
    "CyclicDependencyError",
    "CompositionConflictError",
    "SchemaValidationError",
    "GenerationTimeoutError",
    "FeatureGenerationError",
]
