"""Domain-specific configuration accessors."""
from __future__ import annotations

from .composition import CompositionConfig
from .logging import LoggingConfig

__all__ = ["CompositionConfig", "LoggingConfig"]
