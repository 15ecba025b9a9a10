"""stackforge configuration system.

Usage:
    from stackforge.core.config import ConfigManager, CompositionConfig

    manager = ConfigManager(repo_root=Path("/path/to/project"))
    config = manager.load_config()

    composition = CompositionConfig(repo_root=Path("/path/to/project"))
    composition.singleton_types
"""
from __future__ import annotations

from .manager import ConfigManager, get_project_config_dir
from .cache import get_cached_config, clear_all_caches, is_cached
from .base import BaseDomainConfig
from .domains import CompositionConfig, LoggingConfig

__all__ = [
    "ConfigManager",
    "get_project_config_dir",
    "BaseDomainConfig",
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    "CompositionConfig",
    "LoggingConfig",
]
