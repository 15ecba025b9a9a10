"""Centralized configuration caching.

Provides a single source of truth for loaded configuration across all domain
configs. Cache keys include a fingerprint of ``STACKFORGE_*`` environment
variables and project config file mtimes so that edits are picked up.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, Optional

_config_cache: Dict[str, Dict[str, Any]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        return Path.cwd().resolve()
    return Path(repo_root).expanduser().resolve()


def _cache_key(repo_root: Optional[Path]) -> str:
    from .manager import ENV_PREFIX, get_project_config_dir
    from stackforge.core.utils.io import iter_yaml_files

    root = _normalize_repo_root(repo_root)

    env_items = sorted(
        (k, os.environ.get(k, ""))
        for k in os.environ.keys()
        if k.startswith(ENV_PREFIX)
    )
    files = []
    for p in iter_yaml_files(get_project_config_dir(root) / "config"):
        st = p.stat()
        files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))

    fingerprint = hashlib.sha256(repr((env_items, files)).encode("utf-8")).hexdigest()[:12]
    return f"{root}:{fingerprint}"


def get_cached_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Return the merged configuration for ``repo_root``, loading it once."""
    key = _cache_key(repo_root)
    cached = _config_cache.get(key)
    if cached is None:
        from .manager import ConfigManager

        cached = ConfigManager(repo_root=_normalize_repo_root(repo_root)).load_config()
        _config_cache[key] = cached
    return cached


def is_cached(repo_root: Optional[Path] = None) -> bool:
    return _cache_key(repo_root) in _config_cache


def clear_all_caches() -> None:
    """Drop every cached configuration (tests and long-running processes)."""
    _config_cache.clear()


__all__ = ["get_cached_config", "is_cached", "clear_all_caches"]
