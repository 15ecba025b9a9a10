"""Shared CLI utilities."""
from __future__ import annotations

import argparse
from pathlib import Path

from stackforge.core.config import LoggingConfig
from stackforge.core.stdlib_logging import configure_logging


def get_repo_root(args: argparse.Namespace) -> Path:
    """Get project root from ``--repo-root`` or fall back to the current directory."""
    raw = getattr(args, "repo_root", None)
    if raw:
        return Path(raw).resolve()
    return Path.cwd().resolve()


def setup_cli_logging(args: argparse.Namespace, repo_root: Path) -> None:
    """Configure logging from the project's ``logging`` section.

    ``--verbose`` overrides the configured level with DEBUG.
    """
    cfg = LoggingConfig(repo_root=repo_root)
    level = "DEBUG" if getattr(args, "verbose", False) else cfg.level
    configure_logging(level=level, log_path=cfg.file)


__all__ = ["get_repo_root", "setup_cli_logging"]
