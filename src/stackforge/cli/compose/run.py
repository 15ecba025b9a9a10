"""
stackforge compose run command.

SUMMARY: Resolve, validate and generate a feature composition

A provider that exceeds the generation timeout keeps running in a worker
thread that cannot be interrupted. After reporting the timeout the command
exits the process immediately instead of waiting for that thread.
"""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path
from typing import Optional

from stackforge.cli import (
    OutputFormatter,
    add_standard_flags,
    add_tier_arg,
    get_repo_root,
    setup_cli_logging,
)
from stackforge.core.config import CompositionConfig
from stackforge.core.exceptions import (
    CompositionConflictError,
    FeatureGenerationError,
    GenerationTimeoutError,
    StackforgeError,
)
from stackforge.core.features import (
    CompositionOptions,
    CompositionRequest,
    FeatureComposer,
    ProjectProfile,
    Tier,
    load_profile,
    profile_feature_configs,
    recommend_features,
)

SUMMARY = "Resolve, validate and generate a feature composition"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CONFLICT = 2


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "features",
        nargs="*",
        help="Feature ids to compose (default: recommendations for the profile)",
    )
    parser.add_argument("--profile", help="Project profile YAML file")
    parser.add_argument("--name", help="Project name when no profile file is given")
    add_tier_arg(parser)
    parser.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="ID",
        help="Exclude a feature (repeatable)",
    )
    parser.add_argument(
        "--auto-resolve",
        action="store_true",
        help="Skip unknown features with a warning instead of failing",
    )
    parser.add_argument(
        "--fail-on-conflicts",
        action="store_true",
        help="Abort before generation when conflicts are found",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Resolve and validate only; do not generate",
    )
    parser.epilog = (
        "A generation timeout ends the process at once; providers still running are abandoned."
    )
    add_standard_flags(parser)


def _build_profile(args: argparse.Namespace, repo_root: Path, config: CompositionConfig) -> ProjectProfile:
    tier: Optional[Tier] = Tier.parse(args.tier) if args.tier else None
    if args.profile:
        path = Path(args.profile)
        if not path.is_absolute():
            path = repo_root / path
        profile = load_profile(path, singleton_types=config.singleton_types)
        if tier is not None:
            profile.tier = tier
        return profile
    return ProjectProfile(
        name=args.name or repo_root.name,
        tier=tier or Tier.BASIC,
        singleton_types=config.singleton_types,
    )


def _report_generation_failure(formatter: OutputFormatter, error: FeatureGenerationError) -> None:
    if error.result is None:
        formatter.error(error, error_code=error.to_json_error()["code"])
        return
    if formatter.json_mode:
        formatter.json_output(
            {"status": "error", "error": error.to_json_error(), **error.result.to_dict()}
        )
    else:
        formatter.text(error.result.summary())
        formatter.error(error)


def main(args: argparse.Namespace) -> int:
    """Compose features and print the summary or JSON result."""
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        setup_cli_logging(args, repo_root)
        config = CompositionConfig(repo_root=repo_root)
        profile = _build_profile(args, repo_root, config)
        composer = FeatureComposer.with_builtin_features(config=config)

        feature_ids = list(args.features) or recommend_features(profile, catalog=composer.catalog)
        request = CompositionRequest(
            features=feature_ids,
            profile=profile,
            feature_configs=profile_feature_configs(profile),
            options=CompositionOptions(
                auto_resolve_dependencies=args.auto_resolve or config.auto_resolve_dependencies,
                fail_on_conflicts=args.fail_on_conflicts or config.fail_on_conflicts,
                excluded_feature_ids=frozenset(args.exclude),
                dry_run=args.dry_run,
            ),
        )
        result = composer.compose(request)
    except CompositionConflictError as e:
        if formatter.json_mode:
            formatter.json_output({"status": "conflict", **e.result.to_dict()})
        else:
            formatter.text(e.result.summary())
            formatter.error(e)
        return EXIT_CONFLICT
    except FeatureGenerationError as e:
        _report_generation_failure(formatter, e)
        if isinstance(e.cause, GenerationTimeoutError):
            # Worker threads are non-daemon; a hung provider would block exit.
            sys.stdout.flush()
            sys.stderr.flush()
            os._exit(EXIT_ERROR)
        return EXIT_ERROR
    except StackforgeError as e:
        formatter.error(e, error_code=e.to_json_error()["code"])
        return EXIT_ERROR

    if formatter.json_mode:
        formatter.json_output({"status": "success", **result.to_dict()})
    else:
        formatter.text(result.summary())
    return EXIT_OK
