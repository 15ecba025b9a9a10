"""
stackforge features recommend command.

SUMMARY: Recommend features for a tier and feature flags
"""

from __future__ import annotations

import argparse

from stackforge.cli import OutputFormatter, add_json_flag, add_tier_arg
from stackforge.core.features import ProjectProfile, Tier, build_builtin_catalog, recommend_features
from stackforge.core.features.recommend import FLAG_FEATURES

SUMMARY = "Recommend features for a tier and feature flags"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_tier_arg(parser, required=True)
    parser.add_argument(
        "--flag",
        dest="flags",
        action="append",
        choices=sorted(FLAG_FEATURES),
        default=[],
        help="Enabled project feature flag (repeatable)",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    tier = Tier.parse(args.tier)
    profile = ProjectProfile(name="recommendation", tier=tier, features={flag: True for flag in args.flags})
    ids = recommend_features(profile, catalog=build_builtin_catalog())

    if formatter.json_mode:
        formatter.json_output({"tier": tier.value, "features": ids})
        return 0

    formatter.text(f"Recommended features for {tier.value} tier ({tier.description}):")
    for feature_id in ids:
        formatter.text(f"  - {feature_id}")
    return 0
