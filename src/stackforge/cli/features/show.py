"""
stackforge features show command.

SUMMARY: Show a feature's descriptor
"""

from __future__ import annotations

import argparse

from stackforge.cli import OutputFormatter, add_json_flag
from stackforge.core.exceptions import FeatureNotFoundError
from stackforge.core.features import build_builtin_catalog

SUMMARY = "Show a feature's descriptor"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("feature_id", help="Feature identifier (e.g., api-rest)")
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    catalog = build_builtin_catalog()

    try:
        feature = catalog.lookup(args.feature_id)
    except FeatureNotFoundError as e:
        formatter.error(e, error_code="feature_not_found")
        return 1

    data = feature.to_dict()
    if formatter.json_mode:
        formatter.json_output(data)
        return 0

    formatter.text(f"{feature.id}: {feature.name}")
    if feature.description:
        formatter.text(f"  {feature.description}")
    formatter.text(f"  type: {data['type']}")
    formatter.text(f"  category: {feature.category or '-'}")
    formatter.text(f"  priority: {feature.priority}")
    formatter.text(f"  tiers: {data['minTier'] or '*'}..{data['maxTier'] or '*'}")
    formatter.text(f"  dependencies: {', '.join(feature.dependencies) or '-'}")
    formatter.text(f"  conflicts: {', '.join(data['conflicts']) or '-'}")
    return 0
