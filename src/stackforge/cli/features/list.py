"""
stackforge features list command.

SUMMARY: List built-in features
"""

from __future__ import annotations

import argparse

from stackforge.cli import OutputFormatter, add_json_flag
from stackforge.core.features import FeatureType, build_builtin_catalog

SUMMARY = "List built-in features"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument(
        "--type",
        dest="feature_type",
        choices=[t.value for t in FeatureType],
        help="Only list features of this type",
    )
    parser.add_argument(
        "--category",
        choices=build_builtin_catalog().categories(),
        help="Only list features in this category",
    )
    add_json_flag(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    catalog = build_builtin_catalog()

    if args.feature_type:
        features = catalog.list_by_type(args.feature_type)
    elif args.category:
        features = catalog.list_by_category(args.category)
    else:
        features = catalog.list_all()
    if args.feature_type and args.category:
        features = [f for f in features if f.category == args.category]

    if formatter.json_mode:
        formatter.json_output({"features": [f.to_dict() for f in features]})
        return 0

    if not features:
        formatter.text("No features found.")
        return 0
    width = max(len(f.id) for f in features)
    for feature in features:
        formatter.text(f"{feature.id:<{width}}  {feature.type.value:<13}  {feature.priority:>3}  {feature.name}")
    return 0
