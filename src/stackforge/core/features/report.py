"""Human-readable and JSON renderings of composition results."""
from __future__ import annotations

from typing import Any, Dict, List

from .types import CompositionResult


def format_summary(result: CompositionResult) -> str:
    """Render a plain-text summary of ``result``.

    Works for dry runs and conflict aborts, where no bundle exists.
    """
    files = len(result.bundle.files) if result.bundle is not None else 0
    lines: List[str] = [
        "Feature Composition Summary:",
        f"- Resolved Features: {len(result.resolved_features)}",
        f"- Generated Files: {files}" + ("" if result.bundle is not None else " (not generated)"),
        f"- Post Actions: {len(result.post_actions)}",
        f"- Conflicts: {len(result.conflicts)}",
        f"- Warnings: {len(result.warnings)}",
    ]

    if result.resolved_features:
        lines += ["", "Included Features:"]
        for feature_id in result.resolved_features:
            deps = result.dependency_edges.get(feature_id) or []
            suffix = f" (depends on: {', '.join(deps)})" if deps else ""
            lines.append(f"  - {feature_id}{suffix}")

    if result.conflicts:
        lines += ["", "Conflicts:"]
        for conflict in result.conflicts:
            lines.append(
                f"  - {conflict.feature_a} vs {conflict.feature_b} [{conflict.kind.value}]: "
                f"{conflict.description}"
            )
            lines.append(f"    resolution: {conflict.resolution}")

    if result.warnings:
        lines += ["", "Warnings:"]
        lines.extend(f"  - {warning}" for warning in result.warnings)

    if result.post_actions:
        lines += ["", "Post Actions:"]
        for action in result.post_actions:
            command = " ".join([action.command, *action.args])
            lines.append(f"  - [{action.type}] {action.description}: {command}")

    return "\n".join(lines) + "\n"


def result_to_dict(result: CompositionResult) -> Dict[str, Any]:
    return {
        "resolvedFeatures": list(result.resolved_features),
        "bundle": result.bundle.to_dict() if result.bundle is not None else None,
        "dependencies": {k: list(v) for k, v in result.dependency_edges.items()},
        "conflicts": [c.to_dict() for c in result.conflicts],
        "warnings": list(result.warnings),
        "postActions": [a.to_dict() for a in result.post_actions],
        "metadata": dict(result.metadata),
    }


__all__ = ["format_summary", "result_to_dict"]
