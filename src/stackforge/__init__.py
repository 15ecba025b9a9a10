"""
stackforge - feature composition for project scaffolding

stackforge resolves optional project features into a dependency-ordered set,
checks them for conflicts against a target project profile, and merges the
artifacts each feature contributes into a single generated bundle.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
