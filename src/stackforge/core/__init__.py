"""Core library for stackforge: features, configuration, and shared utilities."""
