"""
Configuration for the catalog generator.
"""
from .settings import Settings, get_settings, parse_patterns

__all__ = ["Settings", "get_settings", "parse_patterns"]
