"""
Configuration utilities for AL Graph services.
"""

from .settings import (
    AnalyzerSettings,
    Neo4jSettings,
    load_analyzer_settings,
    load_settings,
)

__all__ = [
    "AnalyzerSettings",
    "Neo4jSettings",
    "load_analyzer_settings",
    "load_settings",
]
