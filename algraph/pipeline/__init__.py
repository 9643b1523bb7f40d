"""
Analysis pipeline that turns AL source files into extensions and integrations.
"""

from .analyze import ProjectAnalyzer
from .parser import ALParser
from .resolver import IntegrationResolver

__all__ = ["ALParser", "IntegrationResolver", "ProjectAnalyzer"]
