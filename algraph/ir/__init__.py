"""
Intermediate Representation (IR) models for AL Graph.

The IR layer captures what the extractor recognised in AL source files before
it is resolved into integrations, serialized, or persisted into the graph.
"""

from .models import (
    ALObject,
    BASE_KINDS,
    CalcMethod,
    DerivedField,
    Event,
    EventRole,
    EXTENSION_KINDS,
    Extension,
    Field,
    Integration,
    IntegrationKind,
    ObjectKind,
    Parameter,
    Procedure,
    ProjectAnalysis,
    merge_dependencies,
    parse_element_id,
)

__all__ = [
    "ALObject",
    "BASE_KINDS",
    "CalcMethod",
    "DerivedField",
    "Event",
    "EventRole",
    "EXTENSION_KINDS",
    "Extension",
    "Field",
    "Integration",
    "IntegrationKind",
    "ObjectKind",
    "Parameter",
    "Procedure",
    "ProjectAnalysis",
    "merge_dependencies",
    "parse_element_id",
]
