"""
Graph schema utilities and Neo4j integration for AL Graph.
"""

from .schema import (
    DEFAULT_SCHEMA,
    NODE_EXTENSION,
    NODE_FIELD,
    NODE_OBJECT,
    NODE_PROCEDURE,
    REL_DECLARES,
    REL_DECLARES_PROCEDURE,
    REL_EXTENDS,
    REL_HAS_FIELD,
    REL_INTEGRATES_WITH,
    SchemaMetadata,
)

__all__ = [
    "DEFAULT_SCHEMA",
    "SchemaMetadata",
    "NODE_EXTENSION",
    "NODE_OBJECT",
    "NODE_FIELD",
    "NODE_PROCEDURE",
    "REL_DECLARES",
    "REL_HAS_FIELD",
    "REL_DECLARES_PROCEDURE",
    "REL_EXTENDS",
    "REL_INTEGRATES_WITH",
]
