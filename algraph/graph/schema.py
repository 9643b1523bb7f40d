"""
Centralized definitions for the Neo4j schema used by AL Graph.

The loader module relies on the metadata in this file to create indexes,
constraints, and to keep relationship semantics consistent across imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence


NODE_EXTENSION = "Extension"
NODE_OBJECT = "Object"
NODE_FIELD = "Field"
NODE_PROCEDURE = "Procedure"

REL_DECLARES = "DECLARES"
REL_HAS_FIELD = "HAS_FIELD"
REL_DECLARES_PROCEDURE = "DECLARES_PROCEDURE"
REL_EXTENDS = "EXTENDS"
REL_INTEGRATES_WITH = "INTEGRATES_WITH"


@dataclass(frozen=True)
class SchemaMetadata:
    """
    Encapsulates node and relationship configurations required by the loader.

    Attributes:
        node_keys: Mapping of node label -> property used as unique identifier.
        node_indexes: Mapping of node label -> sequence of additional indexed properties.
        relationship_types: Sequence of supported relationship type names.
    """

    node_keys: Mapping[str, str]
    node_indexes: Mapping[str, Sequence[str]]
    relationship_types: Sequence[str]


DEFAULT_SCHEMA = SchemaMetadata(
    node_keys={
        NODE_EXTENSION: "id",
        NODE_OBJECT: "id",
        NODE_FIELD: "id",
        NODE_PROCEDURE: "id",
    },
    node_indexes={
        NODE_EXTENSION: ("name",),
        NODE_OBJECT: ("name", "kind", "extension"),
        NODE_FIELD: ("name", "objectName"),
        NODE_PROCEDURE: ("name", "objectName", "eventRole"),
    },
    relationship_types=(
        REL_DECLARES,
        REL_HAS_FIELD,
        REL_DECLARES_PROCEDURE,
        REL_EXTENDS,
        REL_INTEGRATES_WITH,
    ),
)


def format_node_properties(payload: Dict[str, object]) -> Dict[str, object]:
    """
    Normalize node property payloads before upsert.

    Removes None values so that merges are deterministic and unwraps enum
    members into their plain values.
    """

    normalized: Dict[str, object] = {}
    for key, value in payload.items():
        if value is None:
            continue
        normalized[key] = getattr(value, "value", value)
    return normalized
