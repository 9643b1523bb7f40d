"""
IR model definitions for AL Graph.

These dataclasses represent the structured intermediate representation
produced after scanning Business Central AL source files. Every record is
frozen: a parsed file is reduced to its model once and is never mutated
afterwards. Relationships between records are name based, so no record holds
a reference to another file's model.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Iterable, Iterator, Optional, Tuple


class ObjectKind(str, Enum):
    """Declaration keywords recognised at the top level of an AL file."""

    TABLE = "table"
    PAGE = "page"
    CODEUNIT = "codeunit"
    QUERY = "query"
    REPORT = "report"
    XMLPORT = "xmlport"
    ENUM = "enum"
    TABLE_EXTENSION = "tableextension"
    PAGE_EXTENSION = "pageextension"
    REPORT_EXTENSION = "reportextension"
    ENUM_EXTENSION = "enumextension"

    @property
    def is_extension(self) -> bool:
        return self.value.endswith("extension")


BASE_KINDS: Tuple[ObjectKind, ...] = tuple(kind for kind in ObjectKind if not kind.is_extension)
EXTENSION_KINDS: Tuple[ObjectKind, ...] = tuple(kind for kind in ObjectKind if kind.is_extension)


class EventRole(str, Enum):
    """Whether an event procedure raises an event or reacts to one."""

    PUBLISHER = "publisher"
    SUBSCRIBER = "subscriber"


class CalcMethod(str, Enum):
    """Aggregation methods a flowfield CalcFormula can start with."""

    SUM = "Sum"
    COUNT = "Count"
    AVERAGE = "Average"
    MIN = "Min"
    MAX = "Max"
    LOOKUP = "Lookup"
    UNKNOWN = "Unknown"


class IntegrationKind(str, Enum):
    """Kinds of cross-extension coupling inferred by the resolver."""

    EVENT = "event"
    DERIVED_FIELD = "derived-field"
    REFERENCE = "reference"


def parse_element_id(*segments: str) -> str:
    """
    Construct a stable synthetic identifier for graph elements.

    Args:
        *segments: Path segments, e.g. extension name, object kind, object id.

    Returns:
        Canonical identifier string.
    """

    return "/".join(str(segment).strip() for segment in segments if segment not in (None, ""))


@dataclass(frozen=True, slots=True)
class Parameter:
    """A single procedure parameter."""

    name: str
    type: str = "Variant"
    is_var: bool = False


@dataclass(frozen=True, slots=True)
class Procedure:
    """
    A procedure signature found inside an object body.

    `event_role` is only set when `is_event` is true.
    """

    name: str
    parameters: Tuple[Parameter, ...] = ()
    return_type: Optional[str] = None
    is_event: bool = False
    event_role: Optional[EventRole] = None
    is_local: bool = False


@dataclass(frozen=True, slots=True)
class Field:
    """A table field declaration. `calc_formula` is only present for flowfields."""

    field_id: int
    name: str
    type: str
    is_flowfield: bool = False
    calc_formula: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ALObject:
    """A top-level AL declaration such as a table, page or table extension."""

    kind: ObjectKind
    object_id: int
    name: str
    extends: Optional[str] = None
    fields: Tuple[Field, ...] = ()
    procedures: Tuple[Procedure, ...] = ()

    def event_procedures(self) -> Iterator[Procedure]:
        return (procedure for procedure in self.procedures if procedure.is_event)

    def flowfields(self) -> Iterator[Field]:
        return (field_ for field_ in self.fields if field_.is_flowfield and field_.calc_formula)


@dataclass(frozen=True, slots=True)
class Event:
    """Projection of an event procedure, annotated with its owning object."""

    name: str
    role: EventRole
    object_kind: ObjectKind
    object_name: str
    parameters: Tuple[Parameter, ...] = ()


@dataclass(frozen=True, slots=True)
class DerivedField:
    """Projection of a flowfield with its decoded CalcFormula."""

    name: str
    table_name: str
    calc_method: CalcMethod
    source_table: Optional[str] = None
    source_field: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Extension:
    """
    One parsed AL file.

    `source` echoes the input text verbatim so downstream consumers can
    include it in their own context.
    """

    name: str
    path: str
    objects: Tuple[ALObject, ...] = ()
    events: Tuple[Event, ...] = ()
    flowfields: Tuple[DerivedField, ...] = ()
    dependencies: Tuple[str, ...] = ()
    source: str = field(default="", repr=False)

    def structurally_equal(self, other: "Extension") -> bool:
        """Compare every extracted field, ignoring the raw source text."""

        return all(
            getattr(self, item.name) == getattr(other, item.name)
            for item in fields(self)
            if item.name != "source"
        )

    def object_names(self) -> Tuple[str, ...]:
        return tuple(obj.name for obj in self.objects)


@dataclass(frozen=True, slots=True)
class Integration:
    """A directed coupling between two extensions."""

    source: str
    target: str
    kind: IntegrationKind
    description: str


@dataclass(frozen=True, slots=True)
class ProjectAnalysis:
    """Result of analysing a whole batch of AL files."""

    extensions: Tuple[Extension, ...] = ()
    integrations: Tuple[Integration, ...] = ()
    dependencies: Tuple[str, ...] = ()
    failed_paths: Tuple[str, ...] = ()

    def counts(self) -> dict[str, int]:
        return {
            "extensions": len(self.extensions),
            "objects": sum(len(ext.objects) for ext in self.extensions),
            "events": sum(len(ext.events) for ext in self.extensions),
            "flowfields": sum(len(ext.flowfields) for ext in self.extensions),
            "integrations": len(self.integrations),
            "failed": len(self.failed_paths),
        }


def merge_dependencies(extensions: Iterable[Extension]) -> Tuple[str, ...]:
    """Order-preserving union of every extension's dependencies."""

    ordered: dict[str, None] = {}
    for extension in extensions:
        for dependency in extension.dependencies:
            ordered.setdefault(dependency, None)
    return tuple(ordered)
