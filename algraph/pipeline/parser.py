"""
AL source parsing utilities for AL Graph.

The parser favors resilience over completeness: declarations, fields,
procedures and formulas are recognised by their surface shape and anything
that does not fit is skipped without raising. It never validates that a
referenced object exists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from algraph.ir import (
    ALObject,
    BASE_KINDS,
    DerivedField,
    Event,
    EventRole,
    EXTENSION_KINDS,
    Extension,
    Field,
    ObjectKind,
    Parameter,
    Procedure,
)
from algraph.logging_config import get_logger
from algraph.pipeline.formula import decode_formula

DEFAULT_PARAMETER_TYPE = "Variant"
FLOWFIELD_MARKER = "flowfield"


def _name_pattern(group: str) -> str:
    return rf'(?:"(?P<{group}_quoted>[^"\n]+)"|(?P<{group}_bare>[A-Za-z_][A-Za-z0-9_]*))'


def _keywords(kinds: Iterable[ObjectKind]) -> str:
    return "|".join(kind.value for kind in kinds)


_BASE_DECLARATION = re.compile(
    rf"^\s*(?P<kind>{_keywords(BASE_KINDS)})[ \t]+(?P<id>\d+)\s+{_name_pattern('name')}"
    rf"(?:\s+extends\s+{_name_pattern('target')})?"
    r"(?:\s+implements\s+[^{]*?)?\s*\{",
    re.IGNORECASE | re.MULTILINE,
)
_EXTENSION_DECLARATION = re.compile(
    rf"^\s*(?P<kind>{_keywords(EXTENSION_KINDS)})[ \t]+(?P<id>\d+)\s+{_name_pattern('name')}"
    rf"\s+extends\s+{_name_pattern('target')}\s*\{{",
    re.IGNORECASE | re.MULTILINE,
)
DECLARATION_PATTERNS: Tuple[re.Pattern[str], ...] = (_BASE_DECLARATION, _EXTENSION_DECLARATION)

_FIELD_PATTERN = re.compile(
    r'\bfield\s*\(\s*(\d+)\s*;\s*(?:"([^"\n]+)"|([^;"\n]+?))\s*;\s*([^;{)]+?)\s*\)',
    re.IGNORECASE,
)
_PROCEDURE_PATTERN = re.compile(
    r"(?:\b(?P<modifier>local|internal)\s+)?\bprocedure\s+"
    r'(?:"(?P<quoted>[^"\n]+)"|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))'
    r"\s*\((?P<params>[^)]*)\)"
    r"\s*(?::\s*(?P<returns>[^;{]+?))?"
    r"\s*(?:;|\{|\bvar\b|\bbegin\b)",
    re.IGNORECASE,
)
_PUBLISHER_ATTRIBUTES = r"(?:IntegrationEvent|BusinessEvent|InternalEvent)"
_SUBSCRIBER_ATTRIBUTES = r"EventSubscriber"

_USING_PATTERN = re.compile(r"\busing\s+([^;]+);", re.IGNORECASE)
_RECORD_REFERENCE_PATTERN = re.compile(
    r'\b(?:Record|RecRef|Rec)\s+(?:"([^"\n]+)"|([A-Za-z_][A-Za-z0-9_]*))',
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class DeclarationHeader:
    """A matched declaration header; `body_start` is the offset just past `{`."""

    kind: ObjectKind
    object_id: int
    name: str
    extends: Optional[str]
    body_start: int


# Declarations -------------------------------------------------------------------
def locate_declarations(text: str) -> List[DeclarationHeader]:
    """
    Find top-level declaration headers.

    Base kinds are scanned first, extension kinds second. Keyword sets are
    disjoint, so a header is never reported twice.
    """

    headers: List[DeclarationHeader] = []
    for pattern in DECLARATION_PATTERNS:
        for match in pattern.finditer(text):
            headers.append(
                DeclarationHeader(
                    kind=ObjectKind(match.group("kind").lower()),
                    object_id=int(match.group("id")),
                    name=_pick(match, "name") or "",
                    extends=_pick(match, "target"),
                    body_start=match.end(),
                )
            )
    return headers


def extract_body(text: str, start: int) -> str:
    """
    Return the text between an already consumed `{` and its matching `}`.

    An unterminated body yields everything from `start` to the end of text.
    """

    depth = 1
    index = start
    length = len(text)
    while index < length:
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index]
        index += 1
    return text[start:]


# Fields -------------------------------------------------------------------------
def parse_fields(body: str) -> Tuple[Field, ...]:
    fields: List[Field] = []
    for match in _FIELD_PATTERN.finditer(body):
        field_id, quoted_name, bare_name, type_text = match.groups()
        name = (quoted_name if quoted_name is not None else bare_name).strip()
        field_type = type_text.strip()
        is_flowfield = FLOWFIELD_MARKER in field_type.lower()
        fields.append(
            Field(
                field_id=int(field_id),
                name=name,
                type=field_type,
                is_flowfield=is_flowfield,
                calc_formula=find_calc_formula(body, name) if is_flowfield else None,
            )
        )
    return tuple(fields)


def find_calc_formula(body: str, field_name: str) -> Optional[str]:
    """
    Proximity lookup of a flowfield's CalcFormula.

    Takes the first `field(` whose text, before any closing brace, mentions
    `field_name` and then assigns a CalcFormula. Fields whose names overlap
    as substrings can pick up a neighbour's formula.
    """

    pattern = re.compile(
        rf"\bfield\s*\([^}}]*{re.escape(field_name)}[^}}]*CalcFormula\s*=\s*([^;]+);",
        re.IGNORECASE,
    )
    match = pattern.search(body)
    if not match:
        return None
    return match.group(1).strip() or None


# Procedures ---------------------------------------------------------------------
def parse_procedures(body: str) -> Tuple[Procedure, ...]:
    procedures: List[Procedure] = []
    for match in _PROCEDURE_PATTERN.finditer(body):
        name = (match.group("quoted") or match.group("bare")).strip()
        returns = match.group("returns")
        role = classify_event(body, name)
        procedures.append(
            Procedure(
                name=name,
                parameters=parse_parameters(match.group("params")),
                return_type=returns.strip() if returns and returns.strip() else None,
                is_event=role is not None,
                event_role=role,
                is_local=(match.group("modifier") or "").lower() == "local",
            )
        )
    return tuple(procedures)


def parse_parameters(text: str) -> Tuple[Parameter, ...]:
    """Split `A: Integer; var B: Text` style parameter lists."""

    parameters: List[Parameter] = []
    for segment in text.split(";"):
        trimmed = segment.strip()
        if not trimmed:
            continue
        is_var = bool(re.match(r"var\s", trimmed, re.IGNORECASE))
        if is_var:
            trimmed = trimmed[3:].strip()
        name, separator, type_text = trimmed.partition(":")
        parameters.append(
            Parameter(
                name=name.strip().strip('"'),
                type=type_text.strip() if separator and type_text.strip() else DEFAULT_PARAMETER_TYPE,
                is_var=is_var,
            )
        )
    return tuple(parameters)


def classify_event(body: str, procedure_name: str) -> Optional[EventRole]:
    """
    Decide whether a procedure is an event publisher or subscriber.

    Looks for a publisher or subscriber attribute on a single line followed by
    `procedure <name>` anywhere in the body. This is a text proximity check:
    the attribute is not proven to belong to this exact procedure, and a
    name that prefixes another procedure's name also matches. Subscriber wins
    when both shapes are present.
    """

    name = re.escape(procedure_name)
    role: Optional[EventRole] = None
    if _attribute_precedes(body, _PUBLISHER_ATTRIBUTES, name):
        role = EventRole.PUBLISHER
    if _attribute_precedes(body, _SUBSCRIBER_ATTRIBUTES, name):
        role = EventRole.SUBSCRIBER
    return role


def _attribute_precedes(body: str, attributes: str, escaped_name: str) -> bool:
    pattern = re.compile(
        rf'\[\s*{attributes}[^\n]*\]\s*(?:(?:local|internal)\s+)?procedure\s+"?{escaped_name}',
        re.IGNORECASE,
    )
    return pattern.search(body) is not None


# Dependencies -------------------------------------------------------------------
def extract_dependencies(text: str) -> Tuple[str, ...]:
    """Namespace imports first, then distinct record-type references."""

    dependencies: List[str] = [match.group(1).strip() for match in _USING_PATTERN.finditer(text)]
    for match in _RECORD_REFERENCE_PATTERN.finditer(text):
        quoted, bare = match.groups()
        table_name = (quoted if quoted is not None else bare).strip()
        if table_name and table_name not in dependencies:
            dependencies.append(table_name)
    return tuple(dependencies)


# Projections --------------------------------------------------------------------
def extract_events(objects: Iterable[ALObject]) -> Iterator[Event]:
    for obj in objects:
        for procedure in obj.event_procedures():
            yield Event(
                name=procedure.name,
                role=procedure.event_role,
                object_kind=obj.kind,
                object_name=obj.name,
                parameters=procedure.parameters,
            )


def extract_flowfields(objects: Iterable[ALObject]) -> Iterator[DerivedField]:
    for obj in objects:
        for field_ir in obj.flowfields():
            decoded = decode_formula(field_ir.calc_formula)
            yield DerivedField(
                name=field_ir.name,
                table_name=obj.name,
                calc_method=decoded.method,
                source_table=decoded.source_table,
                source_field=decoded.source_field,
            )


def extension_name(path: str | Path) -> str:
    file_name = Path(path).name
    return file_name[: -len(".al")] if file_name.endswith(".al") else file_name


class ALParser:
    """Parses AL source text into `Extension` IR objects."""

    def __init__(self, logger=None) -> None:
        self._logger = logger or get_logger(__name__)

    def parse_file(self, path: str | Path) -> Extension:
        path = Path(path)
        return self.parse_source(self.read_file(path), path)

    def read_file(self, path: str | Path) -> str:
        """Read one AL file as UTF-8, logging a warning before re-raising a failure."""

        path = Path(path)
        self._logger.debug("reading AL file", path=str(path))
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            self._logger.warning("failed to read AL file", path=str(path), error=str(exc))
            raise

    def parse_source(self, source: str, path: str | Path) -> Extension:
        """Reduce one file's text to its model. Pure: same input, same output."""

        objects = tuple(self.parse_objects(source))
        extension = Extension(
            name=extension_name(path),
            path=str(path),
            objects=objects,
            events=tuple(extract_events(objects)),
            flowfields=tuple(extract_flowfields(objects)),
            dependencies=extract_dependencies(source),
            source=source,
        )
        self._logger.debug(
            "parsed extension",
            extension=extension.name,
            objects=len(extension.objects),
            events=len(extension.events),
            flowfields=len(extension.flowfields),
        )
        return extension

    def parse_objects(self, source: str) -> Iterator[ALObject]:
        for header in locate_declarations(source):
            body = extract_body(source, header.body_start)
            yield ALObject(
                kind=header.kind,
                object_id=header.object_id,
                name=header.name,
                extends=header.extends,
                fields=parse_fields(body) if body else (),
                procedures=parse_procedures(body) if body else (),
            )


def _pick(match: re.Match[str], group: str) -> Optional[str]:
    quoted = match.group(f"{group}_quoted")
    if quoted is not None:
        return quoted.strip()
    bare = match.group(f"{group}_bare")
    return bare.strip() if bare is not None else None
