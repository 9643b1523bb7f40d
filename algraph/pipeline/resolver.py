"""
Cross-extension integration inference.

The resolver only reads finished `Extension` models and produces new
`Integration` records; it never mutates its inputs. Matching is name based
and deliberately loose, see `events_match` and `object_matches_table`.
"""

from __future__ import annotations

from typing import Iterator, List, Sequence, Tuple

from algraph.ir import Event, EventRole, Extension, Integration, IntegrationKind
from algraph.logging_config import get_logger


def events_match(publisher: Event, subscriber: Event) -> bool:
    """
    Name heuristic for publisher/subscriber pairs.

    Equal names match, and so does case-insensitive containment in either
    direction.
    """

    if publisher.name == subscriber.name:
        return True
    left = publisher.name.lower()
    right = subscriber.name.lower()
    return left in right or right in left


def object_matches_table(object_name: str, table_name: str) -> bool:
    """An object matches when its name equals or contains the table name."""

    return object_name == table_name or table_name in object_name


class IntegrationResolver:
    """
    Computes integration edges over a complete batch of extensions.

    Extensions are compared by name, so an extension never integrates with
    another extension of the same name. No de-duplication is applied.
    """

    def __init__(self, *, include_references: bool = False, logger=None) -> None:
        self._include_references = include_references
        self._logger = logger or get_logger(__name__)

    def resolve(self, extensions: Sequence[Extension]) -> Tuple[Integration, ...]:
        integrations: List[Integration] = []
        integrations.extend(self._event_integrations(extensions))
        integrations.extend(self._flowfield_integrations(extensions))
        if self._include_references:
            integrations.extend(self._reference_integrations(extensions))

        self._logger.debug(
            "resolved integrations",
            extensions=len(extensions),
            integrations=len(integrations),
        )
        return tuple(integrations)

    # Passes -----------------------------------------------------------------------
    def _event_integrations(self, extensions: Sequence[Extension]) -> Iterator[Integration]:
        for extension in extensions:
            for event in extension.events:
                if event.role is not EventRole.PUBLISHER:
                    continue
                for other in extensions:
                    if other.name == extension.name:
                        continue
                    for other_event in other.events:
                        if other_event.role is EventRole.SUBSCRIBER and events_match(event, other_event):
                            yield Integration(
                                source=extension.name,
                                target=other.name,
                                kind=IntegrationKind.EVENT,
                                description=f"{event.name} event integration",
                            )

    def _flowfield_integrations(self, extensions: Sequence[Extension]) -> Iterator[Integration]:
        for extension in extensions:
            for flowfield in extension.flowfields:
                if not flowfield.source_table:
                    continue
                for other in extensions:
                    if other.name == extension.name:
                        continue
                    if any(object_matches_table(obj.name, flowfield.source_table) for obj in other.objects):
                        yield Integration(
                            source=other.name,
                            target=extension.name,
                            kind=IntegrationKind.DERIVED_FIELD,
                            description=f"{flowfield.name} flowfield references {flowfield.source_table}",
                        )

    def _reference_integrations(self, extensions: Sequence[Extension]) -> Iterator[Integration]:
        for extension in extensions:
            for dependency in extension.dependencies:
                for other in extensions:
                    if other.name == extension.name:
                        continue
                    if dependency in other.object_names():
                        yield Integration(
                            source=extension.name,
                            target=other.name,
                            kind=IntegrationKind.REFERENCE,
                            description=f"{extension.name} references {dependency}",
                        )
