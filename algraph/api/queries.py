"""
High-level graph queries exposed via the AL Graph API.
"""

from __future__ import annotations

from typing import Any, Dict, List

from neo4j import Driver

from algraph.api.models import (
    EventLinksResponse,
    IntegrationModel,
    IntegrationsResponse,
    ObjectExtensionsResponse,
    ObjectRef,
    ProcedureRef,
)


class GraphQueryService:
    """Executes Cypher queries backing the REST API endpoints."""

    def __init__(self, driver: Driver, database: str = "neo4j") -> None:
        self._driver = driver
        self._database = database

    # Public API ------------------------------------------------------------------
    def integrations(self, *, extension: str) -> IntegrationsResponse:
        if not self._run_single("MATCH (e:Extension {id: $id}) RETURN e", id=extension):
            raise LookupError(f"Extension {extension} not found")

        outgoing = self._run(
            """
            MATCH (source:Extension {id: $id})-[r:INTEGRATES_WITH]->(target:Extension)
            RETURN source.name AS source, target.name AS target, r.kind AS kind, r.description AS description, r.count AS count
            ORDER BY target, kind, description
            """,
            id=extension,
        )
        incoming = self._run(
            """
            MATCH (source:Extension)-[r:INTEGRATES_WITH]->(target:Extension {id: $id})
            RETURN source.name AS source, target.name AS target, r.kind AS kind, r.description AS description, r.count AS count
            ORDER BY source, kind, description
            """,
            id=extension,
        )
        return IntegrationsResponse(
            extension=extension,
            outgoing=[_to_integration(record) for record in outgoing],
            incoming=[_to_integration(record) for record in incoming],
        )

    def event_links(self, *, name: str) -> EventLinksResponse:
        query = """
        MATCH (p:Procedure)
        WHERE p.isEvent = true
          AND (toLower(p.name) CONTAINS toLower($name) OR toLower($name) CONTAINS toLower(p.name))
        RETURN p ORDER BY p.objectName, p.name
        """
        procedures = [record["p"] for record in self._run(query, name=name)]
        if not procedures:
            raise LookupError(f"Event {name} not found")
        return EventLinksResponse(
            event=name,
            publishers=[_to_procedure_ref(node) for node in procedures if node.get("eventRole") == "publisher"],
            subscribers=[_to_procedure_ref(node) for node in procedures if node.get("eventRole") == "subscriber"],
        )

    def object_extensions(self, *, name: str) -> ObjectExtensionsResponse:
        query = """
        MATCH (o:Object)
        WHERE o.extends = $name
        RETURN o ORDER BY o.extension, o.objectId
        """
        records = self._run(query, name=name)
        if not records:
            raise LookupError(f"No extensions of {name} found")
        return ObjectExtensionsResponse(
            base=name,
            extensions=[_to_object_ref(record["o"]) for record in records],
        )

    # Execution helpers -----------------------------------------------------------
    def _run(self, query: str, **parameters: Any) -> List[Any]:
        with self._driver.session(database=self._database) as session:
            result = session.run(query, **parameters)
            return list(result)

    def _run_single(self, query: str, **parameters: Any):
        with self._driver.session(database=self._database) as session:
            result = session.run(query, **parameters)
            return result.single()


def _to_integration(record: Dict[str, Any]) -> IntegrationModel:
    return IntegrationModel(
        source=record["source"],
        target=record["target"],
        type=record["kind"],
        description=record["description"],
        count=record.get("count") or 1,
    )


def _to_procedure_ref(node: Dict[str, Any]) -> ProcedureRef:
    return ProcedureRef(
        id=node["id"],
        name=node["name"],
        objectName=node["objectName"],
        eventRole=node.get("eventRole"),
    )


def _to_object_ref(node: Dict[str, Any]) -> ObjectRef:
    return ObjectRef(
        id=node["id"],
        name=node["name"],
        kind=node["kind"],
        extension=node["extension"],
    )
