"""
Neo4j loader utilities for AL Graph.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Tuple

from neo4j import Driver, GraphDatabase, Session

from algraph.config import Neo4jSettings
from algraph.graph.schema import (
    DEFAULT_SCHEMA,
    SchemaMetadata,
    format_node_properties,
    NODE_EXTENSION,
    NODE_FIELD,
    NODE_OBJECT,
    NODE_PROCEDURE,
    REL_DECLARES,
    REL_DECLARES_PROCEDURE,
    REL_EXTENDS,
    REL_HAS_FIELD,
    REL_INTEGRATES_WITH,
)
from algraph.ir import (
    ALObject,
    DerivedField,
    Extension,
    Field,
    Integration,
    Procedure,
    ProjectAnalysis,
    parse_element_id,
)


def object_element_id(extension: Extension, obj: ALObject) -> str:
    return parse_element_id(extension.name, obj.kind.value, str(obj.object_id))


@dataclass
class GraphLoader:
    """High-level helper that persists an analysed AL project into Neo4j."""

    settings: Neo4jSettings
    schema: SchemaMetadata = DEFAULT_SCHEMA
    driver: Driver | None = None

    def __post_init__(self) -> None:
        if self.driver is None:
            auth = (self.settings.username, self.settings.password)
            self.driver = GraphDatabase.driver(self.settings.uri, auth=auth)

    def close(self) -> None:
        if self.driver:
            self.driver.close()

    def _session(self) -> Session:
        if not self.driver:
            raise RuntimeError("Neo4j driver is not initialized")
        return self.driver.session(database=self.settings.database)

    # Constraint/index management -------------------------------------------------
    def ensure_schema(self) -> None:
        with self._session() as session:
            for label, key in self.schema.node_keys.items():
                constraint_query = (
                    f"CREATE CONSTRAINT IF NOT EXISTS FOR (n:{label}) "
                    f"REQUIRE n.{key} IS UNIQUE"
                )
                session.run(constraint_query)

            for label, indexes in self.schema.node_indexes.items():
                for index_property in indexes:
                    index_query = (
                        f"CREATE INDEX IF NOT EXISTS FOR (n:{label}) "
                        f"ON (n.{index_property})"
                    )
                    session.run(index_query)

    # Public API -------------------------------------------------------------------
    def sync_analysis(self, analysis: ProjectAnalysis) -> None:
        """Upsert nodes and relationships for a finished project analysis."""

        self.ensure_schema()

        with self._session() as session:
            for extension in analysis.extensions:
                self._upsert_extension(session, extension)

            # Base objects may live in any extension, so EXTENDS edges wait
            # until every object node exists.
            for extension in analysis.extensions:
                for obj in extension.objects:
                    if obj.extends:
                        self._merge_extends(session, object_element_id(extension, obj), obj.extends)

            # Repeated integrations are kept as one edge carrying their multiplicity.
            for integration, count in Counter(analysis.integrations).items():
                self._merge_integration(session, integration, count)

    # Internal helpers -------------------------------------------------------------
    def _upsert_extension(self, session: Session, extension: Extension) -> None:
        properties = format_node_properties(
            {
                "id": extension.name,
                "name": extension.name,
                "path": extension.path,
                "dependencies": list(extension.dependencies),
            }
        )
        self._merge_node(session, NODE_EXTENSION, properties)

        flowfields: Dict[Tuple[str, str], DerivedField] = {
            (flowfield.table_name, flowfield.name): flowfield for flowfield in extension.flowfields
        }

        for obj in extension.objects:
            obj_id = object_element_id(extension, obj)
            self._merge_node(
                session,
                NODE_OBJECT,
                format_node_properties(
                    {
                        "id": obj_id,
                        "name": obj.name,
                        "kind": obj.kind,
                        "objectId": obj.object_id,
                        "extends": obj.extends,
                        "extension": extension.name,
                    }
                ),
            )
            self._merge_relationship(
                session,
                start_label=NODE_EXTENSION,
                start_id=extension.name,
                rel_type=REL_DECLARES,
                end_label=NODE_OBJECT,
                end_id=obj_id,
            )

            for field_ir in obj.fields:
                field_id = parse_element_id(obj_id, field_ir.name)
                self._upsert_field(session, field_id, obj, field_ir, flowfields.get((obj.name, field_ir.name)))
                self._merge_relationship(
                    session,
                    start_label=NODE_OBJECT,
                    start_id=obj_id,
                    rel_type=REL_HAS_FIELD,
                    end_label=NODE_FIELD,
                    end_id=field_id,
                )

            for procedure in obj.procedures:
                procedure_id = parse_element_id(obj_id, procedure.name)
                self._upsert_procedure(session, procedure_id, obj, procedure)
                self._merge_relationship(
                    session,
                    start_label=NODE_OBJECT,
                    start_id=obj_id,
                    rel_type=REL_DECLARES_PROCEDURE,
                    end_label=NODE_PROCEDURE,
                    end_id=procedure_id,
                )

    def _upsert_field(
        self,
        session: Session,
        field_id: str,
        obj: ALObject,
        field_ir: Field,
        flowfield: DerivedField | None,
    ) -> None:
        properties = {
            "id": field_id,
            "name": field_ir.name,
            "fieldId": field_ir.field_id,
            "objectName": obj.name,
            "type": field_ir.type,
            "isFlowfield": field_ir.is_flowfield,
            "calcFormula": field_ir.calc_formula,
        }
        if flowfield is not None:
            properties.update(
                {
                    "calcMethod": flowfield.calc_method,
                    "sourceTable": flowfield.source_table,
                    "sourceField": flowfield.source_field,
                }
            )
        self._merge_node(session, NODE_FIELD, format_node_properties(properties))

    def _upsert_procedure(self, session: Session, procedure_id: str, obj: ALObject, procedure: Procedure) -> None:
        properties = format_node_properties(
            {
                "id": procedure_id,
                "name": procedure.name,
                "objectName": obj.name,
                "objectKind": obj.kind,
                "returnType": procedure.return_type,
                "isLocal": procedure.is_local,
                "isEvent": procedure.is_event,
                "eventRole": procedure.event_role,
                "parameters": [
                    f"{'var ' if parameter.is_var else ''}{parameter.name}: {parameter.type}"
                    for parameter in procedure.parameters
                ],
            }
        )
        self._merge_node(session, NODE_PROCEDURE, properties)

    def _merge_extends(self, session: Session, object_id: str, base_name: str) -> None:
        session.run(
            f"MATCH (ext:{NODE_OBJECT} {{id: $id}}) "
            f"MATCH (base:{NODE_OBJECT} {{name: $baseName}}) "
            "WHERE NOT base.kind ENDS WITH 'extension' "
            f"MERGE (ext)-[:{REL_EXTENDS}]->(base)",
            id=object_id,
            baseName=base_name,
        )

    def _merge_integration(self, session: Session, integration: Integration, count: int = 1) -> None:
        session.run(
            f"MATCH (source:{NODE_EXTENSION} {{id: $sourceId}}) "
            f"MATCH (target:{NODE_EXTENSION} {{id: $targetId}}) "
            f"MERGE (source)-[r:{REL_INTEGRATES_WITH} {{kind: $kind, description: $description}}]->(target) "
            "SET r.count = $count",
            sourceId=integration.source,
            targetId=integration.target,
            kind=integration.kind.value,
            description=integration.description,
            count=count,
        )

    # Neo4j helpers ----------------------------------------------------------------
    def _merge_node(self, session: Session, label: str, properties: dict) -> None:
        node_id = properties.get("id")
        if not node_id:
            raise ValueError(f"Node properties for label {label} missing 'id'")

        session.run(
            f"MERGE (n:{label} {{id: $id}}) "
            f"SET n += $props",
            id=node_id,
            props=properties,
        )

    def _merge_relationship(
        self,
        session: Session,
        *,
        start_label: str,
        start_id: str,
        rel_type: str,
        end_label: str,
        end_id: str,
    ) -> None:
        session.run(
            f"MATCH (start:{start_label} {{id: $start_id}}) "
            f"MATCH (end:{end_label} {{id: $end_id}}) "
            f"MERGE (start)-[r:{rel_type}]->(end)",
            start_id=start_id,
            end_id=end_id,
        )
