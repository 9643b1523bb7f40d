"""Tests for the Neo4j graph loader."""

import pytest

from algraph.config import Neo4jSettings
from algraph.graph import DEFAULT_SCHEMA, REL_EXTENDS, REL_INTEGRATES_WITH
from algraph.graph.loader import GraphLoader
from algraph.graph.schema import format_node_properties
from algraph.ir import EventRole, Integration, IntegrationKind, ObjectKind, ProjectAnalysis, merge_dependencies
from algraph.pipeline.parser import ALParser
from algraph.pipeline.resolver import IntegrationResolver


class FakeSession:
    def __init__(self, log):
        self.log = log

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def run(self, query, **parameters):
        self.log.append((query, parameters))


class FakeDriver:
    def __init__(self):
        self.queries = []
        self.databases = []
        self.closed = False

    def session(self, database=None):
        self.databases.append(database)
        return FakeSession(self.queries)

    def close(self):
        self.closed = True


@pytest.fixture
def analysis(sales_source, bonus_source):
    parser = ALParser()
    extensions = [
        parser.parse_source(sales_source, "Sales.al"),
        parser.parse_source(bonus_source, "Bonus.al"),
    ]
    return ProjectAnalysis(
        extensions=tuple(extensions),
        integrations=IntegrationResolver().resolve(extensions),
        dependencies=merge_dependencies(extensions),
    )


@pytest.fixture
def loader():
    settings = Neo4jSettings(uri="bolt://localhost:7687", username="neo4j", password="secret", database="al")
    return GraphLoader(settings=settings, driver=FakeDriver())


def _merged_nodes(driver, label):
    return [
        params["props"]
        for query, params in driver.queries
        if query.startswith(f"MERGE (n:{label} ")
    ]


class TestFormatNodeProperties:
    def test_drops_none_and_unwraps_enums(self):
        props = format_node_properties(
            {"id": "x", "kind": ObjectKind.TABLE, "role": EventRole.PUBLISHER, "missing": None, "flag": False}
        )
        assert props == {"id": "x", "kind": "table", "role": "publisher", "flag": False}


class TestGraphLoader:
    def test_ensure_schema(self, loader):
        loader.ensure_schema()
        queries = [query for query, _ in loader.driver.queries]
        constraints = [query for query in queries if query.startswith("CREATE CONSTRAINT")]
        indexes = [query for query in queries if query.startswith("CREATE INDEX")]
        assert len(constraints) == len(DEFAULT_SCHEMA.node_keys)
        assert len(indexes) == sum(len(props) for props in DEFAULT_SCHEMA.node_indexes.values())
        assert set(loader.driver.databases) == {"al"}

    def test_sync_analysis_nodes(self, loader, analysis):
        loader.sync_analysis(analysis)
        driver = loader.driver

        extensions = _merged_nodes(driver, "Extension")
        assert [node["id"] for node in extensions] == ["Sales", "Bonus"]

        objects = _merged_nodes(driver, "Object")
        assert "Sales/table/50100" in {node["id"] for node in objects}
        customer_ext = next(node for node in objects if node["name"] == "Customer Ext")
        assert customer_ext["kind"] == "tableextension"
        assert customer_ext["extends"] == "Customer"

        fields = _merged_nodes(driver, "Field")
        total = next(node for node in fields if node["name"] == "Total Bonus")
        assert total["isFlowfield"] is True
        assert total["calcMethod"] == "Sum"
        assert total["sourceTable"] == "Bonus Entry"
        entry = next(node for node in fields if node["id"] == "Sales/table/50100/Entry No.")
        assert "calcFormula" not in entry

        procedures = _merged_nodes(driver, "Procedure")
        publisher = next(node for node in procedures if node["objectName"] == "Bonus Publisher" and node["isEvent"])
        assert publisher["eventRole"] == "publisher"
        assert publisher["parameters"] == ['var SalesHeader: Record "Sales Header"', "Amount: Decimal"]

    def test_sync_analysis_relationships(self, loader, analysis):
        loader.sync_analysis(analysis)
        queries = loader.driver.queries

        extends = [params for query, params in queries if f":{REL_EXTENDS}]" in query]
        assert extends == [{"id": "Sales/tableextension/50102", "baseName": "Customer"}]

        integrations = [params for query, params in queries if REL_INTEGRATES_WITH in query]
        assert [(params["sourceId"], params["targetId"], params["kind"]) for params in integrations] == [
            ("Sales", "Bonus", "event"),
            ("Bonus", "Sales", "derived-field"),
        ]

    def test_repeated_integrations_keep_their_count(self, loader):
        edge = Integration("Sales", "Bonus", IntegrationKind.EVENT, "OnAfterPost event integration")
        other = Integration("Bonus", "Sales", IntegrationKind.DERIVED_FIELD, "Total flowfield references Entry")
        loader.sync_analysis(ProjectAnalysis(integrations=(edge, other, edge)))

        integrations = [
            (query, params) for query, params in loader.driver.queries if REL_INTEGRATES_WITH in query
        ]
        assert all("SET r.count = $count" in query for query, _ in integrations)
        assert [(params["sourceId"], params["count"]) for _, params in integrations] == [
            ("Sales", 2),
            ("Bonus", 1),
        ]

    def test_merge_node_requires_id(self, loader):
        with pytest.raises(ValueError):
            loader._merge_node(FakeSession([]), "Extension", {"name": "x"})

    def test_close(self, loader):
        loader.close()
        assert loader.driver.closed is True
