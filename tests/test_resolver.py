"""Tests for cross-extension integration resolution."""

from algraph.ir import (
    ALObject,
    CalcMethod,
    DerivedField,
    Event,
    EventRole,
    Extension,
    Integration,
    IntegrationKind,
    ObjectKind,
)
from algraph.pipeline.parser import ALParser
from algraph.pipeline.resolver import IntegrationResolver, events_match, object_matches_table


def _event(name: str, role: EventRole) -> Event:
    return Event(name=name, role=role, object_kind=ObjectKind.CODEUNIT, object_name="Events")


def _table(name: str) -> ALObject:
    return ALObject(kind=ObjectKind.TABLE, object_id=1, name=name)


class TestEventsMatch:
    def test_equal_names(self):
        assert events_match(_event("OnAfterPost", EventRole.PUBLISHER), _event("OnAfterPost", EventRole.SUBSCRIBER))

    def test_containment_either_direction(self):
        short = _event("OnAfterPost", EventRole.PUBLISHER)
        long = _event("HandleOnAfterPostSalesDoc", EventRole.SUBSCRIBER)
        assert events_match(short, long)
        assert events_match(long, short)

    def test_case_insensitive(self):
        assert events_match(_event("onafterpost", EventRole.PUBLISHER), _event("OnAfterPost", EventRole.SUBSCRIBER))

    def test_unrelated(self):
        assert not events_match(_event("OnBeforeRelease", EventRole.PUBLISHER), _event("OnAfterPost", EventRole.SUBSCRIBER))


class TestObjectMatchesTable:
    def test_equal_and_contains(self):
        assert object_matches_table("Sales Line", "Sales Line")
        assert object_matches_table("Sales Line Archive", "Sales Line")

    def test_containment_is_case_sensitive(self):
        assert not object_matches_table("sales line", "Sales Line")


class TestIntegrationResolver:
    def test_event_edge_publisher_to_subscriber(self):
        publisher = Extension(name="A", path="A.al", events=(_event("OnAfterPost", EventRole.PUBLISHER),))
        subscriber = Extension(name="B", path="B.al", events=(_event("OnAfterPost", EventRole.SUBSCRIBER),))
        integrations = IntegrationResolver().resolve([publisher, subscriber])
        assert integrations == (
            Integration(
                source="A",
                target="B",
                kind=IntegrationKind.EVENT,
                description="OnAfterPost event integration",
            ),
        )

    def test_same_extension_name_is_skipped(self):
        first = Extension(name="A", path="one/A.al", events=(_event("OnAfterPost", EventRole.PUBLISHER),))
        second = Extension(name="A", path="two/A.al", events=(_event("OnAfterPost", EventRole.SUBSCRIBER),))
        assert IntegrationResolver().resolve([first, second]) == ()

    def test_flowfield_edge_points_from_table_owner(self):
        consumer = Extension(
            name="Reports",
            path="Reports.al",
            flowfields=(
                DerivedField(
                    name="Total",
                    table_name="Summary",
                    calc_method=CalcMethod.SUM,
                    source_table="Sales Line",
                    source_field="Amount",
                ),
            ),
        )
        owner = Extension(name="Sales", path="Sales.al", objects=(_table("Sales Line Buffer"),))
        integrations = IntegrationResolver().resolve([consumer, owner])
        assert integrations == (
            Integration(
                source="Sales",
                target="Reports",
                kind=IntegrationKind.DERIVED_FIELD,
                description="Total flowfield references Sales Line",
            ),
        )

    def test_flowfield_without_source_table_ignored(self):
        consumer = Extension(
            name="Reports",
            path="Reports.al",
            flowfields=(DerivedField(name="Total", table_name="Summary", calc_method=CalcMethod.COUNT),),
        )
        owner = Extension(name="Sales", path="Sales.al", objects=(_table("Sales Line"),))
        assert IntegrationResolver().resolve([consumer, owner]) == ()

    def test_no_deduplication(self):
        publisher = Extension(
            name="A",
            path="A.al",
            events=(
                _event("OnAfterPost", EventRole.PUBLISHER),
                _event("OnAfterPostLine", EventRole.PUBLISHER),
            ),
        )
        subscriber = Extension(name="B", path="B.al", events=(_event("OnAfterPost", EventRole.SUBSCRIBER),))
        integrations = IntegrationResolver().resolve([publisher, subscriber])
        assert [(item.source, item.target) for item in integrations] == [("A", "B"), ("A", "B")]

    def test_references_are_opt_in(self):
        user = Extension(name="A", path="A.al", dependencies=("Bonus Entry",))
        owner = Extension(name="B", path="B.al", objects=(_table("Bonus Entry"),))
        assert IntegrationResolver().resolve([user, owner]) == ()

        integrations = IntegrationResolver(include_references=True).resolve([user, owner])
        assert integrations == (
            Integration(
                source="A",
                target="B",
                kind=IntegrationKind.REFERENCE,
                description="A references Bonus Entry",
            ),
        )

    def test_parsed_project(self, sales_source, bonus_source):
        parser = ALParser()
        sales = parser.parse_source(sales_source, "Sales.al")
        bonus = parser.parse_source(bonus_source, "Bonus.al")
        integrations = IntegrationResolver().resolve([sales, bonus])
        assert [(item.source, item.target, item.kind) for item in integrations] == [
            ("Sales", "Bonus", IntegrationKind.EVENT),
            ("Bonus", "Sales", IntegrationKind.DERIVED_FIELD),
        ]
        assert integrations[1].description == "Total Bonus flowfield references Bonus Entry"
