"""Shared AL fixtures."""

from pathlib import Path

import pytest
import structlog

SALES_SOURCE = """namespace Contoso.Sales;

using Microsoft.Sales.Document;
using Microsoft.Sales.Customer;

table 50100 "Sales Bonus"
{
    fields
    {
        field(1; "Entry No."; Integer)
        {
        }
        field(2; "Total Bonus"; FlowField Decimal)
        {
            CalcFormula = Sum("Bonus Entry".Amount WHERE("Entry No." = FIELD("Entry No.")));
        }
    }
}

codeunit 50101 "Bonus Publisher"
{
    [IntegrationEvent(false, false)]
    procedure OnAfterPostBonus(var SalesHeader: Record "Sales Header"; Amount: Decimal)
    begin
    end;

    procedure CalcBonus(Customer: Record Customer): Decimal
    var
        Total: Decimal;
    begin
        exit(Total);
    end;
}

tableextension 50102 "Customer Ext" extends Customer
{
    fields
    {
        field(50100; "Bonus Code"; Code[20])
        {
        }
    }
}
"""

BONUS_SOURCE = """codeunit 50200 "Bonus Subscriber"
{
    [EventSubscriber(ObjectType::Codeunit, Codeunit::"Bonus Publisher", 'OnAfterPostBonus', '', false, false)]
    local procedure OnAfterPostBonus(var SalesHeader: Record "Sales Header"; Amount: Decimal)
    begin
    end;
}

table 50201 "Bonus Entry"
{
    fields
    {
        field(1; "Entry No."; Integer) { }
        field(2; Amount; Decimal) { }
    }
}
"""


@pytest.fixture
def sales_source() -> str:
    return SALES_SOURCE


@pytest.fixture
def bonus_source() -> str:
    return BONUS_SOURCE


@pytest.fixture
def al_project(tmp_path: Path) -> Path:
    (tmp_path / "Sales.al").write_text(SALES_SOURCE, encoding="utf-8")
    (tmp_path / "Bonus.al").write_text(BONUS_SOURCE, encoding="utf-8")
    return tmp_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "ALGRAPH_CODE_GLOB",
        "ALGRAPH_IGNORE_DIRS",
        "ALGRAPH_MAX_WORKERS",
        "ALGRAPH_INCLUDE_REFERENCES",
        "ALGRAPH_DEBUG",
        "ALGRAPH_NEO4J_URI",
        "ALGRAPH_NEO4J_USER",
        "ALGRAPH_NEO4J_PASSWORD",
        "ALGRAPH_NEO4J_DATABASE",
    ):
        monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()
