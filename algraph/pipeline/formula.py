"""
CalcFormula decoding for flowfields.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from algraph.ir import CalcMethod

_LEADING_TOKEN = re.compile(r"^\s*([A-Za-z]+)")
_NAME = r'(?:"([^"\n]*)"|([A-Za-z_][A-Za-z0-9_]*))'
# First "(A.B" where A and B are quoted or bare names, e.g. Sum("Sales Line".Amount WHERE(...))
_SOURCE_REFERENCE = re.compile(rf"\(\s*{_NAME}\s*\.\s*{_NAME}")

_METHODS = {method.value.lower(): method for method in CalcMethod if method is not CalcMethod.UNKNOWN}


@dataclass(frozen=True, slots=True)
class DecodedFormula:
    method: CalcMethod
    source_table: Optional[str] = None
    source_field: Optional[str] = None


def decode_method(formula: str) -> CalcMethod:
    match = _LEADING_TOKEN.match(formula)
    if not match:
        return CalcMethod.UNKNOWN
    return _METHODS.get(match.group(1).lower(), CalcMethod.UNKNOWN)


def decode_formula(formula: str) -> DecodedFormula:
    """
    Split a CalcFormula into its aggregation method and source reference.

    The source table and field come from the first parenthesised dotted
    reference; both are None when the formula has no such reference.
    """

    method = decode_method(formula)
    match = _SOURCE_REFERENCE.search(formula)
    if not match:
        return DecodedFormula(method=method)

    table_quoted, table_bare, field_quoted, field_bare = match.groups()
    source_table = (table_quoted if table_quoted is not None else table_bare).strip()
    source_field = (field_quoted if field_quoted is not None else field_bare).strip()
    return DecodedFormula(
        method=method,
        source_table=source_table or None,
        source_field=source_field or None,
    )
