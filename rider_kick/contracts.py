"""Column type -> contract expression mapping.

A *contract line* is one dry-validation rule for one field, for example
``required(:title).filled(:string)`` or ``optional(:body).maybe(:string)``.
Non-nullable columns become ``required``/``filled`` rules, nullable ones
``optional``/``maybe``.  Column types missing from the lookup table fall back to
the string branch instead of failing.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

UPLOAD_TYPE = "upload"
FILE_VALIDATION_TYPE = "Types::File"
FALLBACK_VALIDATION_TYPE = ":string"
FALLBACK_ENTITY_TYPE = "Types::Strict::String"

DEFAULT_TYPE_MAPPING: dict[str, str] = {
    "uuid": ":string",
    "string": ":string",
    "text": ":string",
    "integer": ":integer",
    "boolean": ":bool",
    "float": ":float",
    "decimal": ":decimal",
    "date": ":date",
    "datetime": ":time",
    UPLOAD_TYPE: FILE_VALIDATION_TYPE,
}

DEFAULT_ENTITY_TYPE_MAPPING: dict[str, str] = {
    "uuid": "Types::Strict::String",
    "string": "Types::Strict::String",
    "text": "Types::Strict::String",
    "integer": "Types::Strict::Integer",
    "boolean": "Types::Strict::Bool",
    "float": "Types::Strict::Float",
    "decimal": "Types::Strict::Decimal",
    "date": "Types::Strict::Date",
    "datetime": "Types::Strict::Time",
}

SINGLE_UPLOAD_ENTITY_TYPE = "Types::Strict::String"
MULTIPLE_UPLOAD_ENTITY_TYPE = "Types::Strict::Array.of(Types::Strict::String)"

_RULE_FIELD = re.compile(r"^\s*(?:required|optional)\(:(\w+)\)")


# ---------------------------------------------------------------------------
# Type lookups
# ---------------------------------------------------------------------------


def validation_type_for(db_type: Optional[str], type_mapping: Optional[dict[str, str]] = None) -> str:
    """dry-validation type for a column type; unknown types map to ``:string``."""
    mapping = DEFAULT_TYPE_MAPPING if type_mapping is None else type_mapping
    return mapping.get(str(db_type or ""), FALLBACK_VALIDATION_TYPE)


def entity_type_for(
    db_type: Optional[str], entity_type_mapping: Optional[dict[str, str]] = None
) -> str:
    """dry-types entity attribute type; unknown types map to ``Types::Strict::String``."""
    mapping = DEFAULT_ENTITY_TYPE_MAPPING if entity_type_mapping is None else entity_type_mapping
    return mapping.get(str(db_type or ""), FALLBACK_ENTITY_TYPE)


def upload_entity_type(cardinality: str) -> str:
    if cardinality == "multiple":
        return MULTIPLE_UPLOAD_ENTITY_TYPE
    return SINGLE_UPLOAD_ENTITY_TYPE


# ---------------------------------------------------------------------------
# Contract lines
# ---------------------------------------------------------------------------


def contract_line(field: str, validation_type: str, required: bool) -> str:
    """Render one rule: ``required(:f).filled(T)`` or ``optional(:f).maybe(T)``."""
    if required:
        return f"required(:{field}).filled({validation_type})"
    return f"optional(:{field}).maybe({validation_type})"


def create_contract_line(
    field: str,
    db_type: Optional[str],
    nullable: Optional[bool],
    *,
    type_mapping: Optional[dict[str, str]] = None,
) -> str:
    """Rule for a create action: required when the column is not nullable.

    A column whose nullability is unknown (``None``) is treated as required.
    """
    return contract_line(field, validation_type_for(db_type, type_mapping), required=not nullable)


def update_contract_line(
    field: str, db_type: Optional[str], *, type_mapping: Optional[dict[str, str]] = None
) -> str:
    """Rule for an update action; every field is optional."""
    return contract_line(field, validation_type_for(db_type, type_mapping), required=False)


def upload_contract_line(field: str, required: bool = False) -> str:
    return contract_line(field, FILE_VALIDATION_TYPE, required=required)


def id_contract_line() -> str:
    return contract_line("id", ":string", required=True)


def resource_owner_contract_line(field: str) -> str:
    return contract_line(field, ":string", required=True)


# ---------------------------------------------------------------------------
# Contract inspection
# ---------------------------------------------------------------------------


def contract_fields(lines: Iterable[str]) -> list[str]:
    """Field names referenced by *lines*, in order."""
    fields = []
    for line in lines:
        match = _RULE_FIELD.match(str(line))
        if match:
            fields.append(match.group(1))
    return fields


def field_in_contract(field: Optional[str], lines: Iterable[str]) -> bool:
    """Return ``True`` when a ``required(:field)``/``optional(:field)`` rule exists.

    Blank field names never match.
    """
    if not field or not str(field).strip():
        return False
    return str(field).strip() in contract_fields(lines)


def inject_resource_owner(lines: Iterable[str], field: Optional[str]) -> list[str]:
    """Append a required resource-owner rule unless *field* is already present.

    The original ordering is preserved; a blank *field* leaves the list as is.
    """
    result = list(lines)
    if field and str(field).strip() and not field_in_contract(field, result):
        result.append(resource_owner_contract_line(str(field).strip()))
    return result
