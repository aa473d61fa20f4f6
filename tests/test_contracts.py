"""Unit tests for column type -> contract mapping (rider_kick.contracts)."""

from __future__ import annotations

import pytest

from rider_kick.contracts import (
    DEFAULT_TYPE_MAPPING,
    MULTIPLE_UPLOAD_ENTITY_TYPE,
    SINGLE_UPLOAD_ENTITY_TYPE,
    contract_fields,
    contract_line,
    create_contract_line,
    entity_type_for,
    field_in_contract,
    id_contract_line,
    inject_resource_owner,
    update_contract_line,
    upload_contract_line,
    upload_entity_type,
    validation_type_for,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Type lookups
# ---------------------------------------------------------------------------


class TestValidationTypeFor:
    @pytest.mark.parametrize(
        ("db_type", "expected"),
        [
            ("uuid", ":string"),
            ("string", ":string"),
            ("text", ":string"),
            ("integer", ":integer"),
            ("boolean", ":bool"),
            ("float", ":float"),
            ("decimal", ":decimal"),
            ("date", ":date"),
            ("datetime", ":time"),
            ("upload", "Types::File"),
        ],
    )
    def test_default_mapping(self, db_type, expected):
        assert validation_type_for(db_type) == expected

    def test_unknown_type_falls_back_to_string(self):
        assert validation_type_for("hstore") == ":string"
        assert validation_type_for(None) == ":string"

    def test_custom_mapping(self):
        mapping = {**DEFAULT_TYPE_MAPPING, "jsonb": ":hash"}
        assert validation_type_for("jsonb", mapping) == ":hash"


class TestEntityTypeFor:
    def test_known_types(self):
        assert entity_type_for("integer") == "Types::Strict::Integer"
        assert entity_type_for("boolean") == "Types::Strict::Bool"
        assert entity_type_for("datetime") == "Types::Strict::Time"

    def test_unknown_type_falls_back_to_string(self):
        assert entity_type_for("point") == "Types::Strict::String"

    def test_upload_entity_types(self):
        assert upload_entity_type("single") == SINGLE_UPLOAD_ENTITY_TYPE
        assert upload_entity_type("multiple") == MULTIPLE_UPLOAD_ENTITY_TYPE
        assert MULTIPLE_UPLOAD_ENTITY_TYPE == "Types::Strict::Array.of(Types::Strict::String)"


# ---------------------------------------------------------------------------
# Contract lines
# ---------------------------------------------------------------------------


class TestContractLines:
    def test_required_line(self):
        assert contract_line("title", ":string", True) == "required(:title).filled(:string)"

    def test_optional_line(self):
        assert contract_line("title", ":string", False) == "optional(:title).maybe(:string)"

    def test_create_line_not_nullable_is_required(self):
        assert create_contract_line("age", "integer", False) == "required(:age).filled(:integer)"

    def test_create_line_nullable_is_optional(self):
        assert create_contract_line("bio", "text", True) == "optional(:bio).maybe(:string)"

    def test_create_line_unknown_nullability_is_required(self):
        assert create_contract_line("name", "string", None) == "required(:name).filled(:string)"

    def test_update_line_always_optional(self):
        assert update_contract_line("name", "string") == "optional(:name).maybe(:string)"

    def test_upload_line(self):
        assert upload_contract_line("avatar") == "optional(:avatar).maybe(Types::File)"

    def test_id_line(self):
        assert id_contract_line() == "required(:id).filled(:string)"


# ---------------------------------------------------------------------------
# Contract inspection
# ---------------------------------------------------------------------------


class TestContractFields:
    def test_extracts_field_names_in_order(self):
        lines = [
            "required(:id).filled(:string)",
            "optional(:name).maybe(:string)",
            "  required(:account_id).filled(:string)",
            "# a comment",
        ]
        assert contract_fields(lines) == ["id", "name", "account_id"]


class TestFieldInContract:
    LINES = ["required(:account_id).filled(:string)", "optional(:name).maybe(:string)"]

    def test_present(self):
        assert field_in_contract("account_id", self.LINES)
        assert field_in_contract("name", self.LINES)

    def test_absent(self):
        assert not field_in_contract("owner_id", self.LINES)

    def test_prefix_does_not_match(self):
        assert not field_in_contract("account", self.LINES)

    def test_blank_field_never_matches(self):
        assert not field_in_contract("", self.LINES)
        assert not field_in_contract("   ", self.LINES)
        assert not field_in_contract(None, self.LINES)


class TestInjectResourceOwner:
    def test_appends_when_absent(self):
        lines = ["required(:id).filled(:string)"]
        result = inject_resource_owner(lines, "account_id")
        assert result == [
            "required(:id).filled(:string)",
            "required(:account_id).filled(:string)",
        ]
        assert lines == ["required(:id).filled(:string)"]

    def test_no_duplicate_when_present(self):
        lines = ["optional(:account_id).maybe(:string)"]
        assert inject_resource_owner(lines, "account_id") == lines

    def test_idempotent(self):
        once = inject_resource_owner([], "account_id")
        assert inject_resource_owner(once, "account_id") == once

    def test_blank_field_leaves_lines(self):
        assert inject_resource_owner(["required(:id).filled(:string)"], None) == [
            "required(:id).filled(:string)"
        ]
