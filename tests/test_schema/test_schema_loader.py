"""Unit tests for schema file loaders (rider_kick.schema.loader).

Tests cover:
- YAML schema documents (mapping and bare-list forms)
- db/schema.rb parsing (id options, references, timestamps, options)
- load_schema dispatch by extension and find_schema_file
"""

from __future__ import annotations

import pytest

from rider_kick.errors import SchemaFileNotFoundError, YamlFormatError
from rider_kick.schema import find_schema_file, load_schema, parse_schema_rb, parse_schema_yaml
from rider_kick.utils import load_yaml

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# YAML schema
# ---------------------------------------------------------------------------


class TestParseSchemaYaml:
    def test_models_with_table_and_columns(self, tmp_path, schema_yaml_text):
        path = tmp_path / "schema.yml"
        path.write_text(schema_yaml_text, encoding="utf-8")
        registry = parse_schema_yaml(load_yaml(path), source=str(path))

        article = registry.model("Models::Article")
        assert article.table_name == "articles"
        assert article.column_names == ["id", "title", "body", "author_id", "created_at", "updated_at"]
        assert article.column("title").nullable is False
        assert article.column("body").nullable is True

    def test_bare_column_list(self, tmp_path, schema_yaml_text):
        path = tmp_path / "schema.yml"
        path.write_text(schema_yaml_text, encoding="utf-8")
        tag = parse_schema_yaml(load_yaml(path)).model("Models::Tag")
        assert tag.table_name is None
        assert tag.column("label").type == "string"
        assert tag.column("label").nullable is None

    def test_models_must_be_mapping(self):
        with pytest.raises(YamlFormatError):
            parse_schema_yaml({"models": ["Models::User"]})

    def test_columns_must_be_list(self):
        with pytest.raises(YamlFormatError, match="must be a list"):
            parse_schema_yaml({"models": {"Models::User": {"columns": "id"}}})

    def test_invalid_column(self):
        with pytest.raises(YamlFormatError, match="Invalid column definition"):
            parse_schema_yaml({"models": {"Models::User": [{"type": "string"}]}})


# ---------------------------------------------------------------------------
# db/schema.rb
# ---------------------------------------------------------------------------


class TestParseSchemaRb:
    def test_tables_become_models(self, schema_rb_text):
        registry = parse_schema_rb(schema_rb_text)
        assert set(registry.models) == {"Models::Product", "Models::Category"}

    def test_uuid_primary_key(self, schema_rb_text):
        product = parse_schema_rb(schema_rb_text).model("Models::Product")
        id_column = product.column("id")
        assert id_column.type == "uuid"
        assert id_column.nullable is False

    def test_default_primary_key_is_integer(self, schema_rb_text):
        category = parse_schema_rb(schema_rb_text).model("Models::Category")
        assert category.column("id").type == "integer"
        assert category.column("id").sql_type == "bigint"

    def test_column_options(self, schema_rb_text):
        product = parse_schema_rb(schema_rb_text).model("Models::Product")
        assert product.column("name").nullable is False
        assert product.column("description").nullable is True
        price = product.column("price")
        assert (price.type, price.precision, price.scale, price.default) == ("decimal", 10, 2, "0.0")
        assert product.column("stock").default == 0
        assert product.column("published").default is False

    def test_references_become_foreign_keys(self, schema_rb_text):
        product = parse_schema_rb(schema_rb_text).model("Models::Product")
        category_id = product.column("category_id")
        assert category_id.type == "uuid"
        assert category_id.nullable is False

    def test_timestamps(self, schema_rb_text):
        product = parse_schema_rb(schema_rb_text).model("Models::Product")
        assert product.column_names[-2:] == ["created_at", "updated_at"]
        assert product.column("created_at").type == "datetime"
        assert product.column("created_at").nullable is False

    def test_indexes_are_not_columns(self, schema_rb_text):
        product = parse_schema_rb(schema_rb_text).model("Models::Product")
        assert "index" not in product.column_names

    def test_limit(self, schema_rb_text):
        category = parse_schema_rb(schema_rb_text).model("Models::Category")
        assert category.column("title").limit == 120

    def test_id_false_has_no_primary_key(self):
        text = 'create_table "tags_posts", id: false do |t|\n  t.uuid "tag_id"\nend\n'
        join = parse_schema_rb(text).model("Models::TagsPost")
        assert join.column_names == ["tag_id"]


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestLoadSchema:
    def test_dispatch_rb(self, tmp_path, schema_rb_text):
        path = tmp_path / "schema.rb"
        path.write_text(schema_rb_text, encoding="utf-8")
        registry = load_schema(path)
        assert registry.source == str(path)
        assert registry.model("Models::Product")

    def test_dispatch_yaml(self, tmp_path, schema_yaml_text):
        path = tmp_path / "schema.yml"
        path.write_text(schema_yaml_text, encoding="utf-8")
        assert load_schema(path).model("Models::Article")

    def test_missing_file(self, tmp_path):
        with pytest.raises(SchemaFileNotFoundError, match="Schema file not found"):
            load_schema(tmp_path / "db" / "schema.rb")


class TestFindSchemaFile:
    def test_none(self, tmp_path):
        assert find_schema_file(tmp_path) is None

    def test_prefers_yaml_schema(self, tmp_path):
        (tmp_path / "db").mkdir()
        (tmp_path / "db" / "schema.rb").write_text("", encoding="utf-8")
        (tmp_path / "db" / "rider_kick_schema.yml").write_text("models: {}\n", encoding="utf-8")
        assert find_schema_file(tmp_path) == tmp_path / "db" / "rider_kick_schema.yml"

    def test_schema_rb(self, tmp_path):
        (tmp_path / "db").mkdir()
        (tmp_path / "db" / "schema.rb").write_text("", encoding="utf-8")
        assert find_schema_file(tmp_path) == tmp_path / "db" / "schema.rb"
