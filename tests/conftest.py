"""Shared pytest fixtures for the RiderKick test suite.

Provides reusable fixtures for:
- Temporary Rails application skeletons
- Column metadata for a sample ``Models::User`` model
- Sample ``db/schema.rb`` and YAML schema documents
- A configuration bound to the temporary application
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from rider_kick.config import Configuration, reset_configuration, set_configuration
from rider_kick.schema import ColumnDescriptor, ModelSchema, SchemaRegistry
from rider_kick.utils import set_quiet


# ---------------------------------------------------------------------------
# Global state
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_configuration(monkeypatch):
    """Fresh configuration and console state for every test."""
    for name in (
        "RIDER_KICK_ROOT",
        "RIDER_KICK_ENGINE",
        "RIDER_KICK_DOMAIN_SCOPE",
        "RIDER_KICK_TEMPLATE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_configuration()
    set_quiet(False)
    yield
    reset_configuration()
    set_quiet(False)


# ---------------------------------------------------------------------------
# Rails application skeletons
# ---------------------------------------------------------------------------

USER_MODEL = """\
# frozen_string_literal: true

class Models::User < ApplicationRecord
end
"""

GEMFILE = """\
source 'https://rubygems.org'

gem 'rails', '~> 7.1'

group :development, :test do
  gem 'debug'
end
"""


@pytest.fixture
def rails_root(tmp_path: Path) -> Path:
    """A bare Rails application root (no clean-architecture setup)."""
    root = tmp_path / "blog_app"
    (root / "config").mkdir(parents=True)
    (root / "config" / "application.rb").write_text(
        "module BlogApp\n  class Application < Rails::Application\n  end\nend\n",
        encoding="utf-8",
    )
    (root / "Gemfile").write_text(GEMFILE, encoding="utf-8")
    yield root


@pytest.fixture
def rails_app(rails_root: Path) -> Path:
    """A Rails root with the domains directory and a ``Models::User`` class file."""
    (rails_root / "app" / "domains" / "core").mkdir(parents=True)
    models_dir = rails_root / "app" / "models" / "models"
    models_dir.mkdir(parents=True)
    (models_dir / "user.rb").write_text(USER_MODEL, encoding="utf-8")
    yield rails_root


@pytest.fixture
def config(rails_app: Path) -> Configuration:
    """Configuration rooted at :func:`rails_app` and installed process-wide."""
    return set_configuration(Configuration(root=rails_app))


# ---------------------------------------------------------------------------
# Column metadata
# ---------------------------------------------------------------------------


@pytest.fixture
def user_columns() -> list[ColumnDescriptor]:
    """Columns of ``Models::User`` in declaration order."""
    return [
        ColumnDescriptor(name="id", type="uuid", sql_type="uuid", nullable=False),
        ColumnDescriptor(name="account_id", type="uuid", sql_type="uuid", nullable=False),
        ColumnDescriptor(name="name", type="string", sql_type="character varying", nullable=False),
        ColumnDescriptor(name="email", type="string", sql_type="character varying", nullable=False),
        ColumnDescriptor(name="bio", type="text", sql_type="text", nullable=True),
        ColumnDescriptor(name="age", type="integer", sql_type="integer", nullable=True),
        ColumnDescriptor(name="active", type="boolean", sql_type="boolean", nullable=True, default=True),
        ColumnDescriptor(name="created_at", type="datetime", sql_type="timestamp", nullable=False),
        ColumnDescriptor(name="updated_at", type="datetime", sql_type="timestamp", nullable=False),
    ]


@pytest.fixture
def registry(user_columns: list[ColumnDescriptor]) -> SchemaRegistry:
    """Schema registry holding ``Models::User``."""
    schema = SchemaRegistry(source="memory")
    schema.add(ModelSchema(model="Models::User", table_name="users", columns=user_columns))
    return schema


# ---------------------------------------------------------------------------
# Schema documents
# ---------------------------------------------------------------------------


@pytest.fixture
def schema_rb_text() -> str:
    """A ``db/schema.rb`` with two tables."""
    return textwrap.dedent(
        """\
        ActiveRecord::Schema[7.1].define(version: 2024_05_01_000000) do
          enable_extension "plpgsql"

          create_table "products", id: :uuid, default: -> { "gen_random_uuid()" }, force: :cascade do |t|
            t.string "name", null: false
            t.text "description"
            t.decimal "price", precision: 10, scale: 2, default: "0.0"
            t.integer "stock", default: 0, null: false
            t.boolean "published", default: false
            t.references "category", type: :uuid, null: false
            t.timestamps
            t.index ["name"], name: "index_products_on_name"
          end

          create_table "categories", force: :cascade do |t|
            t.string "title", limit: 120
            t.datetime "created_at", null: false
            t.datetime "updated_at", null: false
          end
        end
        """
    )


@pytest.fixture
def schema_yaml_text() -> str:
    """A YAML schema document describing ``Models::Article``."""
    return textwrap.dedent(
        """\
        models:
          Models::Article:
            table: articles
            columns:
              - {name: id, type: uuid, null: false}
              - {name: title, type: string, null: false}
              - {name: body, type: text, null: true}
              - {name: author_id, type: uuid, null: false}
              - {name: created_at, type: datetime, null: false}
              - {name: updated_at, type: datetime, null: false}
          Models::Tag:
            - {name: id, type: integer, null: false}
            - {name: label, type: string}
        """
    )
