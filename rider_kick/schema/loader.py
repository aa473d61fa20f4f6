"""Load model column metadata from schema files.

Two formats are understood:

* A YAML document mapping model class names to column lists::

      models:
        Models::Product:
          table: products
          columns:
            - {name: id, type: uuid, "null": false}
            - {name: name, type: string, "null": false}

  (a bare list under the model name is accepted as the column list too).
  YAML reads an unquoted ``null`` key as ``None``; both spellings work.

* A Rails ``db/schema.rb`` file.  ``create_table`` blocks are parsed line by
  line; tables map to ``Models::<Singular>`` class names.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from rider_kick.errors import SchemaFileNotFoundError, YamlFormatError
from rider_kick.inflector import camelize, singularize
from rider_kick.schema.models import ColumnDescriptor, ModelSchema, SchemaRegistry
from rider_kick.utils import load_yaml

DEFAULT_SCHEMA_FILES = ("db/rider_kick_schema.yml", "db/rider_kick_schema.yaml", "db/schema.rb")

# Column types as reported by ActiveRecord for the schema.rb column methods.
_SCHEMA_RB_TYPES: dict[str, str] = {
    "bigint": "integer",
    "integer": "integer",
    "smallint": "integer",
    "numeric": "decimal",
    "timestamp": "datetime",
    "timestamptz": "datetime",
    "datetime": "datetime",
}

_CREATE_TABLE = re.compile(r"""^\s*create_table\s+["']([\w.]+)["'](.*?)\s+do\s+\|\w+\|""")
_COLUMN = re.compile(r"""^\s*t\.(\w+)\s+["'](\w+)["'](.*)$""")
_TIMESTAMPS = re.compile(r"^\s*t\.timestamps\b(.*)$")
_END = re.compile(r"^\s*end\s*$")
_OPTION = re.compile(
    r"""(\w+):\s*("(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*'|:\w+|-?\d+(?:\.\d+)?|true|false|nil|->\s*\{[^}]*\})"""
)
_SKIPPED_COLUMN_METHODS = frozenset({"index", "check_constraint", "remove", "rename"})


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_schema(path: str | Path) -> SchemaRegistry:
    """Load a schema file, choosing the parser by file extension.

    Raises:
        SchemaFileNotFoundError: If *path* does not exist.
        YamlFormatError: If a YAML schema is malformed.
    """
    schema_path = Path(path)
    if not schema_path.is_file():
        raise SchemaFileNotFoundError("Schema file not found", path=str(schema_path))
    if schema_path.suffix == ".rb":
        return parse_schema_rb(schema_path.read_text(encoding="utf-8"), source=str(schema_path))
    return parse_schema_yaml(load_yaml(schema_path), source=str(schema_path))


def find_schema_file(root: str | Path) -> Optional[Path]:
    """First of the conventional schema locations that exists under *root*."""
    for candidate in DEFAULT_SCHEMA_FILES:
        path = Path(root) / candidate
        if path.is_file():
            return path
    return None


# ---------------------------------------------------------------------------
# YAML schema
# ---------------------------------------------------------------------------


def parse_schema_yaml(data: dict[str, Any], source: Optional[str] = None) -> SchemaRegistry:
    models = data.get("models", data)
    if not isinstance(models, dict):
        raise YamlFormatError("Schema 'models' must be a mapping", source=source)

    registry = SchemaRegistry(source=source)
    for model_name, entry in models.items():
        table_name = None
        columns = entry
        if isinstance(entry, dict):
            table_name = entry.get("table")
            columns = entry.get("columns") or []
        if not isinstance(columns, list):
            raise YamlFormatError("Model columns must be a list", model=model_name, source=source)
        try:
            descriptors = [ColumnDescriptor.model_validate(column) for column in columns]
        except PydanticValidationError as exc:
            raise YamlFormatError(
                f"Invalid column definition: {exc.errors()[0]['msg']}",
                model=model_name,
                source=source,
            ) from exc
        registry.add(ModelSchema(model=str(model_name), table_name=table_name, columns=descriptors))
    return registry


# ---------------------------------------------------------------------------
# db/schema.rb
# ---------------------------------------------------------------------------


def _ruby_literal(raw: str) -> Any:
    if raw in ("true", "false"):
        return raw == "true"
    if raw == "nil":
        return None
    if raw[:1] in ("'", '"'):
        return raw[1:-1]
    if raw.startswith(":"):
        return raw[1:]
    if raw.startswith("->"):
        return raw
    if "." in raw:
        return float(raw)
    return int(raw)


def _parse_options(text: str) -> dict[str, Any]:
    return {key: _ruby_literal(value) for key, value in _OPTION.findall(text)}


def _column_from_method(method: str, name: str, options: dict[str, Any]) -> ColumnDescriptor:
    if method in ("references", "belongs_to"):
        ref_type = str(options.get("type", "bigint"))
        return ColumnDescriptor(
            name=f"{name}_id",
            type=_SCHEMA_RB_TYPES.get(ref_type, ref_type),
            sql_type=ref_type,
            nullable=options.get("null", True),
        )
    return ColumnDescriptor(
        name=name,
        type=_SCHEMA_RB_TYPES.get(method, method),
        sql_type=method,
        nullable=options.get("null", True),
        default=options.get("default"),
        precision=options.get("precision"),
        scale=options.get("scale"),
        limit=options.get("limit"),
    )


def _model_name_for_table(table: str) -> str:
    return "Models::" + camelize(singularize(table.split(".")[-1]))


def parse_schema_rb(text: str, source: Optional[str] = None) -> SchemaRegistry:
    """Parse the ``create_table`` blocks of a Rails ``schema.rb``."""
    registry = SchemaRegistry(source=source)
    current: Optional[ModelSchema] = None

    for line in text.splitlines():
        if current is None:
            match = _CREATE_TABLE.match(line)
            if not match:
                continue
            table, table_options = match.groups()
            current = ModelSchema(model=_model_name_for_table(table), table_name=table)
            options = _parse_options(table_options)
            id_type = options.get("id", "bigint")
            if id_type is not False:
                current.columns.append(
                    ColumnDescriptor(
                        name=str(options.get("primary_key", "id")),
                        type=_SCHEMA_RB_TYPES.get(str(id_type), str(id_type)),
                        sql_type=str(id_type),
                        nullable=False,
                    )
                )
            continue

        if _END.match(line):
            registry.add(current)
            current = None
            continue

        timestamps = _TIMESTAMPS.match(line)
        if timestamps:
            null = _parse_options(timestamps.group(1)).get("null", False)
            for name in ("created_at", "updated_at"):
                current.columns.append(
                    ColumnDescriptor(name=name, type="datetime", sql_type="datetime", nullable=null)
                )
            continue

        column = _COLUMN.match(line)
        if column and column.group(1) not in _SKIPPED_COLUMN_METHODS:
            method, name, rest = column.groups()
            current.columns.append(_column_from_method(method, name, _parse_options(rest)))

    return registry
