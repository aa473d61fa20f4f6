"""Model column metadata: descriptors, registries and schema-file loaders.

Quick usage::

    from rider_kick.schema import load_schema

    registry = load_schema("db/schema.rb")
    columns = registry.model("Models::Product").columns
"""

from rider_kick.schema.loader import find_schema_file, load_schema, parse_schema_rb, parse_schema_yaml
from rider_kick.schema.models import ColumnDescriptor, ModelSchema, SchemaRegistry

__all__ = [
    "ColumnDescriptor",
    "ModelSchema",
    "SchemaRegistry",
    "find_schema_file",
    "load_schema",
    "parse_schema_rb",
    "parse_schema_yaml",
]
