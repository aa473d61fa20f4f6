"""Column metadata handed to the generators.

Generators never reflect on live model classes; they receive the columns of a
model as plain :class:`ColumnDescriptor` lists, loaded from a schema file.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from rider_kick.errors import ModelNotFoundError
from rider_kick.inflector import demodulize, tableize

TIMESTAMP_COLUMNS = ("created_at", "updated_at")
SYSTEM_COLUMNS = ("id", "created_at", "updated_at", "type")


def null_key_as_string(data: Any) -> Any:
    """Rename the ``None`` key YAML produces for an unquoted ``null:`` to ``"null"``."""
    if isinstance(data, dict) and None in data:
        data = {("null" if key is None else key): value for key, value in data.items()}
    return data


class ColumnDescriptor(BaseModel):
    """One database column of a model."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Column name")
    type: str = Field(default="string", description="Abstract column type (string, uuid, decimal...)")
    sql_type: Optional[str] = Field(default=None)
    nullable: Optional[bool] = Field(
        default=None, alias="null", description="Whether NULL is allowed; unknown is treated as NOT NULL"
    )
    default: Any = Field(default=None)
    precision: Optional[int] = Field(default=None)
    scale: Optional[int] = Field(default=None)
    limit: Optional[int] = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def yaml_null_key(cls, data: Any) -> Any:
        return null_key_as_string(data)

    def as_structure_dict(self) -> dict[str, Any]:
        """Column entry as written to the ``schema.columns`` section of a structure file."""
        return {
            "name": self.name,
            "type": self.type,
            "sql_type": self.sql_type,
            "null": self.nullable,
            "default": self.default,
            "precision": self.precision,
            "scale": self.scale,
            "limit": self.limit,
        }


class ModelSchema(BaseModel):
    """Ordered columns of one model class (e.g. ``Models::User``)."""

    model: str
    table_name: Optional[str] = None
    columns: list[ColumnDescriptor] = Field(default_factory=list)

    @property
    def column_names(self) -> list[str]:
        return [column.name for column in self.columns]

    @property
    def columns_hash(self) -> dict[str, ColumnDescriptor]:
        return {column.name: column for column in self.columns}

    def column(self, name: str) -> Optional[ColumnDescriptor]:
        return self.columns_hash.get(name)

    def has_column(self, name: str) -> bool:
        return name in self.columns_hash


class SchemaRegistry(BaseModel):
    """Every model known to one schema file."""

    models: dict[str, ModelSchema] = Field(default_factory=dict)
    source: Optional[str] = None

    def add(self, schema: ModelSchema) -> None:
        self.models[schema.model] = schema

    def model(self, name: str) -> ModelSchema:
        """Look up a model by class name (``Models::User``), bare name or table.

        Raises:
            ModelNotFoundError: If no such model is present.
        """
        if name in self.models:
            return self.models[name]
        bare = demodulize(name)
        table = tableize(bare)
        for key, schema in self.models.items():
            if demodulize(key) == bare or schema.table_name == table:
                return schema
        raise ModelNotFoundError(f"Model {name} not found", model=name, source=self.source)
