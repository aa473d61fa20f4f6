"""Pydantic models for ``db/structures/<resource>_structure.yaml`` files.

A structure file is the single input of the scaffold generator: it names the
model, the actor performing the actions, the resource owner, uploaders and the
per-action contract lines.  Sections may be absent or ``null``; they then
default to empty.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from rider_kick.schema.models import null_key_as_string

ACTIONS = ("list", "fetch_by_id", "create", "update", "destroy")


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


class UploaderType(str, Enum):
    """Active Storage attachment cardinality."""

    SINGLE = "single"
    MULTIPLE = "multiple"


class UploaderDefinition(BaseModel):
    """``has_one_attached`` (single) or ``has_many_attached`` (multiple) field."""

    name: str
    type: UploaderType = UploaderType.SINGLE

    @property
    def is_multiple(self) -> bool:
        return self.type == UploaderType.MULTIPLE

    @property
    def attachment_macro(self) -> str:
        return "has_many_attached" if self.is_multiple else "has_one_attached"


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore")


class UseCaseSection(_Section):
    contract: list[str] = Field(default_factory=list)

    @field_validator("contract", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)


class RepositorySection(_Section):
    filters: list[str] = Field(default_factory=list)

    @field_validator("filters", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)


class ActionDomain(_Section):
    use_case: UseCaseSection = Field(default_factory=UseCaseSection)
    repository: RepositorySection = Field(default_factory=RepositorySection)

    @field_validator("use_case", "repository", mode="before")
    @classmethod
    def null_as_empty_section(cls, value: Any) -> Any:
        return {} if value is None else value


class DomainsSection(_Section):
    action_list: ActionDomain = Field(default_factory=ActionDomain)
    action_fetch_by_id: ActionDomain = Field(default_factory=ActionDomain)
    action_create: ActionDomain = Field(default_factory=ActionDomain)
    action_update: ActionDomain = Field(default_factory=ActionDomain)
    action_destroy: ActionDomain = Field(default_factory=ActionDomain)

    @field_validator("*", mode="before")
    @classmethod
    def null_as_empty_action(cls, value: Any) -> Any:
        return {} if value is None else value

    def action(self, name: str) -> Optional[ActionDomain]:
        if name not in ACTIONS:
            return None
        return getattr(self, f"action_{name}")


class FormField(_Section):
    name: str
    type: str = "string"


class ControllersSection(_Section):
    list_fields: list[str] = Field(default_factory=list)
    show_fields: list[str] = Field(default_factory=list)
    form_fields: list[FormField] = Field(default_factory=list)

    @field_validator("list_fields", "show_fields", "form_fields", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)


class SchemaSection(_Section):
    columns: list[dict[str, Any]] = Field(default_factory=list)
    foreign_keys: list[Any] = Field(default_factory=list)
    indexes: list[Any] = Field(default_factory=list)
    enums: dict[str, Any] = Field(default_factory=dict)

    @field_validator("columns", "foreign_keys", "indexes", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("columns", mode="before")
    @classmethod
    def yaml_null_keys(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [null_key_as_string(column) for column in value]
        return value

    @field_validator("enums", mode="before")
    @classmethod
    def null_as_empty_dict(cls, value: Any) -> Any:
        return {} if value is None else value


class EntitySection(_Section):
    skipped_fields: list[str] = Field(default_factory=lambda: ["id", "created_at", "updated_at"])
    db_attributes: list[str] = Field(default_factory=list)

    @field_validator("skipped_fields", "db_attributes", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)


class StructureSpec(_Section):
    """Everything the scaffold generator needs to know about one resource."""

    model: str = Field(..., description="ActiveRecord class, e.g. Models::User")
    resource_name: str = Field(..., description="Plural resource name, e.g. users")
    actor: str = Field(..., description="Who performs the actions, e.g. owner")
    actor_id: Optional[str] = Field(default=None)
    resource_owner_id: Optional[str] = Field(
        default=None, description="Column scoping records to their owner, e.g. account_id"
    )
    resource_owner: Optional[str] = Field(default=None)
    fields: list[str] = Field(default_factory=list)
    uploaders: list[UploaderDefinition] = Field(default_factory=list)
    search_able: list[str] = Field(default_factory=list)
    schema_: SchemaSection = Field(default_factory=SchemaSection, alias="schema")
    controllers: ControllersSection = Field(default_factory=ControllersSection)
    domains: DomainsSection = Field(default_factory=DomainsSection)
    entity: EntitySection = Field(default_factory=EntitySection)

    model_config = ConfigDict(extra="ignore", populate_by_name=True, protected_namespaces=())

    @field_validator("fields", "uploaders", "search_able", mode="before")
    @classmethod
    def null_as_empty_list(cls, value: Any) -> Any:
        return _none_to_list(value)

    @field_validator("schema_", "controllers", "domains", "entity", mode="before")
    @classmethod
    def null_as_empty_section(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("actor_id", "resource_owner_id", "resource_owner", mode="before")
    @classmethod
    def blank_as_none(cls, value: Any) -> Any:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    def contract_for(self, action: str) -> list[str]:
        """Configured contract lines of *action*; unknown actions have none."""
        domain = self.domains.action(action)
        return list(domain.use_case.contract) if domain else []

    @property
    def contracts(self) -> dict[str, list[str]]:
        return {action: self.contract_for(action) for action in ACTIONS}

    @property
    def repository_filters(self) -> list[str]:
        return list(self.domains.action_list.repository.filters)
