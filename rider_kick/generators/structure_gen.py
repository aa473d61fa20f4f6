"""Structure generator -- writes ``db/structures/<resources>_structure.yaml``.

Takes a model class name plus ``key:value`` settings and, using the model's
columns, derives every section a structure file holds: the field lists,
per-action contract lines, repository filters, controller field lists and
entity attributes.  The resulting file is the input of the scaffold
generator and is meant to be edited by hand before scaffolding.

Quick usage::

    generator = StructureGenerator(config, schema=registry)
    generator.generate("Models::User", {"actor": "owner", "uploaders": "avatar"})
"""

from __future__ import annotations

import posixpath
from typing import Any, Optional

from rider_kick.config import Configuration
from rider_kick.contracts import (
    contract_line,
    create_contract_line,
    id_contract_line,
    inject_resource_owner,
    update_contract_line,
    upload_contract_line,
    validation_type_for,
)
from rider_kick.errors import MissingRequiredSettingError, ValidationError
from rider_kick.generators.base import BaseGenerator
from rider_kick.generators.templates import TemplateRenderer
from rider_kick.inflector import camelize, demodulize, is_singular, pluralize, underscore
from rider_kick.schema.models import SYSTEM_COLUMNS, ColumnDescriptor, ModelSchema, SchemaRegistry
from rider_kick.structure.loader import structure_file_name
from rider_kick.utils import split_list

REQUIRED_SETTINGS = ("actor",)
ENTITY_SKIPPED_FIELDS = ["id", "created_at", "updated_at"]


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def contract_field_columns(columns: list[ColumnDescriptor], uploaders: list[str]) -> list[ColumnDescriptor]:
    """Columns that become contract fields, in declaration order.

    Primary key, timestamps, STI ``type`` and uploader columns are excluded.
    """
    return [c for c in columns if c.name not in SYSTEM_COLUMNS and c.name not in uploaders]


def uploader_definitions(names: list[str]) -> list[dict[str, str]]:
    """Singular names become ``single`` attachments, plural names ``multiple``."""
    return [
        {"name": name, "type": "single" if is_singular(name) else "multiple"}
        for name in names
    ]


def search_filter(field: str) -> str:
    return f"{{ field: '{field}', type: 'search' }}"


class StructureGenerator(BaseGenerator):
    """Generates a structure YAML file for one model.

    Args:
        config: Active configuration.
        schema: Registry providing the model's columns.
        renderer: Optional template renderer override.
        force: Overwrite an existing structure file with different content.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        schema: SchemaRegistry,
        renderer: TemplateRenderer | None = None,
        force: bool = False,
    ) -> None:
        super().__init__(config, renderer=renderer, force=force)
        self.schema = schema

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, model_name: str, settings: dict[str, str]) -> str:
        """Validate the inputs and write the structure file.

        Args:
            model_name: ActiveRecord class name, e.g. ``Models::User``.
            settings: Parsed ``key:value`` arguments (``actor``,
                ``resource_owner``, ``resource_owner_id``, ``uploaders``,
                ``search_able``).

        Returns:
            Root-relative path of the structure file.

        Raises:
            MissingPrerequisiteStructureError: If clean-arch setup has not run.
            MissingRequiredSettingError: If ``actor`` is missing.
            ModelNotFoundError: If the schema has no such model.
            ValidationError: If a searchable field is not a column.
        """
        self.validate_domains_path()
        settings = self.validate_settings(settings)
        model_schema = self.schema.model(model_name)
        context = self.build_context(model_name, model_schema, settings)
        destination = posixpath.join(
            self.config.structures_path, structure_file_name(context["scope_path"])
        )
        self.template("structure/structure.yaml.j2", destination, context)
        return destination

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def validate_settings(settings: dict[str, str]) -> dict[str, str]:
        """Trim every value and check the required settings are present."""
        cleaned = {key.strip(): (value or "").strip() for key, value in settings.items()}
        for key in REQUIRED_SETTINGS:
            if not cleaned.get(key):
                raise MissingRequiredSettingError(key)
        return cleaned

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    def build_context(
        self, model_name: str, model_schema: ModelSchema, settings: dict[str, str]
    ) -> dict[str, Any]:
        """Assemble the template variables for the structure file."""
        subject_class = demodulize(model_name)
        variable_subject = underscore(subject_class)
        scope_path = underscore(pluralize(subject_class))

        uploaders = split_list(settings.get("uploaders"))
        search_able = split_list(settings.get("search_able"))
        actor = settings["actor"].lower()
        resource_owner_id = settings.get("resource_owner_id") or None
        resource_owner = settings.get("resource_owner") or None
        if resource_owner_id and not resource_owner and resource_owner_id.endswith("_id"):
            resource_owner = resource_owner_id[: -len("_id")]

        columns = model_schema.columns
        missing = [field for field in search_able if not model_schema.has_column(field)]
        if missing:
            raise ValidationError(
                f"Searchable field(s) not found in {model_name}: {', '.join(missing)}",
                available=", ".join(model_schema.column_names),
            )

        field_columns = contract_field_columns(columns, uploaders)
        fields = [c.name for c in field_columns]
        definitions = uploader_definitions(uploaders)

        return {
            "model": model_name,
            "subject_class": subject_class,
            "variable_subject": variable_subject,
            "scope_path": scope_path,
            "scope_class": camelize(scope_path),
            "resource_name": scope_path,
            "actor": actor,
            "actor_id": f"{actor}_id" if actor else "",
            "resource_owner": resource_owner,
            "resource_owner_id": resource_owner_id,
            "fields": fields,
            "uploaders": definitions,
            "search_able": search_able,
            "columns": [c.as_structure_dict() for c in columns],
            "list_fields": fields,
            "show_fields": ["id", *fields, *uploaders, "created_at", "updated_at"],
            "form_fields": self.form_fields(field_columns, definitions),
            "contracts": self.contracts(field_columns, definitions, search_able, resource_owner_id),
            "repository_list_filters": [search_filter(field) for field in search_able],
            "entity_skipped_fields": ENTITY_SKIPPED_FIELDS,
            "entity_db_attributes": fields,
        }

    def form_fields(
        self, field_columns: list[ColumnDescriptor], uploaders: list[dict[str, str]]
    ) -> list[dict[str, str]]:
        form = [{"name": c.name, "type": c.type} for c in field_columns]
        for uploader in uploaders:
            form.append(
                {"name": uploader["name"], "type": "files" if uploader["type"] == "multiple" else "file"}
            )
        return form

    def contracts(
        self,
        field_columns: list[ColumnDescriptor],
        uploaders: list[dict[str, str]],
        search_able: list[str],
        resource_owner_id: Optional[str],
    ) -> dict[str, list[str]]:
        """Per-action contract lines.

        The resource-owner column is always a required rule; when it is not a
        column at all the rule is appended to every action.
        """
        type_mapping = self.config.type_mapping

        def owner_or(column: ColumnDescriptor, line: str) -> str:
            if column.name == resource_owner_id:
                return contract_line(column.name, validation_type_for(column.type, type_mapping), True)
            return line

        create = [
            owner_or(c, create_contract_line(c.name, c.type, c.nullable, type_mapping=type_mapping))
            for c in field_columns
        ]
        create += [upload_contract_line(u["name"]) for u in uploaders]

        update = [id_contract_line()]
        update += [
            owner_or(c, update_contract_line(c.name, c.type, type_mapping=type_mapping))
            for c in field_columns
        ]
        update += [upload_contract_line(u["name"]) for u in uploaders]

        listing = [contract_line(field, ":string", required=False) for field in search_able]

        contracts = {
            "list": listing,
            "fetch_by_id": [id_contract_line()],
            "create": create,
            "update": update,
            "destroy": [id_contract_line()],
        }
        return {
            action: inject_resource_owner(lines, resource_owner_id)
            for action, lines in contracts.items()
        }
