"""Scaffold generator -- use cases, repositories, builder and entity for a resource.

Reads ``<structures_path>/<name>_structure.yaml`` plus the model's columns and
renders, for each of the five actions (list, fetch_by_id, create, update,
destroy), a use case and a repository with sibling RSpec files, then a builder
(with spec), an entity and a model spec.  Uploaders are attached to the model
class file.

Repositories only scope queries to the resource owner when the owner field is
part of that action's contract, so editing the structure file is enough to
switch owner filtering on or off per action.
"""

from __future__ import annotations

import posixpath
import re
from typing import Any

from rider_kick.config import Configuration
from rider_kick.contracts import (
    contract_fields,
    entity_type_for,
    field_in_contract,
    inject_resource_owner,
    upload_entity_type,
)
from rider_kick.errors import ValidationError
from rider_kick.generators.base import BaseGenerator
from rider_kick.generators.structure_gen import search_filter
from rider_kick.generators.templates import TemplateRenderer
from rider_kick.inflector import camelize, demodulize, pluralize, singularize, underscore
from rider_kick.schema.models import SYSTEM_COLUMNS, TIMESTAMP_COLUMNS, ModelSchema, SchemaRegistry
from rider_kick.structure.loader import load_structure, structure_file_name
from rider_kick.structure.models import ACTIONS, StructureSpec
from rider_kick.utils import print_warning

_FILTER_FIELD = re.compile(r"field:\s*'([^']+)'")

# action -> (template name, file-name suffix)
_ACTION_FILES: dict[str, tuple[str, str]] = {
    "create": ("create", ""),
    "update": ("update", ""),
    "list": ("list", ""),
    "destroy": ("destroy", ""),
    "fetch_by_id": ("fetch", "_by_id"),
}


# ---------------------------------------------------------------------------
# Context helpers
# ---------------------------------------------------------------------------


def filter_field_names(filters: list[str]) -> list[str]:
    """Field names referenced by ``{ field: 'x', type: 'search' }`` filter strings."""
    names = []
    for item in filters:
        match = _FILTER_FIELD.search(str(item))
        if match:
            names.append(match.group(1))
    return names


def _sample_value_for_type(db_type: str, field: str) -> str:
    """Ruby literal used for a column in generated specs."""
    if field.endswith("_id") or db_type == "uuid":
        return "SecureRandom.uuid"
    return {
        "integer": "1",
        "float": "1.5",
        "decimal": "BigDecimal('10.5')",
        "boolean": "true",
        "date": "Date.current",
        "datetime": "Time.current",
        "json": "{}",
        "jsonb": "{}",
    }.get(db_type, f"'{field.replace('_', ' ').capitalize()}'")


class ScaffoldGenerator(BaseGenerator):
    """Generates the clean-architecture files for one structure file.

    Args:
        config: Active configuration.
        schema: Registry providing the model's columns.
        renderer: Optional template renderer override.
        force: Overwrite existing files with different content.
        inject_resource_owner: Append the resource-owner rule to every
            action contract that lacks it before rendering.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        schema: SchemaRegistry,
        renderer: TemplateRenderer | None = None,
        force: bool = False,
        inject_resource_owner: bool = False,
    ) -> None:
        super().__init__(config, renderer=renderer, force=force)
        self.schema = schema
        self.inject_resource_owner = inject_resource_owner

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def load(self, structure_name: str) -> StructureSpec:
        """Load ``<structures_path>/<structure_name>_structure.yaml``."""
        relative = posixpath.join(self.config.structures_path, structure_file_name(structure_name))
        self.validate_file_exists(relative, "run `rider-kick structure` first")
        return load_structure(self.path(relative))

    def generate(self, structure_name: str, route_scope: str = "") -> list[str]:
        """Generate every file for *structure_name*.

        Steps:
            1. Check the domains directory exists.
            2. Load the structure file and the model's columns.
            3. Validate repository filters and entity attributes against the
               model columns.
            4. Render use cases and repositories for every action.
            5. Attach uploaders to the model class.
            6. Render builder, entity and model spec.

        Returns:
            Root-relative paths of every file written or checked.
        """
        self.validate_domains_path()
        spec = self.load(structure_name)
        model_schema = self.schema.model(spec.model)
        context = self.build_context(spec, model_schema, route_scope)

        self.validate_repository_filters(structure_name, context, model_schema)
        self.validate_entity_fields(structure_name, context, model_schema)

        written: list[str] = []
        for action in ("create", "update", "list", "destroy", "fetch_by_id"):
            written.extend(self.generate_action_files(action, context))
        self.set_uploaders_in_model(context)
        written.extend(self.generate_builder_and_entity(context))
        return written

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    def contracts_for(self, spec: StructureSpec) -> dict[str, list[str]]:
        contracts = spec.contracts
        if self.inject_resource_owner and spec.resource_owner_id:
            contracts = {
                action: inject_resource_owner(lines, spec.resource_owner_id)
                for action, lines in contracts.items()
            }
        return contracts

    def build_context(
        self, spec: StructureSpec, model_schema: ModelSchema, route_scope: str = ""
    ) -> dict[str, Any]:
        """Template variables shared by every scaffold template."""
        resource_name = underscore(singularize(spec.resource_name)).lower()
        variable_subject = underscore(demodulize(spec.model)).lower()
        scope_path = underscore(pluralize(resource_name)).lower()
        actor = spec.actor.strip().lower()
        resource_owner_id = spec.resource_owner_id
        contracts = self.contracts_for(spec)
        route_scope_path = (route_scope or "").strip().lower()

        filters = spec.repository_filters or [search_filter(f) for f in spec.search_able]
        columns_hash = model_schema.columns_hash
        fields = [c.name for c in model_schema.columns if c.name not in SYSTEM_COLUMNS]

        entity_attributes = []
        entity_names = [n for n in ("id",) if n in columns_hash]
        entity_names += [n for n in spec.entity.db_attributes if n not in entity_names]
        entity_names += [n for n in TIMESTAMP_COLUMNS if n in columns_hash and n not in entity_names]
        for name in entity_names:
            column = columns_hash.get(name)
            entity_attributes.append(
                {
                    "name": name,
                    "type": entity_type_for(column.type if column else None, self.config.entity_type_mapping),
                    "optional": bool(column.nullable) if column else True,
                    "sample": _sample_value_for_type(column.type if column else "string", name),
                }
            )
        uploaders = [
            {
                "name": u.name,
                "type": u.type.value,
                "multiple": u.is_multiple,
                "macro": u.attachment_macro,
                "entity_field": f"{u.name}_urls" if u.is_multiple else f"{u.name}_url",
                "entity_type": upload_entity_type(u.type.value),
                "builder_method": f"with_{u.name}_urls" if u.is_multiple else f"with_{u.name}_url",
            }
            for u in spec.uploaders
        ]

        domain_class = self.config.domain_class_name
        use_case_namespace = "::".join(
            part
            for part in (domain_class, "UseCases", camelize(route_scope_path), camelize(scope_path))
            if part
        )

        return {
            "model_class": spec.model,
            "resource_name": resource_name,
            "actor": actor,
            "actor_id": spec.actor_id or f"{actor}_id",
            "resource_owner": spec.resource_owner,
            "resource_owner_id": resource_owner_id,
            "contracts": contracts,
            "has_resource_owner_id": {
                action: field_in_contract(resource_owner_id, contracts[action]) for action in ACTIONS
            },
            "contract_fields": {action: contract_fields(contracts[action]) for action in ACTIONS},
            "repository_list_filters": filters,
            "filter_fields": filter_field_names(filters),
            "uploaders": uploaders,
            "uploader_names": [u["name"] for u in uploaders],
            "entity_db_fields": list(spec.entity.db_attributes),
            "entity_attributes": entity_attributes,
            "variable_subject": variable_subject,
            "scope_path": scope_path,
            "scope_class": camelize(scope_path),
            "scope_subject": singularize(scope_path),
            "subject_class": camelize(variable_subject),
            "fields": fields,
            "columns": [c.as_structure_dict() for c in model_schema.columns],
            "column_samples": {
                c.name: _sample_value_for_type(c.type, c.name) for c in model_schema.columns
            },
            "route_scope_path": route_scope_path,
            "route_scope_class": camelize(route_scope_path),
            "domain_class": domain_class,
            "use_case_namespace": use_case_namespace,
            "repository_namespace": f"{domain_class}::Repositories::{camelize(scope_path)}",
            "builder_class": f"{domain_class}::Builders::{camelize(variable_subject)}",
            "entity_class": f"{domain_class}::Entities::{camelize(variable_subject)}",
        }

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_repository_filters(
        self, structure_name: str, context: dict[str, Any], model_schema: ModelSchema
    ) -> None:
        for field in context["filter_fields"]:
            if not model_schema.has_column(field):
                raise ValidationError(
                    f"Repository filter field '{field}' not found in model {model_schema.model}",
                    structure=structure_file_name(structure_name),
                    available=", ".join(model_schema.column_names),
                )

    def validate_entity_fields(
        self, structure_name: str, context: dict[str, Any], model_schema: ModelSchema
    ) -> None:
        missing = [f for f in context["entity_db_fields"] if not model_schema.has_column(f)]
        if missing:
            raise ValidationError(
                f"Entity field(s) not found in model {model_schema.model}: {', '.join(missing)}",
                structure=structure_file_name(structure_name),
                available=", ".join(model_schema.column_names),
            )

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _use_case_dir(self, context: dict[str, Any]) -> str:
        parts = [self.config.domains_path, "use_cases"]
        if context["route_scope_path"]:
            parts.append(context["route_scope_path"])
        parts.append(context["scope_path"])
        return posixpath.join(*parts)

    def _repository_dir(self, context: dict[str, Any]) -> str:
        return posixpath.join(self.config.domains_path, "repositories", context["scope_path"])

    def generate_action_files(self, action: str, context: dict[str, Any]) -> list[str]:
        """Use case + repository (each with spec) for one action."""
        template_name, suffix = _ACTION_FILES[action]
        subject = context["variable_subject"]
        use_case_file = f"{context['actor']}_{template_name}_{subject}{suffix}"
        repository_file = f"{template_name}_{subject}{suffix}"

        action_context = {
            **context,
            "action": action,
            "contract": context["contracts"][action],
            "owner_filter": context["has_resource_owner_id"][action],
            "use_case_class": camelize(use_case_file),
            "repository_class": camelize(repository_file),
            "use_case_full_class": f"{context['use_case_namespace']}::{camelize(use_case_file)}",
            "repository_full_class": f"{context['repository_namespace']}::{camelize(repository_file)}",
        }

        written = []
        for kind, directory, filename in (
            ("use_cases", self._use_case_dir(context), use_case_file),
            ("repositories", self._repository_dir(context), repository_file),
        ):
            code = posixpath.join(directory, f"{filename}.rb")
            spec = posixpath.join(directory, f"{filename}_spec.rb")
            self.template(f"scaffold/{kind}/{template_name}.rb.j2", code, action_context)
            self.template(f"scaffold/{kind}/{template_name}_spec.rb.j2", spec, action_context)
            written.extend([code, spec])
        return written

    def generate_builder_and_entity(self, context: dict[str, Any]) -> list[str]:
        subject = context["variable_subject"]
        domains = self.config.domains_path
        files = [
            ("scaffold/builders/builder.rb.j2", posixpath.join(domains, "builders", f"{subject}.rb")),
            ("scaffold/builders/builder_spec.rb.j2", posixpath.join(domains, "builders", f"{subject}_spec.rb")),
            ("scaffold/entities/entity.rb.j2", posixpath.join(self.config.entities_path, f"{subject}.rb")),
            ("scaffold/models/model_spec.rb.j2", self.model_spec_path(context)),
        ]
        for template_path, destination in files:
            self.template(template_path, destination, context)
        return [destination for _, destination in files]

    def model_file_path(self, context: dict[str, Any]) -> str:
        return posixpath.join(self.config.models_path, f"{context['variable_subject']}.rb")

    def model_spec_path(self, context: dict[str, Any]) -> str:
        return posixpath.join(self.config.models_path, f"{context['variable_subject']}_spec.rb")

    def set_uploaders_in_model(self, context: dict[str, Any]) -> None:
        """Add ``has_one_attached`` / ``has_many_attached`` lines to the model class.

        Lines already present are left alone and a missing model file is
        skipped with a warning, so re-running never duplicates attachments.
        """
        if not context["uploaders"]:
            return
        model_path = self.model_file_path(context)
        target = self.path(model_path)
        if not target.is_file():
            for uploader in context["uploaders"]:
                print_warning(f"Skip attaching {uploader['name']}: model file not found: {model_path}")
            return

        anchor = rf"class {re.escape(context['model_class'])} < ApplicationRecord[^\n]*\n"
        for uploader in context["uploaders"]:
            content = target.read_text(encoding="utf-8")
            pattern = rf"{uploader['macro']}\s+:{re.escape(uploader['name'])}\b"
            if re.search(pattern, content):
                self._record("identical", target)
                continue
            line = f"  {uploader['macro']} :{uploader['name']}, dependent: :purge\n"
            if not self.inject_into_file(model_path, line, after=anchor):
                print_warning(
                    f"Skip attaching {uploader['name']}: class {context['model_class']} "
                    f"not found in {model_path}"
                )
