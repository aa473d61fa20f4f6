"""Blank generator -- empty use case, repository, builder and entity skeletons.

Unlike the scaffold generator it needs no structure file or model: the class
names come from the ``actor``, ``action`` and ``scope`` settings alone, e.g.
``actor:user action:export scope:report`` yields
``Core::UseCases::Reports::UserExportReport``.
"""

from __future__ import annotations

import posixpath
from typing import Any

from rider_kick.errors import MissingRequiredSettingError, ValidationError
from rider_kick.generators.base import BaseGenerator
from rider_kick.inflector import camelize, pluralize, underscore
from rider_kick.utils import sanitize_name


class BlankGenerator(BaseGenerator):
    """Generates the skeleton files selected by the ``use_case`` / ``repository`` /
    ``builder`` / ``entity`` flags.  ``builder`` implies ``entity``.
    """

    def generate(
        self,
        settings: dict[str, str],
        *,
        use_case: bool = False,
        repository: bool = False,
        builder: bool = False,
        entity: bool = False,
    ) -> list[str]:
        if not any((use_case, repository, builder, entity)):
            raise ValidationError(
                "Nothing to generate. Pass at least one of --use-case, --repository, --builder, --entity"
            )
        required = ["scope"]
        if use_case or repository:
            required.append("action")
        if use_case:
            required.append("actor")
        for key in required:
            if not (settings.get(key) or "").strip():
                raise MissingRequiredSettingError(key)

        self.validate_domains_path()
        context = self.build_context(settings)
        domains = self.config.domains_path

        written: list[str] = []
        if use_case:
            destination = posixpath.join(
                domains, "use_cases", context["scope_path"], f"{context['use_case_file']}.rb"
            )
            self.template("blank/use_case.rb.j2", destination, context)
            written.append(destination)
        if repository:
            destination = posixpath.join(
                domains, "repositories", context["scope_path"], f"{context['repository_file']}.rb"
            )
            self.template("blank/repository.rb.j2", destination, context)
            written.append(destination)
        if builder:
            destination = posixpath.join(domains, "builders", f"{context['variable_subject']}.rb")
            self.template("blank/builder.rb.j2", destination, context)
            written.append(destination)
        if entity or builder:
            destination = posixpath.join(self.config.entities_path, f"{context['variable_subject']}.rb")
            self.template("blank/entity.rb.j2", destination, context)
            written.append(destination)
        return written

    def build_context(self, settings: dict[str, str]) -> dict[str, Any]:
        variable_subject = sanitize_name(underscore(settings["scope"]))
        action = sanitize_name(settings.get("action") or "")
        actor = sanitize_name(settings.get("actor") or "")
        scope_path = pluralize(variable_subject)
        use_case_file = f"{actor}_{action}_{variable_subject}"
        repository_file = f"{action}_{variable_subject}"
        domain_class = self.config.domain_class_name
        return {
            "variable_subject": variable_subject,
            "scope_path": scope_path,
            "use_case_file": use_case_file,
            "repository_file": repository_file,
            "domain_class": domain_class,
            "use_case_full_class": f"{domain_class}::UseCases::{camelize(scope_path)}::{camelize(use_case_file)}",
            "repository_full_class": f"{domain_class}::Repositories::{camelize(scope_path)}::{camelize(repository_file)}",
            "builder_class": f"{domain_class}::Builders::{camelize(variable_subject)}",
            "entity_class": f"{domain_class}::Entities::{camelize(variable_subject)}",
        }
