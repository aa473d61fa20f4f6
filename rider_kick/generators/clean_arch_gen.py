"""Clean-architecture setup generator (``rider-kick clean-arch --setup``).

Creates the domain directory skeleton and the support files every scaffolded
resource depends on: base contracts, the abstract repository, error and
pagination builders/entities, initializers, models module and the RSpec
support files.  Missing gems are appended to the ``Gemfile``.

Shell steps (``bundle install``, Active Storage migrations) are printed as next
steps rather than executed.
"""

from __future__ import annotations

import posixpath
import re
from typing import Any

from rider_kick.errors import ValidationError
from rider_kick.generators.base import BaseGenerator
from rider_kick.inflector import camelize
from rider_kick.utils import console, print_warning

DOMAIN_DIRECTORIES = ("use_cases/contract", "repositories", "builders", "entities", "utils")

# template (relative to clean_arch/domains) -> destination (relative to domains_path)
DOMAIN_FILES = (
    "use_cases/contract/pagination.rb",
    "use_cases/contract/default.rb",
    "use_cases/get_version.rb",
    "builders/error.rb",
    "builders/pagination.rb",
    "entities/error.rb",
    "entities/pagination.rb",
    "repositories/abstract_repository.rb",
    "utils/request_methods.rb",
)

INITIALIZERS = ("clean_architecture", "hashie", "pagy", "version", "zeitwerk")

SPEC_SUPPORT_FILES = (
    "class_stubber",
    "factory_bot",
    "faker",
    "file_stuber",
    "repository_stubber",
    "use_case_stubber",
)

GEMS: tuple[tuple[str, str], ...] = (
    ("rider-kick", ""),
    ("dotenv-rails", ""),
    ("hashie", ""),
    ("dry-validation", ""),
    ("dry-struct", ""),
    ("dry-monads", ""),
    ("image_processing", ">= 1.2"),
    ("pagy", "~> 9.2"),
)

DEVELOPMENT_GEMS: tuple[str, ...] = (
    "rspec-rails",
    "factory_bot_rails",
    "faker",
    "shoulda-matchers",
)

NEXT_STEPS = (
    "bundle install",
    "bin/rails active_storage:install",
    "bin/rails db:migrate",
    "bundle exec rspec",
)

_DEV_TEST_GROUP = r"group :development, :test do[^\n]*\n"


def gem_declared(gemfile: str, name: str) -> bool:
    """Whether *gemfile* already declares ``gem '<name>'`` (either quote style)."""
    return re.search(rf"""^\s*gem\s+['"]{re.escape(name)}['"]""", gemfile, re.MULTILINE) is not None


def gem_line(name: str, requirement: str = "") -> str:
    if requirement:
        return f"gem '{name}', '{requirement}'"
    return f"gem '{name}'"


class CleanArchGenerator(BaseGenerator):
    """Sets up the clean-architecture skeleton of an application or engine."""

    def generate(self, setup: bool = False) -> list[str]:
        """Create the domain structure and support files.

        Args:
            setup: Must be ``True``; guards against accidental runs.

        Raises:
            ValidationError: If *setup* is not set.
        """
        if not setup:
            raise ValidationError(
                "The --setup option must be specified to create the domain structure."
            )
        context = self.build_context()
        written: list[str] = []
        written.extend(self.setup_domain_structure(context))
        written.extend(self.setup_initializers(context))
        written.extend(self.setup_models(context))
        written.extend(self.setup_rspec(context))
        written.extend(self.setup_dotenv(context))
        self.add_gem_dependencies()
        self.print_next_steps()
        return written

    def build_context(self) -> dict[str, Any]:
        config = self.config
        models_module = "Models"
        application_record_class = "ApplicationRecord"
        if config.engine_name:
            engine_module = camelize(config.engine_name)
            models_module = f"{engine_module}::Models"
            application_record_class = f"{engine_module}::ApplicationRecord"
        return {
            "domain_class": config.domain_class_name,
            "domains_path": config.domains_path,
            "application_name": config.application_name,
            "engine_name": config.engine_name,
            "models_module": models_module,
            "application_record_class": application_record_class,
        }

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def setup_domain_structure(self, context: dict[str, Any]) -> list[str]:
        domains = self.config.domains_path
        for directory in DOMAIN_DIRECTORIES:
            self.empty_directory(posixpath.join(domains, directory))
        written = []
        for relative in DOMAIN_FILES:
            destination = posixpath.join(domains, relative)
            self.template(f"clean_arch/domains/{relative}.j2", destination, context)
            written.append(destination)
        return written

    def setup_initializers(self, context: dict[str, Any]) -> list[str]:
        written = []
        for name in INITIALIZERS:
            destination = self.config.engine_path(f"config/initializers/{name}.rb")
            self.template(f"clean_arch/config/initializers/{name}.rb.j2", destination, context)
            written.append(destination)
        return written

    def setup_models(self, context: dict[str, Any]) -> list[str]:
        models_dir = posixpath.dirname(self.config.models_path)
        files = (
            ("clean_arch/models/application_record.rb.j2", posixpath.join(models_dir, "application_record.rb")),
            ("clean_arch/models/models.rb.j2", posixpath.join(models_dir, "models.rb")),
        )
        for template_path, destination in files:
            self.template(template_path, destination, context)
        self.empty_directory(self.config.models_path)
        return [destination for _, destination in files]

    def setup_rspec(self, context: dict[str, Any]) -> list[str]:
        spec_root = self.config.spec_root
        written = []
        for name in SPEC_SUPPORT_FILES:
            destination = posixpath.join(spec_root, "support", f"{name}.rb")
            self.template(f"clean_arch/spec/support/{name}.rb.j2", destination, context)
            written.append(destination)
        rails_helper = posixpath.join(spec_root, "rails_helper.rb")
        self.template("clean_arch/spec/rails_helper.rb.j2", rails_helper, context)
        rspec = self.config.engine_path(".rspec")
        self.template("clean_arch/rspec.j2", rspec, context)
        return [*written, rails_helper, rspec]

    def setup_dotenv(self, context: dict[str, Any]) -> list[str]:
        destination = self.config.engine_path(".env.example")
        self.template("clean_arch/env.example.j2", destination, context)
        return [destination]

    def add_gem_dependencies(self) -> None:
        """Declare the runtime and development gems the generated code needs.

        Gems already present are left alone, so repeated runs change nothing.
        """
        gemfile_path = self.path("Gemfile")
        if not gemfile_path.is_file():
            print_warning("Gemfile not found; add the required gems manually")
            return

        content = gemfile_path.read_text(encoding="utf-8")
        development = [name for name in DEVELOPMENT_GEMS if not gem_declared(content, name)]
        if development:
            lines = "".join(f"  {gem_line(name)}\n" for name in development)
            if not self.inject_into_file("Gemfile", lines, after=_DEV_TEST_GROUP):
                self.append_to_file("Gemfile", f"\ngroup :development, :test do\n{lines}end\n")

        content = gemfile_path.read_text(encoding="utf-8")
        runtime = [(name, req) for name, req in GEMS if not gem_declared(content, name)]
        if runtime:
            block = "".join(f"{gem_line(name, req)}\n" for name, req in runtime)
            self.append_to_file("Gemfile", f"\n# Clean architecture\n{block}")
        if not development and not runtime:
            self._record("identical", gemfile_path)

    def print_next_steps(self) -> None:
        console.print()
        console.print("[bold]Next steps:[/bold]")
        for step in NEXT_STEPS:
            console.print(f"  $ {step}", highlight=False)
