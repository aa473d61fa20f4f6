"""Tests for the clean-architecture setup generator (rider_kick.generators.clean_arch_gen).

Covers:
- The --setup guard
- Domain skeleton, initializers, models, RSpec support and dotenv files
- Gemfile updates (dev/test group, runtime block, idempotence, missing Gemfile)
- Engine-prefixed destinations
"""

from __future__ import annotations

import pytest

from rider_kick.config import Configuration
from rider_kick.errors import ValidationError
from rider_kick.generators.base import configure_engine
from rider_kick.generators.clean_arch_gen import (
    DEVELOPMENT_GEMS,
    DOMAIN_FILES,
    GEMS,
    INITIALIZERS,
    SPEC_SUPPORT_FILES,
    CleanArchGenerator,
    gem_declared,
    gem_line,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def generator(rails_root) -> CleanArchGenerator:
    return CleanArchGenerator(Configuration(root=rails_root))


def gemfile(root) -> str:
    return (root / "Gemfile").read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# Gem helpers
# ---------------------------------------------------------------------------


class TestGemHelpers:
    def test_gem_declared_either_quote(self):
        content = "gem 'pagy', '~> 9.2'\n  gem \"faker\"\n"
        assert gem_declared(content, "pagy")
        assert gem_declared(content, "faker")
        assert not gem_declared(content, "hashie")

    def test_gem_declared_ignores_prefix_match(self):
        assert not gem_declared("gem 'dry-struct-extra'\n", "dry-struct")

    def test_gem_line(self):
        assert gem_line("hashie") == "gem 'hashie'"
        assert gem_line("pagy", "~> 9.2") == "gem 'pagy', '~> 9.2'"


# ---------------------------------------------------------------------------
# Setup guard
# ---------------------------------------------------------------------------


def test_setup_flag_required(generator, rails_root):
    with pytest.raises(ValidationError, match="--setup"):
        generator.generate()
    assert not (rails_root / "app").exists()


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


class TestFiles:
    def test_domain_files(self, generator, rails_root):
        generator.generate(setup=True)
        for relative in DOMAIN_FILES:
            assert (rails_root / "app/domains/core" / relative).is_file(), relative

    def test_domain_namespace(self, generator, rails_root):
        generator.generate(setup=True)
        contract = (rails_root / "app/domains/core/use_cases/contract/pagination.rb").read_text(encoding="utf-8")
        repository = (rails_root / "app/domains/core/repositories/abstract_repository.rb").read_text(encoding="utf-8")
        assert "class Core::UseCases::Contract::Pagination" in contract
        assert "class Core::Repositories::AbstractRepository" in repository

    def test_initializers(self, generator, rails_root):
        generator.generate(setup=True)
        for name in INITIALIZERS:
            assert (rails_root / f"config/initializers/{name}.rb").is_file(), name
        version = (rails_root / "config/initializers/version.rb").read_text(encoding="utf-8")
        assert "module BlogApp\n" in version

    def test_models(self, generator, rails_root):
        generator.generate(setup=True)
        record = (rails_root / "app/models/application_record.rb").read_text(encoding="utf-8")
        assert "class ApplicationRecord < ActiveRecord::Base" in record
        assert "module Models\n" in (rails_root / "app/models/models.rb").read_text(encoding="utf-8")
        assert (rails_root / "app/models/models").is_dir()

    def test_rspec_and_dotenv(self, generator, rails_root):
        generator.generate(setup=True)
        for name in SPEC_SUPPORT_FILES:
            assert (rails_root / f"spec/support/{name}.rb").is_file(), name
        assert (rails_root / "spec/rails_helper.rb").is_file()
        assert "--require rails_helper" in (rails_root / ".rspec").read_text(encoding="utf-8")
        env = (rails_root / ".env.example").read_text(encoding="utf-8")
        assert "DATABASE_NAME=blog_app_development" in env

    def test_returns_written_paths(self, generator, rails_root):
        written = generator.generate(setup=True)
        assert "app/domains/core/builders/error.rb" in written
        assert "spec/rails_helper.rb" in written
        assert ".env.example" in written

    def test_engine_destinations(self, rails_root):
        config = configure_engine(Configuration(root=rails_root), "Admin")
        CleanArchGenerator(config).generate(setup=True)
        engine = rails_root / "engines/admin"
        assert (engine / "app/domains/admin/use_cases/get_version.rb").is_file()
        assert (engine / "config/initializers/pagy.rb").is_file()
        assert (engine / "spec/rails_helper.rb").is_file()
        record = (engine / "app/models/admin/application_record.rb").read_text(encoding="utf-8")
        assert "class Admin::ApplicationRecord < ActiveRecord::Base" in record
        models = (engine / "app/models/admin/models.rb").read_text(encoding="utf-8")
        assert "module Admin::Models\n" in models
        contract = (engine / "app/domains/admin/use_cases/contract/default.rb").read_text(encoding="utf-8")
        assert "class Admin::UseCases::Contract::Default" in contract


# ---------------------------------------------------------------------------
# Gemfile
# ---------------------------------------------------------------------------


class TestGemfile:
    def test_development_gems_inside_group(self, generator, rails_root):
        generator.generate(setup=True)
        content = gemfile(rails_root)
        group = content.index("group :development, :test do\n")
        end = content.index("end\n", group)
        for name in DEVELOPMENT_GEMS:
            position = content.index(f"  gem '{name}'\n")
            assert group < position < end
        assert "  gem 'debug'\n" in content

    def test_runtime_gems_appended(self, generator, rails_root):
        generator.generate(setup=True)
        content = gemfile(rails_root)
        assert "\n# Clean architecture\ngem 'rider-kick'\n" in content
        assert "gem 'pagy', '~> 9.2'\n" in content
        assert "gem 'image_processing', '>= 1.2'\n" in content
        for name, _ in GEMS:
            assert gem_declared(content, name)

    def test_existing_gems_kept(self, generator, rails_root):
        (rails_root / "Gemfile").write_text(
            "source 'https://rubygems.org'\ngem \"hashie\", \"~> 5.0\"\n", encoding="utf-8"
        )
        generator.generate(setup=True)
        content = gemfile(rails_root)
        assert content.count("hashie") == 1
        assert "\ngroup :development, :test do\n  gem 'rspec-rails'\n" in content

    def test_second_run_changes_nothing(self, rails_root):
        CleanArchGenerator(Configuration(root=rails_root)).generate(setup=True)
        before = gemfile(rails_root)
        second = CleanArchGenerator(Configuration(root=rails_root))
        second.generate(setup=True)
        assert gemfile(rails_root) == before
        assert ("identical", "Gemfile") in second.actions
        assert {status for status, _ in second.actions} <= {"identical", "exist"}

    def test_missing_gemfile_warns(self, generator, rails_root):
        (rails_root / "Gemfile").unlink()
        generator.generate(setup=True)
        assert not (rails_root / "Gemfile").exists()
