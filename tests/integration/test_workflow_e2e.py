"""End-to-end generator runs through the ``rider-kick`` command line.

Each test starts from a bare Rails tree and runs the commands in the order a
developer would: clean-arch setup, structure, (hand edit), scaffold, factory.
Only the temporary directory is touched.
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from rider_kick.cli import main
from rider_kick.structure import load_structure

SCHEMA = {
    "models": {
        "Models::Product": {
            "table": "products",
            "columns": [
                {"name": "id", "type": "uuid", "null": False},
                {"name": "store_id", "type": "uuid", "null": False},
                {"name": "name", "type": "string", "null": False},
                {"name": "description", "type": "text", "null": True},
                {"name": "price", "type": "decimal", "null": False},
                {"name": "created_at", "type": "datetime", "null": False},
                {"name": "updated_at", "type": "datetime", "null": False},
            ],
        }
    }
}

PRODUCT_MODEL = "class Models::Product < ApplicationRecord\nend\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def rider_kick(root: Path, *argv: str) -> None:
    main([*argv, "--root", str(root), "--quiet"])


def write_schema(root: Path) -> None:
    (root / "db").mkdir(exist_ok=True)
    (root / "db" / "rider_kick_schema.yml").write_text(yaml.safe_dump(SCHEMA), encoding="utf-8")


def ruby_files(directory: Path) -> list[str]:
    return sorted(p.relative_to(directory).as_posix() for p in directory.rglob("*.rb"))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestMainApplicationWorkflow:
    def test_full_workflow(self, rails_root):
        write_schema(rails_root)
        rider_kick(rails_root, "clean-arch", "--setup")
        (rails_root / "app/models/models/product.rb").write_text(PRODUCT_MODEL, encoding="utf-8")

        rider_kick(
            rails_root,
            "structure",
            "Models::Product",
            "actor:seller",
            "resource_owner_id:store_id",
            "uploaders:images",
            "search_able:name",
        )
        structure = load_structure(rails_root / "db/structures/products_structure.yaml")
        assert structure.resource_owner == "store"

        rider_kick(rails_root, "scaffold", "products")
        rider_kick(rails_root, "factory", "Models::Product")

        domains = rails_root / "app/domains/core"
        files = ruby_files(domains)
        assert "use_cases/products/seller_list_product.rb" in files
        assert "use_cases/products/seller_fetch_product_by_id_spec.rb" in files
        assert "repositories/products/destroy_product.rb" in files
        assert "repositories/abstract_repository.rb" in files
        assert "entities/product.rb" in files

        listing = (domains / "repositories/products/list_product.rb").read_text(encoding="utf-8")
        assert "Models::Product.where(store_id: @params.store_id)" in listing
        assert "'name::text ILIKE :search'" in listing

        model = (rails_root / "app/models/models/product.rb").read_text(encoding="utf-8")
        assert "has_many_attached :images, dependent: :purge" in model

        factory = (rails_root / "spec/factories/product.rb").read_text(encoding="utf-8")
        assert "    price { Faker::Commerce.price }\n" in factory
        assert "store_id" not in factory

    def test_hand_edited_structure_drives_owner_filter(self, rails_root):
        write_schema(rails_root)
        rider_kick(rails_root, "clean-arch", "--setup")
        rider_kick(rails_root, "structure", "Models::Product", "actor:seller", "resource_owner_id:store_id")

        path = rails_root / "db/structures/products_structure.yaml"
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
        document["domains"]["action_fetch_by_id"]["use_case"]["contract"] = [
            "required(:id).filled(:string)"
        ]
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")

        rider_kick(rails_root, "scaffold", "products")
        domains = rails_root / "app/domains/core/repositories/products"
        fetch = (domains / "fetch_product_by_id.rb").read_text(encoding="utf-8")
        destroy = (domains / "destroy_product.rb").read_text(encoding="utf-8")
        assert "find_by(id: @id)\n" in fetch
        assert "store_id: @params.store_id" in destroy

    def test_structure_before_setup_fails(self, rails_root, capsys):
        write_schema(rails_root)
        with pytest.raises(SystemExit) as exc_info:
            rider_kick(rails_root, "structure", "Models::Product", "actor:seller")
        assert exc_info.value.code == 1
        assert "Clean architecture structure not found" in capsys.readouterr().out


@pytest.mark.integration
class TestEngineWorkflow:
    def test_engine_workflow(self, rails_root):
        write_schema(rails_root)
        rider_kick(rails_root, "init", "--engine", "Catalog")
        rider_kick(rails_root, "clean-arch", "--setup")
        rider_kick(rails_root, "structure", "Models::Product", "actor:admin")
        rider_kick(rails_root, "scaffold", "products")
        rider_kick(rails_root, "factory", "Models::Product", "--static")

        engine = rails_root / "engines/catalog"
        assert (engine / "db/structures/products_structure.yaml").is_file()
        create = engine / "app/domains/catalog/use_cases/products/admin_create_product.rb"
        assert "class Catalog::UseCases::Products::AdminCreateProduct" in create.read_text(encoding="utf-8")
        assert (engine / "app/models/catalog/models/product_spec.rb").is_file()
        assert (engine / "spec/factories/product.rb").is_file()
