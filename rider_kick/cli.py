"""Command-line entry point for ``rider-kick``.

Every sub-command maps onto one generator.  Global options (``--root``,
``--schema``, ``--engine``, ``--domain``, ``--force``, ``--quiet``) are
accepted after the sub-command name.  Generator errors are printed in red and
turn into exit status 1.
"""

from __future__ import annotations

import argparse
import sys
from collections import Counter
from pathlib import Path
from typing import Callable, Optional

from rider_kick import __version__
from rider_kick.config import Configuration, set_configuration
from rider_kick.errors import GeneratorError, SchemaFileNotFoundError
from rider_kick.generators import (
    BlankGenerator,
    CleanArchGenerator,
    FactoryGenerator,
    InitGenerator,
    ScaffoldGenerator,
    StructureGenerator,
    configure_engine,
)
from rider_kick.generators.base import BaseGenerator
from rider_kick.schema import SchemaRegistry, find_schema_file, load_schema
from rider_kick.utils import (
    parse_settings,
    print_error,
    print_header,
    print_success,
    print_summary_table,
    set_quiet,
)

EPILOG = (
    "Examples:\n"
    "  rider-kick init --engine Admin\n"
    "  rider-kick clean-arch --setup\n"
    "  rider-kick structure Models::User actor:owner resource_owner_id:account_id uploaders:avatar\n"
    "  rider-kick scaffold users scope:dashboard --inject-resource-owner\n"
    "  rider-kick factory Models::User scope:core --static\n"
    "  rider-kick blank actor:user action:export scope:report --use-case --repository\n"
)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--root",
        default=None,
        help="Rails application root (default: $RIDER_KICK_ROOT or the current directory)",
    )
    common.add_argument(
        "--schema",
        default=None,
        help="Column schema (db/schema.rb or a YAML schema); auto-detected under db/ if omitted",
    )
    common.add_argument("--engine", default=None, help="Mountable engine name (e.g. Core, Admin)")
    common.add_argument("--domain", default=None, help="Domain scope under app/domains (e.g. core/)")
    common.add_argument(
        "--force", action="store_true", help="Overwrite existing files whose content differs"
    )
    common.add_argument("--quiet", "-q", action="store_true", help="Suppress status output")

    parser = argparse.ArgumentParser(
        prog="rider-kick",
        description="RiderKick -- clean-architecture generators for Rails applications",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    subparsers.add_parser(
        "init", parents=[common], help="Write config/rider_kick.yml from the current settings"
    )

    clean_arch = subparsers.add_parser(
        "clean-arch", parents=[common], help="Set up the clean-architecture domain structure"
    )
    clean_arch.add_argument(
        "--setup", action="store_true", help="Create the domain structure (required)"
    )

    structure = subparsers.add_parser(
        "structure", parents=[common], help="Generate a structure YAML file for a model"
    )
    structure.add_argument("model", help="Model class name, e.g. Models::User")
    structure.add_argument(
        "settings",
        nargs="*",
        metavar="key:value",
        help="actor (required), resource_owner, resource_owner_id, uploaders, search_able",
    )

    scaffold = subparsers.add_parser(
        "scaffold", parents=[common], help="Generate use cases, repositories, builder and entity"
    )
    scaffold.add_argument("structure", help="Structure name, e.g. users for users_structure.yaml")
    scaffold.add_argument("settings", nargs="*", metavar="key:value", help="scope:<route scope>")
    scaffold.add_argument(
        "--inject-resource-owner",
        action="store_true",
        help="Add the resource owner rule to every contract that lacks it",
    )

    factory = subparsers.add_parser(
        "factory", parents=[common], help="Generate a FactoryBot factory for a model"
    )
    factory.add_argument("model", help="Model class name, e.g. Models::Article")
    factory.add_argument("settings", nargs="*", metavar="key:value", help="scope:<directory>")
    factory.add_argument(
        "--static", action="store_true", help="Use literal values instead of Faker calls"
    )

    blank = subparsers.add_parser(
        "blank", parents=[common], help="Generate empty domain class skeletons"
    )
    blank.add_argument("settings", nargs="*", metavar="key:value", help="actor, action, scope")
    blank.add_argument("--use-case", action="store_true", help="Generate a use case")
    blank.add_argument("--repository", action="store_true", help="Generate a repository")
    blank.add_argument("--builder", action="store_true", help="Generate a builder (and entity)")
    blank.add_argument("--entity", action="store_true", help="Generate an entity")

    return parser


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def build_configuration(args: argparse.Namespace) -> Configuration:
    """Configuration from file + environment, then ``--engine`` / ``--domain``."""
    overrides = {"root": Path(args.root)} if args.root else {}
    config = Configuration.from_env(**overrides)
    configure_engine(config, args.engine, args.domain)
    return set_configuration(config)


def load_registry(args: argparse.Namespace, config: Configuration) -> SchemaRegistry:
    if args.schema:
        schema_path = Path(args.schema)
        if not schema_path.is_absolute():
            schema_path = Path(config.root) / schema_path
        return load_schema(schema_path)
    found = find_schema_file(config.root)
    if found is None:
        raise SchemaFileNotFoundError(
            "Schema file not found. Pass --schema or add db/schema.rb",
            root=str(config.root),
        )
    return load_schema(found)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def run_init(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    generator = InitGenerator(config, force=args.force)
    generator.generate()
    return generator


def run_clean_arch(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    generator = CleanArchGenerator(config, force=args.force)
    generator.generate(setup=args.setup)
    return generator


def run_structure(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    generator = StructureGenerator(config, schema=load_registry(args, config), force=args.force)
    generator.generate(args.model, parse_settings(args.settings))
    return generator


def run_scaffold(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    settings = parse_settings(args.settings)
    generator = ScaffoldGenerator(
        config,
        schema=load_registry(args, config),
        force=args.force,
        inject_resource_owner=args.inject_resource_owner,
    )
    generator.generate(args.structure, route_scope=settings.get("scope", ""))
    return generator


def run_factory(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    settings = parse_settings(args.settings)
    generator = FactoryGenerator(
        config, schema=load_registry(args, config), force=args.force, static=args.static
    )
    generator.generate(args.model, scope=settings.get("scope", ""))
    return generator


def run_blank(args: argparse.Namespace, config: Configuration) -> BaseGenerator:
    generator = BlankGenerator(config, force=args.force)
    generator.generate(
        parse_settings(args.settings),
        use_case=args.use_case,
        repository=args.repository,
        builder=args.builder,
        entity=args.entity,
    )
    return generator


COMMANDS: dict[str, Callable[[argparse.Namespace, Configuration], BaseGenerator]] = {
    "init": run_init,
    "clean-arch": run_clean_arch,
    "structure": run_structure,
    "scaffold": run_scaffold,
    "factory": run_factory,
    "blank": run_blank,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``rider-kick`` and ``python -m rider_kick``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    set_quiet(args.quiet)

    try:
        config = build_configuration(args)
        print_header(f"rider-kick {args.command}")
        generator = COMMANDS[args.command](args, config)
    except GeneratorError as exc:
        set_quiet(False)
        print_error(f"Error: {exc}")
        sys.exit(1)

    counts = Counter(status for status, _ in generator.actions)
    summary = {status: str(count) for status, count in sorted(counts.items())}
    summary["engine"] = config.engine_name or "(main app)"
    summary["domains"] = config.domains_path
    print_summary_table(summary, title=f"rider-kick {args.command}")
    print_success("Done.")


if __name__ == "__main__":
    main()
