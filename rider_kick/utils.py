"""Shared utility functions for the RiderKick generators.

Provides Rich-based console reporting, YAML I/O, ``key:value`` argument
parsing and the file-writing primitive every generator goes through.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from rider_kick.errors import StructureFileNotFoundError, YamlFormatError

console = Console()

STATUS_STYLES: dict[str, str] = {
    "create": "bold green",
    "identical": "bold blue",
    "force": "bold yellow",
    "skip": "bold yellow",
    "conflict": "bold red",
    "insert": "bold green",
    "append": "bold green",
    "exist": "bold blue",
}


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def parse_settings(tokens: list[str]) -> dict[str, str]:
    """Parse ``key:value`` command-line tokens into a dict.

    Keys and values are whitespace-trimmed; a token without ``:`` maps to an
    empty string.  Later tokens win.

    Examples::

        parse_settings(["actor:owner", "uploaders:avatar,images"])
        -> {"actor": "owner", "uploaders": "avatar,images"}
    """
    settings: dict[str, str] = {}
    for token in tokens:
        key, _, value = token.partition(":")
        key = key.strip()
        if key:
            settings[key] = value.strip()
    return settings


def split_list(value: str | None) -> list[str]:
    """Split a comma-separated setting, dropping blanks: ``"a, b,"`` -> ``["a", "b"]``."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def sanitize_name(name: str) -> str:
    """Convert an arbitrary name to a safe snake_case identifier.

    Examples::

        sanitize_name("Sales Report") -> "sales_report"
        sanitize_name("  2FA (TOTP)  ") -> "2fa_totp"
    """
    result = re.sub(r"[^a-zA-Z0-9_]", "_", name.strip().lower())
    result = re.sub(r"_+", "_", result)
    return result.strip("_")


# ---------------------------------------------------------------------------
# YAML I/O
# ---------------------------------------------------------------------------


def load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML file whose top level is a mapping.

    Raises:
        StructureFileNotFoundError: If the file does not exist.
        YamlFormatError: If the file is not valid YAML or not a mapping.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise StructureFileNotFoundError("File not found", path=str(file_path))
    raw = file_path.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise YamlFormatError(f"Invalid YAML format: {exc}", path=str(file_path)) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise YamlFormatError("YAML root must be a mapping", path=str(file_path))
    return data


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def write_file(path: Path, content: str, *, force: bool = False) -> str:
    """Write *content* to *path* the way Rails generators do.

    Returns the status that was reported:

    * ``create`` -- the file did not exist.
    * ``identical`` -- the file already holds exactly *content*; untouched.
    * ``force`` -- different content was overwritten because *force* is set.
    * ``skip`` -- different content exists and *force* is not set; untouched.
    """
    if path.exists():
        current = path.read_text(encoding="utf-8")
        if current == content:
            return "identical"
        if not force:
            return "skip"
        status = "force"
    else:
        status = "create"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return status


def relative_to(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def set_quiet(quiet: bool) -> None:
    console.quiet = quiet


def print_header(title: str) -> None:
    """Print a ruled section header."""
    console.print()
    console.print(Rule(f"[bold bright_cyan]{title}[/bold bright_cyan]", style="bright_cyan"))


def print_status(status: str, path: str) -> None:
    """Print a right-aligned Rails-style status line (``      create  app/...``)."""
    style = STATUS_STYLES.get(status, "bold")
    console.print(f"[{style}]{status:>12}[/{style}]  {path}", highlight=False)


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="bold")
    table.add_column("Value")
    for key, value in data.items():
        table.add_row(key, str(value))
    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
