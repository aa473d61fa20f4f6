"""Jinja2 template rendering for the generators.

Provides the TemplateRenderer class which loads Jinja2 templates from the
bundled ``rider_kick/templates/`` directory and renders them with the context
built by each generator.  A custom template directory, when configured, is
searched first, so an application can override any single template by
placing a file with the same relative path there.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, select_autoescape

from rider_kick.inflector import camelize, humanize, pluralize, singularize, underscore


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates into Ruby and YAML source text.

    Templates are ``.j2`` files addressed by their path relative to the
    template root (e.g. ``"scaffold/use_cases/create.rb.j2"``).
    """

    def __init__(
        self,
        template_dir: str | Path | None = None,
        custom_template_dir: str | Path | None = None,
    ) -> None:
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self.custom_template_dir: Optional[Path] = (
            Path(custom_template_dir) if custom_template_dir else None
        )

        search_path = [FileSystemLoader(str(self.template_dir))]
        if self.custom_template_dir is not None:
            search_path.insert(0, FileSystemLoader(str(self.custom_template_dir)))

        self.env = Environment(
            loader=ChoiceLoader(search_path),
            autoescape=select_autoescape([], default_for_string=False),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        # Register custom filters
        self.env.filters["camelize"] = camelize
        self.env.filters["underscore"] = underscore
        self.env.filters["pluralize"] = pluralize
        self.env.filters["singularize"] = singularize
        self.env.filters["humanize"] = humanize
        self.env.filters["yaml_quote"] = _yaml_quote_filter
        self.env.filters["yaml_scalar"] = _yaml_scalar_filter
        self.env.filters["yaml_list"] = _yaml_list_filter
        self.env.filters["ruby_string"] = _ruby_string_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"structure/structure.yaml.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _yaml_quote_filter(value: Any) -> str:
    """Render *value* as a double-quoted YAML string."""
    text = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


def _yaml_scalar_filter(value: Any) -> str:
    """Render a plain Python scalar as YAML (``null``, ``true``, ``42``, ``"text"``)."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return _yaml_quote_filter(value)


def _yaml_list_filter(items: Any, indent: int = 2, quote: bool = False) -> str:
    """Render a block sequence continuing a ``key:`` line, or `` []`` when empty.

    The result carries no trailing newline so it can close the key's line.
    """
    values = list(items or [])
    if not values:
        return " []"
    pad = " " * indent
    render = _yaml_quote_filter if quote else str
    return "".join(f"\n{pad}- {render(value)}" for value in values)


def _ruby_string_filter(value: Any) -> str:
    """Render *value* as a single-quoted Ruby string literal."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"
