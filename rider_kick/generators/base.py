"""Common plumbing shared by every generator.

:class:`BaseGenerator` owns the configuration, the template renderer and the
Rails-style file actions (``create``, ``identical``, ``skip``, ``force``,
``insert``, ``append``), and records every action so the CLI can print a
summary at the end of a run.
"""

from __future__ import annotations

import posixpath
import re
from pathlib import Path
from typing import Any, Optional

from rider_kick.config import Configuration, get_configuration
from rider_kick.errors import MissingPrerequisiteStructureError, StructureFileNotFoundError
from rider_kick.generators.templates import TemplateRenderer
from rider_kick.inflector import underscore
from rider_kick.utils import ensure_dir, print_status, relative_to, write_file


def configure_engine(
    config: Configuration,
    engine: Optional[str] = None,
    domain: Optional[str] = None,
) -> Configuration:
    """Apply ``--engine`` / ``--domain`` options to *config*.

    With an engine the domain scope is always nested under the engine
    (``Admin`` + ``core/`` -> ``admin/core/``); a domain alone replaces the
    scope; neither leaves the configuration untouched.
    """
    if engine:
        config.engine_name = engine
        prefix = underscore(engine)
        config.domain_scope = f"{prefix}/{domain}" if domain else f"{prefix}/"
    elif domain:
        config.domain_scope = domain
    return config


class BaseGenerator:
    """Base class for the RiderKick generators.

    Args:
        config: Active configuration; defaults to the process-wide instance.
        renderer: Template renderer; defaults to one honouring
            ``config.template_path``.
        force: Overwrite existing files whose content differs.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        renderer: TemplateRenderer | None = None,
        force: bool = False,
    ) -> None:
        self.config = config or get_configuration()
        self.renderer = renderer or TemplateRenderer(custom_template_dir=self._custom_template_dir())
        self.force = force
        self.actions: list[tuple[str, str]] = []

    def _custom_template_dir(self) -> Optional[Path]:
        if not self.config.template_path:
            return None
        path = Path(self.config.template_path)
        return path if path.is_absolute() else self.root / path

    @property
    def root(self) -> Path:
        return Path(self.config.root)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def path(self, *parts: str) -> Path:
        """Absolute path of a root-relative location."""
        return self.root / posixpath.join(*parts)

    def _record(self, status: str, path: Path) -> str:
        rel = relative_to(path, self.root)
        self.actions.append((status, rel))
        print_status(status, rel)
        return status

    # ------------------------------------------------------------------
    # File actions
    # ------------------------------------------------------------------

    def create_file(self, destination: str, content: str) -> str:
        """Write *content* to the root-relative *destination*; return the status."""
        target = self.path(destination)
        return self._record(write_file(target, content, force=self.force), target)

    def template(self, template_path: str, destination: str, context: dict[str, Any]) -> str:
        """Render *template_path* and write it to *destination*."""
        return self.create_file(destination, self.renderer.render(template_path, context))

    def empty_directory(self, destination: str) -> str:
        target = self.path(destination)
        status = "exist" if target.is_dir() else "create"
        ensure_dir(target)
        return self._record(status, target)

    def inject_into_file(self, destination: str, text: str, *, after: str) -> bool:
        """Insert *text* after the first match of the regex *after*.

        Returns ``False`` (and writes nothing) when the anchor is missing.
        """
        target = self.path(destination)
        content = target.read_text(encoding="utf-8")
        match = re.search(after, content)
        if not match:
            return False
        updated = content[: match.end()] + text + content[match.end():]
        target.write_text(updated, encoding="utf-8")
        self._record("insert", target)
        return True

    def append_to_file(self, destination: str, text: str) -> str:
        target = self.path(destination)
        current = target.read_text(encoding="utf-8") if target.exists() else ""
        if current and not current.endswith("\n"):
            text = "\n" + text
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(current + text, encoding="utf-8")
        return self._record("append", target)

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def validate_domains_path(self) -> None:
        """Raise unless the clean-architecture domains directory exists."""
        domains_path = self.config.domains_path
        if not self.path(domains_path).is_dir():
            raise MissingPrerequisiteStructureError(domains_path)

    def validate_file_exists(self, destination: str, context: str = "") -> Path:
        target = self.path(destination)
        if not target.is_file():
            message = f"File not found: {destination}"
            if context:
                message = f"{message} ({context})"
            raise StructureFileNotFoundError(message, path=destination)
        return target
