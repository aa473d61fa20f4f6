"""RiderKick configuration.

A single :class:`Configuration` instance describes the Rails application being
generated into: where its root is, whether generation targets a mountable
engine, which domain scope the clean-architecture code lives under, and the
column-type lookup tables used to build contracts and entities.  It is a
Pydantic v2 model so invalid values are rejected at assignment time.

The process-wide instance is reached through :func:`get_configuration`; tests
call :func:`reset_configuration` between runs.
"""

from __future__ import annotations

import os
import posixpath
import re
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from rider_kick.contracts import DEFAULT_ENTITY_TYPE_MAPPING, DEFAULT_TYPE_MAPPING
from rider_kick.errors import ConfigurationError, YamlFormatError
from rider_kick.inflector import camelize, underscore

DEFAULT_CONFIG_FILE = Path("config") / "rider_kick.yml"

_ENGINE_NAME_PATTERNS = (
    re.compile(r"^[A-Z][a-zA-Z0-9]*$"),
    re.compile(r"^[a-z][a-z0-9_]*$"),
)
_DOMAIN_SCOPE_PATTERN = re.compile(r"^[a-zA-Z0-9/_-]+$")
_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_GEMSPEC_NAME = re.compile(r"""\.name\s*=\s*["']([^"']+)["']""")
_APPLICATION_MODULE = re.compile(r"^module\s+(\w+)", re.MULTILINE)


# ---------------------------------------------------------------------------
# Engine detection
# ---------------------------------------------------------------------------


def detect_engine_name(root: str | Path) -> Optional[str]:
    """Guess the mountable engine name of the application at *root*.

    * Exactly one ``lib/<name>/engine.rb`` -> ``camelize(name)``.
    * Several engines -> the last dash-separated part of the gemspec
      ``name`` (``"acme-core"`` -> ``Core``) when that engine exists.
    * Otherwise ``None``.
    """
    root_path = Path(root)
    engine_files = sorted((root_path / "lib").glob("*/engine.rb"))
    engine_dirs = [path.parent.name for path in engine_files]
    if len(engine_dirs) == 1:
        return camelize(engine_dirs[0])
    if len(engine_dirs) > 1:
        for gemspec in sorted(root_path.glob("*.gemspec")):
            match = _GEMSPEC_NAME.search(gemspec.read_text(encoding="utf-8"))
            if not match:
                continue
            candidate = match.group(1).split("-")[-1]
            if candidate in engine_dirs:
                return camelize(candidate)
    return None


# ---------------------------------------------------------------------------
# Configuration model
# ---------------------------------------------------------------------------


class Configuration(BaseModel):
    """Settings shared by every generator during one run."""

    model_config = ConfigDict(validate_assignment=True)

    root: Path = Field(default_factory=Path.cwd, description="Rails application root")
    engine_name: Optional[str] = Field(
        default=None, description="Mountable engine the code is generated into"
    )
    domain_scope: str = Field(
        default="core/", description="Sub-directory of app/domains holding the domain code"
    )
    template_path: Optional[str] = Field(
        default=None, description="Directory searched for templates before the bundled ones"
    )
    models_path_override: Optional[str] = Field(default=None)
    type_mapping: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_TYPE_MAPPING))
    entity_type_mapping: dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_ENTITY_TYPE_MAPPING)
    )
    faker_mapping: dict[str, str] = Field(
        default_factory=dict, description="Column type -> Faker expression overrides"
    )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @field_validator("engine_name", mode="before")
    @classmethod
    def check_engine_name(cls, value: Any) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        name = str(value).strip()
        if not any(pattern.match(name) for pattern in _ENGINE_NAME_PATTERNS):
            raise ConfigurationError(
                "Invalid engine name. Use CamelCase (MyEngine) or snake_case (my_engine)",
                engine_name=name,
            )
        return name

    @field_validator("domain_scope", mode="before")
    @classmethod
    def check_domain_scope(cls, value: Any) -> str:
        scope = "" if value is None else str(value).strip()
        if scope and not _DOMAIN_SCOPE_PATTERN.match(scope):
            raise ConfigurationError(
                "Invalid domain scope. Only letters, digits, '/', '_' and '-' are allowed",
                domain_scope=scope,
            )
        return scope

    @field_validator("template_path", "models_path_override", mode="before")
    @classmethod
    def check_path(cls, value: Any) -> Optional[str]:
        if value is None or not str(value).strip():
            return None
        path = str(value).strip()
        if _INVALID_PATH_CHARS.search(path):
            raise ConfigurationError("Path contains invalid characters", path=path)
        return path

    # ------------------------------------------------------------------
    # Derived paths (relative to ``root``, POSIX separators)
    # ------------------------------------------------------------------

    @property
    def engine_dir(self) -> Optional[str]:
        """Underscored engine name used in directory segments."""
        return underscore(self.engine_name) if self.engine_name else None

    def engine_path(self, path: str) -> str:
        """Prefix *path* with ``engines/<engine>`` when generating into an engine."""
        if self.engine_dir:
            return posixpath.join("engines", self.engine_dir, path)
        return path

    @property
    def domains_path(self) -> str:
        """``app/domains/<scope>`` or ``engines/<engine>/app/domains/<scope>``."""
        return posixpath.join(self.engine_path("app/domains"), self.domain_scope)

    @property
    def entities_path(self) -> str:
        return posixpath.join(self.domains_path, "entities")

    @property
    def models_path(self) -> str:
        """Directory holding the ``Models::*`` ActiveRecord classes."""
        if self.models_path_override:
            return self.models_path_override
        if self.engine_dir:
            return posixpath.join("engines", self.engine_dir, "app/models", self.engine_dir, "models")
        return "app/models/models"

    @property
    def structures_path(self) -> str:
        return self.engine_path("db/structures")

    @property
    def factories_path(self) -> str:
        return self.engine_path("spec/factories")

    @property
    def spec_root(self) -> str:
        return self.engine_path("spec")

    def resolve(self, relative: str) -> Path:
        """Absolute location of a root-relative path."""
        return Path(self.root) / relative

    @property
    def domain_class_name(self) -> str:
        """Ruby namespace of the domain code, e.g. ``Core`` or ``Admin::Core``."""
        parts = [camelize(part) for part in self.domain_scope.strip("/").split("/") if part]
        if parts:
            return "::".join(parts)
        if self.engine_name:
            return camelize(self.engine_name)
        return self.application_name

    @property
    def application_name(self) -> str:
        """Module name from ``config/application.rb``, else the camelized root folder."""
        application_rb = self.resolve("config/application.rb")
        if application_rb.is_file():
            match = _APPLICATION_MODULE.search(application_rb.read_text(encoding="utf-8"))
            if match:
                return match.group(1)
        return camelize(underscore(Path(self.root).resolve().name))

    # ------------------------------------------------------------------
    # Type mapping registration
    # ------------------------------------------------------------------

    def register_type_mapping(self, db_type: str, validation_type: str) -> None:
        """Map a column type to a dry-validation type (``:string``, ``Types::File``...)."""
        self.type_mapping = {**self.type_mapping, str(db_type): validation_type}

    def register_entity_type_mapping(self, db_type: str, entity_type: str) -> None:
        """Map a column type to a dry-types entity type (``Types::Strict::String``...)."""
        self.entity_type_mapping = {**self.entity_type_mapping, str(db_type): entity_type}

    def register_faker_expression(self, db_type: str, expression: str) -> None:
        self.faker_mapping = {**self.faker_mapping, str(db_type): expression}

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def as_yaml_dict(self) -> dict[str, Any]:
        """Settings worth persisting; mappings are written only when customised."""
        data: dict[str, Any] = {
            "engine_name": self.engine_name,
            "domain_scope": self.domain_scope,
            "template_path": self.template_path,
        }
        if self.models_path_override:
            data["models_path"] = self.models_path_override
        custom_types = {
            k: v for k, v in self.type_mapping.items() if DEFAULT_TYPE_MAPPING.get(k) != v
        }
        custom_entities = {
            k: v
            for k, v in self.entity_type_mapping.items()
            if DEFAULT_ENTITY_TYPE_MAPPING.get(k) != v
        }
        if custom_types:
            data["type_mapping"] = custom_types
        if custom_entities:
            data["entity_type_mapping"] = custom_entities
        if self.faker_mapping:
            data["faker_mapping"] = dict(self.faker_mapping)
        return data

    def save(self, path: Path | None = None) -> Path:
        """Persist the configuration as YAML.

        Args:
            path: Destination file. Defaults to ``<root>/config/rider_kick.yml``.

        Returns:
            The path written.
        """
        target = Path(path) if path else Path(self.root) / DEFAULT_CONFIG_FILE
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(
            yaml.safe_dump(self.as_yaml_dict(), sort_keys=False, default_flow_style=False),
            encoding="utf-8",
        )
        return target

    @classmethod
    def load(cls, path: Path, **overrides: Any) -> "Configuration":
        """Load a configuration file written by :meth:`save`.

        Custom ``type_mapping`` / ``entity_type_mapping`` entries are merged on
        top of the defaults.

        Raises:
            YamlFormatError: If the file is not a YAML mapping.
        """
        raw = Path(path).read_text(encoding="utf-8")
        try:
            data = yaml.safe_load(raw) or {}
        except yaml.YAMLError as exc:
            raise YamlFormatError("Invalid configuration file", path=str(path)) from exc
        if not isinstance(data, dict):
            raise YamlFormatError("Configuration file must contain a mapping", path=str(path))

        kwargs: dict[str, Any] = {
            "engine_name": data.get("engine_name"),
            "domain_scope": data.get("domain_scope", "core/"),
            "template_path": data.get("template_path"),
            "models_path_override": data.get("models_path"),
            "type_mapping": {**DEFAULT_TYPE_MAPPING, **(data.get("type_mapping") or {})},
            "entity_type_mapping": {
                **DEFAULT_ENTITY_TYPE_MAPPING,
                **(data.get("entity_type_mapping") or {}),
            },
            "faker_mapping": dict(data.get("faker_mapping") or {}),
        }
        kwargs.update(overrides)
        return cls(**kwargs)

    @classmethod
    def from_env(cls, **overrides: Any) -> "Configuration":
        """Build a ``Configuration`` from environment variables.

        Recognised variables (all optional):
            RIDER_KICK_ROOT, RIDER_KICK_ENGINE, RIDER_KICK_DOMAIN_SCOPE,
            RIDER_KICK_TEMPLATE_PATH.

        When ``<root>/config/rider_kick.yml`` exists it is loaded first and the
        environment wins over it; explicit *overrides* win over both.
        """
        root = Path(overrides.pop("root", None) or os.environ.get("RIDER_KICK_ROOT") or Path.cwd())
        env_kwargs: dict[str, Any] = {}
        if os.environ.get("RIDER_KICK_ENGINE"):
            env_kwargs["engine_name"] = os.environ["RIDER_KICK_ENGINE"]
        if "RIDER_KICK_DOMAIN_SCOPE" in os.environ:
            env_kwargs["domain_scope"] = os.environ["RIDER_KICK_DOMAIN_SCOPE"]
        if os.environ.get("RIDER_KICK_TEMPLATE_PATH"):
            env_kwargs["template_path"] = os.environ["RIDER_KICK_TEMPLATE_PATH"]
        env_kwargs.update(overrides)

        config_file = root / DEFAULT_CONFIG_FILE
        if config_file.is_file():
            return cls.load(config_file, root=root, **env_kwargs)
        if "engine_name" not in env_kwargs:
            env_kwargs["engine_name"] = detect_engine_name(root)
        return cls(root=root, **env_kwargs)


# ---------------------------------------------------------------------------
# Process-wide instance
# ---------------------------------------------------------------------------

_configuration: Optional[Configuration] = None


def get_configuration() -> Configuration:
    """Return the active configuration, creating a default one on first use."""
    global _configuration
    if _configuration is None:
        _configuration = Configuration()
    return _configuration


def configure(**changes: Any) -> Configuration:
    """Apply *changes* to the active configuration (validated on assignment)."""
    config = get_configuration()
    for key, value in changes.items():
        setattr(config, key, value)
    return config


def set_configuration(config: Configuration) -> Configuration:
    global _configuration
    _configuration = config
    return config


def reset_configuration() -> None:
    """Forget the active configuration; the next access builds a fresh default."""
    global _configuration
    _configuration = None
