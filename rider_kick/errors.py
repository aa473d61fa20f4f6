"""Error taxonomy for the RiderKick generators.

Every failure a generator can hit is raised as a :class:`GeneratorError`
subclass.  Errors are fail-fast: the CLI prints the message and exits with a
non-zero status, nothing is retried.
"""

from __future__ import annotations

from typing import Any


class GeneratorError(Exception):
    """Base class for every generator failure.

    Extra keyword arguments are kept as ``context`` and appended to the string
    form, e.g. ``Model not found (model: Models::User)``.
    """

    def __init__(self, message: str, **context: Any) -> None:
        self.message = message
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}: {value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class ValidationError(GeneratorError):
    """Input (arguments, YAML content, model columns) failed validation."""


class MissingPrerequisiteStructureError(ValidationError):
    """The clean-architecture directories have not been generated yet."""

    def __init__(self, path: str, **context: Any) -> None:
        super().__init__(
            "Clean architecture structure not found. "
            "Run: rider-kick clean-arch --setup",
            path=path,
            **context,
        )


class MissingRequiredSettingError(ValidationError):
    """A required ``key:value`` setting or YAML key is absent or blank."""

    def __init__(self, setting: str, **context: Any) -> None:
        self.setting = setting
        super().__init__(f"Missing required setting: {setting}", **context)


class ConfigurationError(GeneratorError):
    """Invalid engine name, domain scope or path in the configuration."""


class ModelNotFoundError(GeneratorError):
    """The schema has no table for the requested model."""


class StructureFileNotFoundError(GeneratorError):
    """A structure YAML file does not exist."""


class SchemaFileNotFoundError(GeneratorError):
    """No column schema file was given or found."""


class YamlFormatError(GeneratorError):
    """A YAML file could not be parsed or has the wrong shape."""
