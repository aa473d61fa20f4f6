"""Read structure YAML files into :class:`StructureSpec` objects."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from rider_kick.errors import MissingRequiredSettingError, YamlFormatError
from rider_kick.structure.models import StructureSpec
from rider_kick.utils import load_yaml

REQUIRED_KEYS = ("model", "resource_name", "actor")


def structure_file_name(name: str) -> str:
    """``users`` -> ``users_structure.yaml``."""
    return f"{name}_structure.yaml"


def load_structure(path: str | Path) -> StructureSpec:
    """Load and validate one structure file.

    Raises:
        StructureFileNotFoundError: If *path* does not exist.
        YamlFormatError: If the file is not a YAML mapping or a section has the
            wrong shape.
        MissingRequiredSettingError: If ``model``, ``resource_name`` or ``actor``
            is absent or blank.
    """
    data = load_yaml(path)
    for key in REQUIRED_KEYS:
        value = data.get(key)
        if value is None or not str(value).strip():
            raise MissingRequiredSettingError(key, path=str(path))
    try:
        return StructureSpec.model_validate(data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise YamlFormatError(
            f"Invalid structure file: {location}: {first['msg']}", path=str(path)
        ) from exc
