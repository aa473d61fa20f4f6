"""Structure files: the per-resource YAML consumed by the scaffold generator."""

from rider_kick.structure.loader import load_structure, structure_file_name
from rider_kick.structure.models import (
    ACTIONS,
    ActionDomain,
    StructureSpec,
    UploaderDefinition,
    UploaderType,
)

__all__ = [
    "ACTIONS",
    "ActionDomain",
    "StructureSpec",
    "UploaderDefinition",
    "UploaderType",
    "load_structure",
    "structure_file_name",
]
