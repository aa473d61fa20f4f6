"""RiderKick generators -- one class per ``rider-kick`` sub-command.

Quick usage::

    from rider_kick.generators import ScaffoldGenerator
    from rider_kick.schema import load_schema

    generator = ScaffoldGenerator(schema=load_schema("db/schema.rb"))
    generator.generate("users")
"""

from rider_kick.generators.base import BaseGenerator, configure_engine
from rider_kick.generators.blank_gen import BlankGenerator
from rider_kick.generators.clean_arch_gen import CleanArchGenerator
from rider_kick.generators.factory_gen import FactoryGenerator
from rider_kick.generators.init_gen import InitGenerator
from rider_kick.generators.scaffold_gen import ScaffoldGenerator
from rider_kick.generators.structure_gen import StructureGenerator
from rider_kick.generators.templates import TemplateRenderer

__all__ = [
    "BaseGenerator",
    "BlankGenerator",
    "CleanArchGenerator",
    "FactoryGenerator",
    "InitGenerator",
    "ScaffoldGenerator",
    "StructureGenerator",
    "TemplateRenderer",
    "configure_engine",
]
