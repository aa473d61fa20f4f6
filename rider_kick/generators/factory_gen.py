"""Factory generator -- writes a FactoryBot factory for one model.

Each column except the primary key, timestamps, the STI ``type`` column and
foreign keys (``*_id``) becomes a factory attribute.  Values are Faker
expressions picked from the column type and name, or deterministic literals
with ``static=True``.  Time columns always use ``Time.zone.now``.
"""

from __future__ import annotations

import posixpath
from typing import Any, NamedTuple, Optional

from rider_kick.config import Configuration
from rider_kick.generators.base import BaseGenerator
from rider_kick.generators.templates import TemplateRenderer
from rider_kick.inflector import demodulize, underscore
from rider_kick.schema.models import ColumnDescriptor, SchemaRegistry

SKIPPED_COLUMNS = ("id", "created_at", "updated_at", "type")
TIME_TYPES = ("datetime", "timestamp", "time")
TIME_EXPRESSION = "Time.zone.now"


class FakerRule(NamedTuple):
    """Faker expression and its static counterpart for columns matching *keywords*."""

    keywords: tuple[str, ...]
    expression: str
    literal: str


# Checked in order; a rule with no keywords matches every column of the type.
FAKER_RULES: dict[str, list[FakerRule]] = {
    "string": [
        FakerRule(("email",), "Faker::Internet.email", "'user@example.com'"),
        FakerRule(("name",), "Faker::Name.name", "'John Doe'"),
        FakerRule(("phone",), "Faker::PhoneNumber.phone_number", "'+1-555-0100'"),
        FakerRule(("address",), "Faker::Address.full_address", "'123 Main Street, Springfield'"),
        FakerRule(("city",), "Faker::Address.city", "'Springfield'"),
        FakerRule(("country",), "Faker::Address.country", "'Indonesia'"),
        FakerRule(("url", "website"), "Faker::Internet.url", "'https://example.com'"),
        FakerRule(("title",), "Faker::Lorem.sentence(word_count: 3)", "'Sample title text'"),
        FakerRule(("code",), "Faker::Alphanumeric.alphanumeric(number: 10)", "'ABC1234567'"),
        FakerRule((), "Faker::Lorem.word", "'lorem'"),
    ],
    "text": [
        FakerRule(
            ("description", "content", "body"),
            "Faker::Lorem.paragraph(sentence_count: 3)",
            "'Lorem ipsum dolor sit amet. Consectetur adipiscing elit. Sed do eiusmod tempor.'",
        ),
        FakerRule((), "Faker::Lorem.sentence", "'Lorem ipsum dolor sit amet.'"),
    ],
    "integer": [
        FakerRule(("count", "quantity"), "Faker::Number.between(from: 1, to: 100)", "10"),
        FakerRule(("age",), "Faker::Number.between(from: 18, to: 80)", "30"),
        FakerRule(("price", "amount"), "Faker::Number.between(from: 1000, to: 1000000)", "50000"),
        FakerRule((), "Faker::Number.number(digits: 5)", "12345"),
    ],
    "bigint": [FakerRule((), "Faker::Number.number(digits: 10)", "1234567890")],
    "float": [FakerRule((), "Faker::Number.decimal(l_digits: 2, r_digits: 2)", "12.34")],
    "decimal": [
        FakerRule(("price", "amount"), "Faker::Commerce.price", "19.99"),
        FakerRule((), "Faker::Number.decimal(l_digits: 4, r_digits: 2)", "1234.56"),
    ],
    "boolean": [FakerRule((), "[true, false].sample", "true")],
    "date": [FakerRule((), "Faker::Date.between(from: 1.year.ago, to: Date.today)", "'2024-01-01'")],
    "uuid": [FakerRule((), "SecureRandom.uuid", "'00000000-0000-4000-8000-000000000001'")],
    "json": [FakerRule((), "{ key: Faker::Lorem.word, value: Faker::Lorem.sentence }", "{ key: 'key', value: 'value' }")],
    "jsonb": [FakerRule((), "{ key: Faker::Lorem.word, value: Faker::Lorem.sentence }", "{ key: 'key', value: 'value' }")],
    "inet": [FakerRule((), "Faker::Internet.ip_v4_address", "'192.168.1.10'")],
    "cidr": [FakerRule((), "Faker::Internet.ip_v4_cidr", "'192.168.1.0/24'")],
    "macaddr": [FakerRule((), "Faker::Internet.mac_address", "'00:1a:2b:3c:4d:5e'")],
}

FALLBACK_RULE = FakerRule((), "Faker::Lorem.word", "'lorem'")


def skip_column(name: str) -> bool:
    """Primary key, timestamps, STI ``type`` and foreign keys get no attribute."""
    return name in SKIPPED_COLUMNS or name.endswith("_id")


def faker_rule_for(column: ColumnDescriptor) -> FakerRule:
    for rule in FAKER_RULES.get(column.type, []):
        if not rule.keywords or any(keyword in column.name for keyword in rule.keywords):
            return rule
    return FALLBACK_RULE


def attribute_value(
    column: ColumnDescriptor,
    *,
    static: bool = False,
    overrides: Optional[dict[str, str]] = None,
) -> str:
    """Ruby expression assigned to *column* in the factory block.

    A ``faker_mapping`` override for the column type is used verbatim in both
    modes.
    """
    if column.type in TIME_TYPES:
        return TIME_EXPRESSION
    if overrides and column.type in overrides:
        return overrides[column.type]
    rule = faker_rule_for(column)
    return rule.literal if static else rule.expression


class FactoryGenerator(BaseGenerator):
    """Generates ``<factories_path>/[scope/]<subject>.rb``.

    Args:
        config: Active configuration.
        schema: Registry providing the model's columns.
        renderer: Optional template renderer override.
        force: Overwrite an existing factory with different content.
        static: Emit literals instead of Faker calls.
    """

    def __init__(
        self,
        config: Configuration | None = None,
        *,
        schema: SchemaRegistry,
        renderer: TemplateRenderer | None = None,
        force: bool = False,
        static: bool = False,
    ) -> None:
        super().__init__(config, renderer=renderer, force=force)
        self.schema = schema
        self.static = static

    def generate(self, model_name: str, scope: str = "") -> str:
        """Write the factory for *model_name* and return its root-relative path.

        Raises:
            ModelNotFoundError: If the schema has no such model.
        """
        model_schema = self.schema.model(model_name)
        context = self.build_context(model_name, model_schema.columns)

        directory = self.config.factories_path
        scope_path = (scope or "").strip().lower()
        if scope_path:
            directory = posixpath.join(directory, scope_path)
        destination = posixpath.join(directory, f"{context['factory_name']}.rb")
        self.template("factory/factory.rb.j2", destination, context)
        return destination

    def build_context(self, model_name: str, columns: list[ColumnDescriptor]) -> dict[str, Any]:
        factory_name = underscore(demodulize(model_name)).lower()
        attributes = [
            {
                "name": column.name,
                "value": attribute_value(
                    column, static=self.static, overrides=self.config.faker_mapping
                ),
            }
            for column in columns
            if not skip_column(column.name)
        ]
        return {
            "model_class": model_name,
            "factory_name": factory_name,
            "attributes": attributes,
        }
