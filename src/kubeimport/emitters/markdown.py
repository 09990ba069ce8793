"""Markdown emitter: a human-readable reference page per module.

Rendered with Jinja2 from the package templates.
"""

import logging
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from kubeimport.emitters.base import Emitter
from kubeimport.models.canonical import DefinitionSet, ModuleDefinitions

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "module.md.j2"


def schema_type(schema: dict[str, Any] | None) -> str:
    """Short type label for a schema (``object``, ``string``, ``any``...)."""
    if not schema:
        return "any"
    value = schema.get("type")
    if isinstance(value, list):
        return " | ".join(str(v) for v in value)
    if value:
        return str(value)
    if "$ref" in schema:
        return "ref"
    return "any"


class MarkdownEmitter(Emitter):
    """Writes a Markdown reference page for each module.

    Args:
        template_name: Template to render (from ``kubeimport/templates``)
    """

    name = "markdown"
    extension = "md"

    def __init__(self, template_name: str = DEFAULT_TEMPLATE) -> None:
        self.template_name = template_name
        self._env = Environment(
            loader=PackageLoader("kubeimport", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["schema_type"] = schema_type

    def render_module(self, definitions: DefinitionSet, module: ModuleDefinitions) -> str:
        try:
            template = self._env.get_template(self.template_name)
        except Exception as e:
            logger.error("Failed to load template %s: %s", self.template_name, e)
            raise ValueError(f"Template not found: {self.template_name}") from e

        return template.render(
            source=definitions.source,
            module_name=definitions.qualified_module_name(module.name),
            constructs=module.constructs,
            data_types=module.data_types,
            charts=module.charts,
            aliases=sorted(module.aliases.items()),
        )
