"""Default emitter: one canonical JSON document per module."""

import json

from kubeimport.emitters.base import Emitter
from kubeimport.models.canonical import DefinitionSet, ModuleDefinitions


class SchemaJsonEmitter(Emitter):
    """Writes each module as sorted, indented JSON (byte-stable across runs)."""

    name = "json"
    extension = "json"

    def render_module(self, definitions: DefinitionSet, module: ModuleDefinitions) -> str:
        document = {
            "source": definitions.source,
            "qualifiedName": definitions.qualified_module_name(module.name),
            "exports": [
                definitions.qualified_identifier(module.name, identifier)
                for identifier in module.identifiers
            ],
            **module.to_dict(),
        }
        return json.dumps(document, indent=2, sort_keys=True, ensure_ascii=False) + "\n"
