"""Emitters: write a DefinitionSet to disk."""

from kubeimport.emitters.base import Emitter
from kubeimport.emitters.markdown import MarkdownEmitter
from kubeimport.emitters.schema_json import SchemaJsonEmitter

EMITTERS: dict[str, type[Emitter]] = {
    SchemaJsonEmitter.name: SchemaJsonEmitter,
    MarkdownEmitter.name: MarkdownEmitter,
}


def get_emitter(name: str = SchemaJsonEmitter.name) -> Emitter:
    """Get an emitter instance by name.

    Raises:
        ValueError: If no emitter is registered under ``name``
    """
    if name not in EMITTERS:
        raise ValueError(f"Unknown output format '{name}'. Available: {sorted(EMITTERS)}")
    return EMITTERS[name]()


__all__ = ["EMITTERS", "Emitter", "MarkdownEmitter", "SchemaJsonEmitter", "get_emitter"]
