"""Abstract base class for importers.

Every importer turns one import source into a DefinitionSet. An importer:
1. Fetches its source document(s) (in ``from_spec`` or on first build)
2. Sanitizes and validates them
3. Resolves identifiers through the TypeNameResolver
4. Returns a DefinitionSet, or raises without partial output
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from kubeimport.importers.naming import TypeNameResolver
from kubeimport.models.canonical import DefinitionSet


@dataclass
class ImportOptions:
    """Per-run options passed to ``Importer.build``.

    Attributes:
        module_name_prefix: Prefix for emitted module names (from ``NAME:=``)
        class_name_prefix: Overrides the importer's default construct prefix
        exclude: Fully qualified definition names to skip (core API only)
    """

    module_name_prefix: str | None = None
    class_name_prefix: str | None = None
    exclude: list[str] = field(default_factory=list)


class Importer(ABC):
    """Abstract interface for schema importers.

    Attributes:
        source: The (possibly rewritten) source this importer reads from
    """

    def __init__(self, source: str) -> None:
        self.source = source

    @property
    @abstractmethod
    def module_names(self) -> list[str]:
        """Names of the modules this importer emits."""

    @abstractmethod
    def build(self, resolver: TypeNameResolver, options: ImportOptions) -> DefinitionSet:
        """Build the definition set for this import.

        Args:
            resolver: Type-name resolver carrying the naming defaults
            options: Per-run options

        Returns:
            DefinitionSet with one entry per module

        Raises:
            KubeImportError: On any fatal condition
        """

    def get_metadata(self) -> dict[str, Any]:
        """Get importer metadata for logging and debugging."""
        return {
            "importer": type(self).__name__,
            "source": self.source,
            "modules": self.module_names,
        }
