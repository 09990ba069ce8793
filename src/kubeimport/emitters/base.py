"""Emitter interface: the boundary between the import engine and code output.

An emitter renders one file per module of a DefinitionSet. Modules are
written in lexicographic order and files are named ``<prefix>-<module>``
when the import carries a module-name prefix.

Module names come from document content (a CRD's ``spec.group``, a chart
name), so every target path is checked and every module rendered before the
first file is written.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from kubeimport.errors import InvalidManifestError
from kubeimport.models.canonical import DefinitionSet, ModuleDefinitions

logger = logging.getLogger(__name__)


def is_safe_file_stem(name: str) -> bool:
    """Whether ``name`` can be used as a file name inside the output directory."""
    return bool(name) and ".." not in name and "/" not in name and "\\" not in name


class Emitter(ABC):
    """Abstract emitter.

    Attributes:
        name: Emitter identifier (e.g. "json")
        extension: File extension of emitted modules (without the dot)
    """

    name: str = ""
    extension: str = ""

    @abstractmethod
    def render_module(self, definitions: DefinitionSet, module: ModuleDefinitions) -> str:
        """Render a single module to text."""

    def file_name(self, definitions: DefinitionSet, module: ModuleDefinitions) -> str:
        return f"{definitions.qualified_module_name(module.name)}.{self.extension}"

    def module_path(
        self, definitions: DefinitionSet, module: ModuleDefinitions, outdir: Path
    ) -> Path:
        """Path a module is written to.

        Raises:
            InvalidManifestError: If the module name would leave ``outdir``
        """
        qualified = definitions.qualified_module_name(module.name)
        path = outdir / self.file_name(definitions, module)
        if not is_safe_file_stem(qualified) or path.resolve().parent != outdir.resolve():
            raise InvalidManifestError(
                f'module name "{qualified}" from {definitions.source} is not a valid file name'
            )
        return path

    def emit(self, definitions: DefinitionSet, outdir: Path) -> list[Path]:
        """Write every module of ``definitions`` into ``outdir``.

        Returns:
            Paths of the written files, in module order

        Raises:
            InvalidManifestError: If a module name is not a valid file name;
                nothing is written in that case
        """
        if len(definitions) == 0:
            logger.warning("No definitions to import from %s", definitions.source)
            return []

        rendered = [
            (
                module,
                self.module_path(definitions, module, outdir),
                self.render_module(definitions, module),
            )
            for module in definitions
        ]

        outdir.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []

        for module, path, content in rendered:
            path.write_text(content, encoding="utf-8")
            logger.info("%s", module.name)
            logger.debug("Wrote %s", path)
            written.append(path)

        return written
