"""Import pipeline orchestrator.

Runs import specifications one at a time, in the order given:

1. Dispatch the spec to an importer (fetching or pulling its source)
2. Build the DefinitionSet (sanitize, validate, resolve names)
3. Emit one file per module
4. Persist the spec to the project's import list (non-core imports only)

Imports are never parallelized; a later import may rely on the persisted
state written by an earlier one. A failure stops the run before anything
is emitted for the failing spec.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from kubeimport.config import KubeImportConfig, add_import_to_config
from kubeimport.emitters import Emitter, SchemaJsonEmitter
from kubeimport.importers.base import ImportOptions
from kubeimport.importers.dispatch import ImportDispatcher, ImportKind
from kubeimport.importers.naming import TypeNameResolver
from kubeimport.models.canonical import DefinitionSet
from kubeimport.models.import_spec import ImportSpec, parse_imports
from kubeimport.utils.fetch import SourceFetcher

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Options for controlling pipeline execution.

    Attributes:
        outdir: Directory emitted modules are written to (config ``output`` if None)
        save: Append successful non-core imports to the persisted import list
        class_name_prefix: Overrides the importers' default construct prefix
        exclude: Fully qualified core API definitions to skip
        config_path: Project file the import list is persisted to
    """

    outdir: Path | None = None
    save: bool = True
    class_name_prefix: str | None = None
    exclude: list[str] = field(default_factory=list)
    config_path: Path | None = None


@dataclass
class ImportResult:
    """Outcome of one import.

    Attributes:
        spec: The import specification as parsed
        kind: Which importer handled it
        definitions: The resolved definition set
        files: Files written by the emitter
        saved: Whether the spec was appended to the import list
    """

    spec: ImportSpec
    kind: ImportKind
    definitions: DefinitionSet
    files: list[Path] = field(default_factory=list)
    saved: bool = False


class ImportPipeline:
    """Orchestrates dispatch, model building and emission.

    Args:
        config: kubeimport configuration (uses defaults if None)
        fetcher: Source fetcher (built from ``config.fetch`` if None)
        dispatcher: Import dispatcher (built from config and fetcher if None)
        emitter: Output emitter (JSON if None)
    """

    def __init__(
        self,
        config: KubeImportConfig | None = None,
        fetcher: SourceFetcher | None = None,
        dispatcher: ImportDispatcher | None = None,
        emitter: Emitter | None = None,
    ) -> None:
        self.config = config or KubeImportConfig()
        self.fetcher = fetcher or SourceFetcher(
            timeout=self.config.fetch.timeout,
            max_redirects=self.config.fetch.max_redirects,
        )
        self.dispatcher = dispatcher or ImportDispatcher(self.config, self.fetcher)
        self.emitter = emitter or SchemaJsonEmitter()
        self.resolver = TypeNameResolver(self.config.naming)

    def run(
        self,
        specs: list[str | ImportSpec],
        options: PipelineOptions | None = None,
    ) -> list[ImportResult]:
        """Run every import in order.

        Args:
            specs: Import specifications (``[NAME:=]SPEC`` strings or parsed)
            options: Pipeline execution options

        Returns:
            One ImportResult per spec

        Raises:
            KubeImportError: On the first fatal import error
        """
        options = options or PipelineOptions()
        parsed = [s if isinstance(s, ImportSpec) else parse_imports(s) for s in specs]
        return [self.run_one(spec, options) for spec in parsed]

    def run_one(self, spec: ImportSpec, options: PipelineOptions) -> ImportResult:
        """Run a single import."""
        match = self.dispatcher.match(spec)
        logger.info("Importing resources, this may take a few moments...")

        importer = self.dispatcher.create(match)
        logger.debug("Importer: %s", importer.get_metadata())

        definitions = importer.build(
            self.resolver,
            ImportOptions(
                module_name_prefix=spec.module_name_prefix,
                class_name_prefix=options.class_name_prefix,
                exclude=list(options.exclude),
            ),
        )

        outdir = options.outdir or Path(self.config.output)
        files = self.emitter.emit(definitions, outdir)
        logger.debug(
            "Imported %s",
            spec,
            extra={
                "extra_data": {
                    "kind": match.kind.value,
                    "modules": definitions.module_names,
                    "files": [str(path) for path in files],
                }
            },
        )

        saved = False
        if options.save and not match.is_core:
            config_path = options.config_path or self.config.config_path
            saved = add_import_to_config(str(spec), config_path)
            if saved:
                logger.debug("Added %s to the import list", spec)

        return ImportResult(
            spec=spec,
            kind=match.kind,
            definitions=definitions,
            files=files,
            saved=saved,
        )
