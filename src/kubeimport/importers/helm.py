"""Helm chart importer.

Locators:

    helm:https://lacework.github.io/helm-charts/lacework-agent@6.9.0
    helm:oci://registry-1.docker.io/bitnamicharts/wordpress@17.1.17

The locator and its version are validated before anything touches the
network. The chart is then pulled into a scoped temporary directory, its
``Chart.yaml`` dependencies and optional ``values.schema.json`` are read,
and the directory is removed on every exit path.
"""

import logging
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from kubeimport.errors import InvalidImportSpecError, InvalidManifestError
from kubeimport.importers.base import Importer, ImportOptions
from kubeimport.importers.naming import TypeNameResolver, normalize_type_name
from kubeimport.models.canonical import ChartDefinition, DataTypeDefinition, DefinitionSet
from kubeimport.models.import_spec import ImportSpec
from kubeimport.schema.parse import safe_parse_json_schema, safe_parse_yaml
from kubeimport.schema.reviver import SafeReviver
from kubeimport.tools.helm import OCI_SCHEME, HelmAdapter, HelmPullRequest

logger = logging.getLogger(__name__)

HELM_PREFIX = "helm:"
CHART_YAML = "Chart.yaml"
CHART_SCHEMA = "values.schema.json"

_URL_CHARS = r"[A-Za-z0-9_./:\-]+"
_VERSION = r"@([0-9]+)\.([0-9]+)\.([A-Za-z0-9\-+]+)"

_OCI_PATTERN = re.compile(rf"^helm:(oci://{_URL_CHARS}){_VERSION}$")
_REPO_PATTERN = re.compile(rf"^helm:({_URL_CHARS})/({_URL_CHARS}){_VERSION}$")

# SemVer 2.0.0 (https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string)
SEMVER_PATTERN = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


@dataclass(frozen=True)
class HelmChartLocator:
    """A parsed ``helm:`` locator.

    Attributes:
        chart_url: Repository URL, or the full ``oci://`` chart reference
        chart_name: Chart name
        chart_version: Chart version (valid SemVer 2)
    """

    chart_url: str
    chart_name: str
    chart_version: str


def is_helm_locator(source: str) -> bool:
    return source.startswith(HELM_PREFIX)


def parse_helm_locator(source: str) -> HelmChartLocator:
    """Parse and validate a ``helm:`` locator.

    Raises:
        InvalidImportSpecError: If the locator or its version is malformed
    """
    if source.startswith(f"{HELM_PREFIX}{OCI_SCHEME}"):
        match = _OCI_PATTERN.fullmatch(source)
        if not match:
            raise InvalidImportSpecError(
                f"Invalid helm URL: {source}. "
                "Must match the format: 'helm:<oci-registry-url>@<chart-version>'."
            )
        chart_url, major, minor, patch = match.groups()
        chart_name = chart_url.rsplit("/", 1)[-1]
    else:
        match = _REPO_PATTERN.fullmatch(source)
        if not match:
            raise InvalidImportSpecError(
                f"Invalid helm URL: {source}. "
                "Must match the format: 'helm:<repo-url>/<chart-name>@<chart-version>'."
            )
        chart_url, chart_name, major, minor, patch = match.groups()

    chart_version = f"{major}.{minor}.{patch}"
    if not SEMVER_PATTERN.match(chart_version):
        raise InvalidImportSpecError(
            f"Invalid chart version ({chart_version}) in URL: {source}. "
            "Must follow SemVer-2 (see https://semver.org/)."
        )

    return HelmChartLocator(chart_url=chart_url, chart_name=chart_name, chart_version=chart_version)


def read_chart_dependencies(chart_yaml: Path) -> list[str]:
    """Names of the dependencies declared in ``Chart.yaml``."""
    if not chart_yaml.is_file():
        raise InvalidManifestError(f"helm chart does not contain {CHART_YAML}: {chart_yaml.parent}")

    documents = safe_parse_yaml(chart_yaml.read_text(encoding="utf-8"), SafeReviver())
    if len(documents) != 1 or not isinstance(documents[0], dict):
        return []

    dependencies = documents[0].get("dependencies") or []
    return [d["name"] for d in dependencies if isinstance(d, dict) and "name" in d]


def read_values_schema(schema_path: Path) -> dict[str, Any] | None:
    """Sanitized ``values.schema.json``, or None if the chart has none."""
    if not schema_path.is_file():
        return None
    return safe_parse_json_schema(schema_path.read_text(encoding="utf-8"))


class ImportHelm(Importer):
    """Imports a Helm chart as a chart construct plus its values types.

    Args:
        source: The original ``helm:`` locator
        locator: Parsed locator
        dependencies: Chart dependency names
        values_schema: Sanitized values schema, if the chart ships one
    """

    def __init__(
        self,
        source: str,
        locator: HelmChartLocator,
        dependencies: list[str] | None = None,
        values_schema: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(source)
        self.locator = locator
        self.dependencies = dependencies or []
        self.values_schema = values_schema

    @classmethod
    def from_spec(cls, spec: ImportSpec, adapter: HelmAdapter) -> "ImportHelm":
        """Pull the chart behind ``spec.source`` and read its metadata.

        Raises:
            InvalidImportSpecError: If the locator is malformed (no pull happens)
            ToolNotAvailableError: If Helm is not installed
            ToolExecutionError: If ``helm pull`` fails
        """
        locator = parse_helm_locator(spec.source)

        with tempfile.TemporaryDirectory(
            prefix="kubeimport-helm-", ignore_cleanup_errors=True
        ) as workdir:
            chart_dir = adapter.execute(
                HelmPullRequest(
                    chart_url=locator.chart_url,
                    chart_name=locator.chart_name,
                    chart_version=locator.chart_version,
                    untar_dir=Path(workdir),
                )
            )
            dependencies = read_chart_dependencies(chart_dir / CHART_YAML)
            values_schema = read_values_schema(chart_dir / CHART_SCHEMA)

        return cls(spec.source, locator, dependencies, values_schema)

    @property
    def module_names(self) -> list[str]:
        return [self.locator.chart_name]

    def build(self, resolver: TypeNameResolver, options: ImportOptions) -> DefinitionSet:
        definitions = DefinitionSet(
            source=self.source,
            module_name_prefix=options.module_name_prefix,
        )
        module = definitions.module(self.locator.chart_name)

        chart_type = normalize_type_name(self.locator.chart_name)
        identifier = normalize_type_name(f"{options.class_name_prefix or ''}{chart_type}")
        module.add_chart(
            ChartDefinition(
                identifier=identifier,
                values_identifier=f"{identifier}Values",
                chart_name=self.locator.chart_name,
                chart_url=self.locator.chart_url,
                chart_version=self.locator.chart_version,
                dependencies=tuple(self.dependencies),
                values_schema=self.values_schema,
            )
        )

        for name, schema in ((self.values_schema or {}).get("definitions") or {}).items():
            type_name = normalize_type_name(name)
            module.add_alias(name, type_name)
            if module.has_identifier(type_name):
                logger.warning("Skipping values definition %s: %s is already defined", name, type_name)
                continue
            module.add_data_type(DataTypeDefinition(identifier=type_name, fqn=name, schema=schema))

        logger.info(
            "  %s@%s (%d dependencies)",
            self.locator.chart_name,
            self.locator.chart_version,
            len(self.dependencies),
        )
        return definitions
