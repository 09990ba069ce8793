"""Core Kubernetes API importer.

Reads the upstream ``_definitions.json`` document and classifies every
definition structurally:

- API objects carry an ``x-kubernetes-group-version-kind`` annotation AND a
  ``metadata`` property. They become constructs (``KubeDeployment``) with a
  props struct (``KubeDeploymentProps``) aliased from the original name.
- Everything else is a data type, renamed by version so differently
  versioned definitions with the same basename stay distinct
  (``io.k8s.api.apps.v1beta1.DeploymentCondition`` ->
  ``DeploymentConditionV1Beta1``).
"""

import logging
from typing import Any

from kubeimport.config import KubernetesApiConfig
from kubeimport.importers.base import Importer, ImportOptions
from kubeimport.importers.naming import TypeNameResolver
from kubeimport.models.canonical import (
    ApiObjectDefinition,
    DataTypeDefinition,
    DefinitionSet,
    GroupVersionKind,
    ModuleDefinitions,
)
from kubeimport.schema.parse import safe_parse_json_schema
from kubeimport.utils.fetch import SourceFetcher

logger = logging.getLogger(__name__)

K8S_SOURCE = "k8s"
K8S_MODULE = "k8s"
VERSION_DELIM = "@"
X_GROUP_VERSION_KIND = "x-kubernetes-group-version-kind"


def match_k8s(source: str, default_api_version: str) -> str | None:
    """Return the API version of a ``k8s`` / ``k8s@<version>`` source.

    Returns:
        The requested (or default) API version, None for other sources
    """
    if source == K8S_SOURCE:
        return default_api_version

    prefix = f"{K8S_SOURCE}{VERSION_DELIM}"
    if source.startswith(prefix):
        return source[len(prefix):] or default_api_version

    return None


def try_get_api_object_name(definition: dict[str, Any]) -> GroupVersionKind | None:
    """Return the GVK of a definition that can be declared in a manifest.

    Definitions without ``metadata`` (e.g. ``meta.v1.DeleteOptions``) carry
    a GVK annotation but are not API objects; they are treated as data types.
    """
    names = definition.get(X_GROUP_VERSION_KIND)
    if not names or not isinstance(names, list):
        return None

    name = names[0]
    if not name or not isinstance(name, dict):
        return None

    properties = definition.get("properties") or {}
    if not properties.get("metadata"):
        return None

    return GroupVersionKind(
        group=name.get("group", ""),
        version=name.get("version", ""),
        kind=name.get("kind", ""),
    )


def create_api_object_definition(
    fqn: str,
    definition: dict[str, Any],
    prefix: str,
) -> ApiObjectDefinition:
    """Build the ApiObjectDefinition for a core API object.

    Raises:
        ValueError: If the definition is not an API object
    """
    gvk = try_get_api_object_name(definition)
    if gvk is None:
        raise ValueError(f"{fqn} cannot be defined as an API object.")

    return ApiObjectDefinition(
        fqn=fqn,
        group=gvk.group,
        version=gvk.version,
        kind=gvk.kind,
        schema=definition,
        custom=False,
        prefix=prefix,
    )


class ImportKubernetesApi(Importer):
    """Imports the core Kubernetes API at a given version.

    Args:
        api_version: Kubernetes version (e.g. "1.22.0")
        fetcher: Fetcher used to download the definitions document
        config: Core API settings (schema URL template, exclusions)
    """

    def __init__(
        self,
        api_version: str,
        fetcher: SourceFetcher,
        config: KubernetesApiConfig | None = None,
    ) -> None:
        self.config = config or KubernetesApiConfig()
        self.api_version = api_version
        self.fetcher = fetcher
        self._schema: dict[str, Any] | None = None
        super().__init__(self.config.schema_url.format(version=api_version))

    @property
    def module_names(self) -> list[str]:
        return [K8S_MODULE]

    def load_schema(self) -> dict[str, Any]:
        """Download and sanitize the definitions document (cached)."""
        if self._schema is None:
            logger.debug("Downloading Kubernetes API %s schema from %s", self.api_version, self.source)
            self._schema = safe_parse_json_schema(self.fetcher.fetch(self.source))
        return self._schema

    def build(self, resolver: TypeNameResolver, options: ImportOptions) -> DefinitionSet:
        schema = self.load_schema()

        prefix = options.class_name_prefix
        if prefix is None:
            prefix = resolver.naming.k8s_class_prefix

        excluded = set(self.config.exclude) | set(options.exclude)

        definitions = DefinitionSet(
            source=self.source,
            module_name_prefix=options.module_name_prefix,
        )
        module = definitions.module(K8S_MODULE)

        for fqn, definition in (schema.get("definitions") or {}).items():
            if fqn in excluded:
                logger.debug("Excluding %s", fqn)
                continue

            if try_get_api_object_name(definition) is not None:
                self._add_api_object(module, resolver, fqn, definition, prefix)
            else:
                self._add_data_type(module, resolver, fqn, definition)

        logger.info(
            "Resolved %d API object(s) and %d data type(s)",
            len(module.constructs),
            len(module.data_types),
        )
        return definitions

    def _add_api_object(
        self,
        module: ModuleDefinitions,
        resolver: TypeNameResolver,
        fqn: str,
        definition: dict[str, Any],
        prefix: str,
    ) -> None:
        resolved = resolver.resolve(create_api_object_definition(fqn, definition, prefix))

        # the same kind may be served by several groups at one version
        # (core/v1 Event and events.k8s.io/v1 Event); the first one wins
        if module.has_identifier(resolved.identifier) or module.has_identifier(
            resolved.props_identifier
        ):
            logger.warning(
                "Skipping %s: %s is already defined by another API object",
                fqn,
                resolved.identifier,
            )
            return

        module.add_construct(resolved)
        module.add_alias(fqn, resolved.props_identifier)

    def _add_data_type(
        self,
        module: ModuleDefinitions,
        resolver: TypeNameResolver,
        fqn: str,
        definition: dict[str, Any],
    ) -> None:
        identifier = resolver.data_type_name(fqn)
        module.add_alias(fqn, identifier)

        if module.has_identifier(identifier):
            logger.warning("Skipping %s: %s is already defined", fqn, identifier)
            return

        module.add_data_type(DataTypeDefinition(identifier=identifier, fqn=fqn, schema=definition))
