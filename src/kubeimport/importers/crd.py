"""CustomResourceDefinition importer.

Turns a (multi-document) CRD manifest into one CustomResourceDefinition
record per ``group/kind`` key, merging versions spread across documents,
and partitions the records into one module per API group.
"""

import logging
from typing import Any

from kubeimport.errors import InvalidManifestError
from kubeimport.importers.base import Importer, ImportOptions
from kubeimport.importers.naming import TypeNameResolver
from kubeimport.models.canonical import (
    ApiObjectDefinition,
    CrdVersion,
    CustomResourceDefinition,
    DefinitionSet,
)
from kubeimport.models.import_spec import ImportSpec
from kubeimport.schema.crd_schema import CRD_KIND, SUPPORTED_API_VERSIONS
from kubeimport.schema.parse import safe_parse_crds
from kubeimport.schema.reviver import STRIPPED_VALUE
from kubeimport.utils.fetch import SourceFetcher

logger = logging.getLogger(__name__)


def _invalid(message: str) -> InvalidManifestError:
    return InvalidManifestError(f"invalid CustomResourceDefinition manifest: {message}")


def _require_clean(value: str, field_name: str) -> str:
    if STRIPPED_VALUE in value:
        raise _invalid(f'"{field_name}" contains non standard characters')
    return value


def _openapi_schema(container: Any) -> dict[str, Any] | None:
    if not isinstance(container, dict):
        return None
    return container.get("openAPIV3Schema")


def crd_from_manifest(manifest: dict[str, Any]) -> CustomResourceDefinition:
    """Build a CustomResourceDefinition record from one CRD object.

    Two version layouts are accepted: a singular ``spec.version`` with
    ``spec.validation.openAPIV3Schema``, or a ``spec.versions`` list whose
    entries carry ``schema.openAPIV3Schema`` (falling back to the singular
    validation schema).

    Args:
        manifest: A sanitized CRD object

    Returns:
        CustomResourceDefinition with at least one version

    Raises:
        InvalidManifestError: On unsupported apiVersion or kind, missing
            spec, or when no version can be determined
        DuplicateVersionError: If the manifest lists a version twice
    """
    api_version = manifest.get("apiVersion")
    if api_version is None:
        api_version = "undefined"
    if api_version not in SUPPORTED_API_VERSIONS:
        accepted = ", ".join(f'"{v}"' for v in SUPPORTED_API_VERSIONS)
        raise _invalid(f'"apiVersion" is "{api_version}" but it should be one of: {accepted}')

    if manifest.get("kind") != CRD_KIND:
        raise _invalid(f'"kind" must be "{CRD_KIND}"')

    spec = manifest.get("spec")
    if not spec:
        raise InvalidManifestError('manifest does not have a "spec" attribute')

    group = _require_clean(spec["group"], "spec.group")
    kind = _require_clean(spec["names"]["kind"], "spec.names.kind")
    validation_schema = _openapi_schema(spec.get("validation"))

    if spec.get("version"):
        versions = [CrdVersion(name=spec["version"], schema=validation_schema)]
    else:
        versions = []
        for entry in spec.get("versions") or []:
            schema = _openapi_schema(entry.get("schema"))
            versions.append(
                CrdVersion(
                    name=entry["name"],
                    schema=schema if schema is not None else validation_schema,
                )
            )

    for version in versions:
        _require_clean(version.name, "version")

    crd = CustomResourceDefinition(group=group, kind=kind, versions=versions)
    if not crd.versions:
        raise InvalidManifestError("unable to determine CRD versions")

    return crd


def build_crds(manifests: list[dict[str, Any]]) -> list[CustomResourceDefinition]:
    """Build and merge CRD records, sorted by key.

    Records sharing a ``group/kind`` key are merged into the first one
    seen; a version name occurring in both fails the merge.
    """
    crds: dict[str, CustomResourceDefinition] = {}

    for manifest in manifests:
        crd = crd_from_manifest(manifest)
        if crd.key in crds:
            crds[crd.key].merge(crd)
        else:
            crds[crd.key] = crd

    return [crds[key] for key in sorted(crds)]


def group_crds(crds: list[CustomResourceDefinition]) -> dict[str, list[CustomResourceDefinition]]:
    """Partition CRD records by API group, keeping their order."""
    groups: dict[str, list[CustomResourceDefinition]] = {}
    for crd in crds:
        groups.setdefault(crd.group, []).append(crd)
    return groups


class ImportCustomResourceDefinition(Importer):
    """Imports CRDs from a manifest document (file path or URL).

    Args:
        source: Where the manifest came from
        manifest: Raw manifest text
    """

    def __init__(self, source: str, manifest: str) -> None:
        super().__init__(source)
        self.crds = build_crds(safe_parse_crds(manifest))
        self.groups = group_crds(self.crds)

    @classmethod
    def from_spec(cls, spec: ImportSpec, fetcher: SourceFetcher) -> "ImportCustomResourceDefinition":
        """Fetch the manifest behind ``spec.source`` and build the importer."""
        return cls(spec.source, fetcher.fetch(spec.source))

    @property
    def module_names(self) -> list[str]:
        return list(self.groups)

    def build(self, resolver: TypeNameResolver, options: ImportOptions) -> DefinitionSet:
        prefix = options.class_name_prefix
        if prefix is None:
            prefix = resolver.naming.crd_class_prefix

        definitions = DefinitionSet(
            source=self.source,
            module_name_prefix=options.module_name_prefix,
        )

        for group, crds in self.groups.items():
            module = definitions.module(group)
            for crd in crds:
                logger.info("  %s", crd.key)
                for index, version in enumerate(crd.versions):
                    # only the second version onwards gets a suffix
                    suffix = resolver.crd_version_suffix(index, version.name)
                    definition = ApiObjectDefinition(
                        fqn=f"{crd.kind}{suffix}",
                        group=crd.group,
                        version=version.name,
                        kind=crd.kind,
                        schema=version.schema,
                        custom=True,
                        prefix=prefix,
                        suffix=suffix,
                    )
                    module.add_construct(resolver.resolve(definition))

        return definitions
