"""Type-name resolution.

Derives the identifiers emitted for each definition. The rules:

- base name is the ``kind``
- a prefix is prepended (CRDs: "" by default; core API: "Kube")
- a version suffix is appended for core API objects whose version is not
  the stable one, and for the second and later versions of a CRD

The suffix rule is what keeps identifiers unique inside a module, so
uniqueness holds by construction.
"""

import re

from kubeimport.config import NamingConfig
from kubeimport.errors import InvalidManifestError
from kubeimport.importers.k8s_util import parse_api_type_name
from kubeimport.models.canonical import ApiObjectDefinition, ResolvedDefinition
from kubeimport.schema.reviver import STRIPPED_VALUE

_WORD_SPLIT = re.compile(r"[^A-Za-z0-9]+")
_AFTER_DIGIT = re.compile(r"(?<=[0-9])([a-z])")


def pascal_case(text: str) -> str:
    """Title-case a token: ``v1beta1`` -> ``V1Beta1``, ``cert-manager`` -> ``CertManager``."""
    words = [w for w in _WORD_SPLIT.split(text) if w]
    result = []
    for word in words:
        word = word[0].upper() + word[1:]
        result.append(_AFTER_DIGIT.sub(lambda m: m.group(1).upper(), word))
    return "".join(result)


def normalize_type_name(name: str) -> str:
    """Normalize a type name to a PascalCase identifier.

    Names written entirely in capitals (``API``) are lower-cased first so
    they read as a word (``Api``).
    """
    if name.upper() == name:
        name = name.lower()
    return pascal_case(name)


class TypeNameResolver:
    """Resolves construct, props and data type identifiers.

    Args:
        naming: Naming defaults (prefixes and the stable core version)
    """

    def __init__(self, naming: NamingConfig | None = None) -> None:
        self.naming = naming or NamingConfig()

    def crd_version_suffix(self, index: int, version: str) -> str:
        """Suffix for the ``index``-th version of a CRD (none for the first)."""
        return "" if index == 0 else pascal_case(version)

    def version_suffix(self, definition: ApiObjectDefinition) -> str:
        if definition.custom:
            return definition.suffix
        if definition.version == self.naming.k8s_stable_version:
            return ""
        return pascal_case(definition.version)

    def construct_name(self, definition: ApiObjectDefinition) -> str:
        """Identifier of the construct class for an API object."""
        _reject_stripped(definition.fqn, definition.group, definition.kind, definition.version)
        return normalize_type_name(
            f"{definition.prefix}{definition.kind}{self.version_suffix(definition)}"
        )

    def props_name(self, definition: ApiObjectDefinition) -> str:
        """Identifier of the props struct for an API object."""
        return normalize_type_name(f"{self.construct_name(definition)}Props")

    def resolve(self, definition: ApiObjectDefinition) -> ResolvedDefinition:
        return ResolvedDefinition(
            identifier=self.construct_name(definition),
            props_identifier=self.props_name(definition),
            definition=definition,
        )

    def data_type_name(self, fqn: str) -> str:
        """Canonical identifier for a plain data type.

        ``io.k8s.api.apps.v1beta1.DeploymentCondition`` becomes
        ``DeploymentConditionV1Beta1``; stable and unversioned names keep
        their basename.
        """
        _reject_stripped(fqn)
        parsed = parse_api_type_name(fqn)
        version = parsed.full_version or self.naming.data_type_default_version
        suffix = "" if version == self.naming.k8s_stable_version else pascal_case(version)
        return normalize_type_name(f"{parsed.basename}{suffix}")


def _reject_stripped(*values: str) -> None:
    for value in values:
        if STRIPPED_VALUE in value:
            raise InvalidManifestError(
                "cannot derive a type name from a value that contains non standard characters"
            )
