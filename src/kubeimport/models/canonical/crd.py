"""Canonical CustomResourceDefinition model.

One record per (group, kind). Several manifests may describe the same CRD at
different API versions; they are merged into a single record before any
names are resolved.
"""

from dataclasses import dataclass, field
from typing import Any

from kubeimport.errors import DuplicateVersionError


@dataclass(frozen=True)
class CrdVersion:
    """A single served version of a CRD.

    Attributes:
        name: Version name (e.g. "v1", "v1beta1")
        schema: The version's openAPIV3Schema, if any
    """

    name: str
    schema: dict[str, Any] | None = None


@dataclass
class CustomResourceDefinition:
    """A custom resource type and all of its known versions.

    Versions keep the order they were added in. The first version is the
    one that keeps the unsuffixed construct name.

    Attributes:
        group: API group (e.g. "stable.example.com")
        kind: Resource kind (e.g. "CronTab")
        versions: Versions, unique by name
    """

    group: str
    kind: str
    versions: list[CrdVersion] = field(default_factory=list)

    def __post_init__(self) -> None:
        initial, self.versions = self.versions, []
        self.add_versions(initial)

    @property
    def key(self) -> str:
        """Merge key: ``<group>/<kind lowercased>``."""
        return f"{self.group}/{self.kind.lower()}"

    @property
    def version_names(self) -> list[str]:
        return [v.name for v in self.versions]

    def add_versions(self, versions: list[CrdVersion]) -> None:
        """Append versions, rejecting names that already exist.

        Raises:
            DuplicateVersionError: If a version name is already present
        """
        for version in versions:
            if version.name in self.version_names:
                raise DuplicateVersionError(version.name, self.key)
            self.versions.append(version)

    def merge(self, other: "CustomResourceDefinition") -> None:
        """Merge the versions of another record with the same key."""
        if other.key != self.key:
            raise ValueError(f"cannot merge {other.key} into {self.key}")
        self.add_versions(other.versions)
