"""API object definitions: the unit the type-name resolver works on."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class GroupVersionKind:
    """The three-part identifier of a Kubernetes resource type."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        """``apiVersion`` as it appears in a manifest (``group/version`` or ``version``)."""
        return f"{self.group}/{self.version}" if self.group else self.version


@dataclass(frozen=True)
class ApiObjectDefinition:
    """An object that can be declared in a manifest.

    Attributes:
        fqn: Fully qualified name of the schema definition
        group: API group ("" for the core group)
        version: API version
        kind: Resource kind
        schema: JSON schema of the object
        custom: True for CRD-derived objects, False for core API objects
        prefix: Prefix prepended to the construct name
        suffix: Version suffix appended to the construct name
    """

    fqn: str
    group: str
    version: str
    kind: str
    schema: dict[str, Any] | None = None
    custom: bool = False
    prefix: str = ""
    suffix: str = ""

    @property
    def gvk(self) -> GroupVersionKind:
        return GroupVersionKind(group=self.group, version=self.version, kind=self.kind)
