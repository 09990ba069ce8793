"""Helpers for Kubernetes fully qualified type names.

    io.k8s.api.extensions.v1beta1.Deployment
    |--------- ^ -------|  ^  ^ ^ |---^----|
               |           |  | |     |
 - namespace --+           |  | |     |
 - major ------------------+  | |     |
 - level ---------------------+ |     |
 - subversion ------------------+     |
 - basename --------------------------+
"""

import re
from dataclasses import dataclass
from enum import Enum

_VERSION_PATTERN = re.compile(r"^v([0-9]+)(?:(alpha|beta)([0-9]+))?$")


class ApiLevel(Enum):
    """Stability level of an API version."""

    ALPHA = "alpha"
    BETA = "beta"
    STABLE = "stable"


@dataclass(frozen=True)
class ApiTypeVersion:
    """A parsed ``v<major>[<level><subversion>]`` token."""

    raw: str
    major: int
    level: ApiLevel
    subversion: int


@dataclass(frozen=True)
class ApiTypeName:
    """Components of a fully qualified type name."""

    fullname: str
    namespace: str
    basename: str
    version: ApiTypeVersion | None = None

    @property
    def full_version(self) -> str:
        """The raw version token, or "" for unversioned names."""
        return self.version.raw if self.version else ""


def parse_api_version(token: str) -> ApiTypeVersion | None:
    """Parse a version token such as ``v1``, ``v2beta1`` or ``v1alpha3``."""
    match = _VERSION_PATTERN.match(token)
    if not match:
        return None

    major, level, subversion = match.groups()
    return ApiTypeVersion(
        raw=token,
        major=int(major),
        level=ApiLevel(level) if level else ApiLevel.STABLE,
        subversion=int(subversion or 0),
    )


def parse_api_type_name(fullname: str) -> ApiTypeName:
    """Split a fully qualified type name into its components."""
    parts = fullname.split(".")
    basename = parts[-1]

    if len(parts) < 2:
        return ApiTypeName(fullname=fullname, namespace="", basename=basename)

    prebase = parts[-2]
    version = parse_api_version(prebase)
    namespace_parts = parts[:-2] if version else parts[:-1]

    return ApiTypeName(
        fullname=fullname,
        namespace=".".join(namespace_parts),
        basename=basename,
        version=version,
    )
