"""Schema-registry aliases.

    github:crossplane/crossplane@0.14.0
    |--^-| |---^---| |---^---| ^ ^  ^
       |       |         |     | |  |
 - provider    |         |     | |  |
 - owner ------+         |     | |  |
 - repo -----------------+     | |  |
 - major ----------------------+ |  |
 - minor ------------------------+  |
 - patch ---------------------------+

Minor and patch default to 0. Without a version the alias resolves to the
registry's unversioned (latest) document.
"""

import re

from kubeimport.config import RegistryConfig

_ALIAS_PATTERN = re.compile(
    r"^github:([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)"
    r"(?:@([0-9]+)(?:\.([0-9]+)(?:\.([0-9]+))?)?)?$"
)


def match_registry_alias(source: str, registry: RegistryConfig | None = None) -> str | None:
    """Rewrite a registry alias to the URL of its CRD document.

    Args:
        source: Import source
        registry: URL templates (defaults to RegistryConfig())

    Returns:
        The registry URL, or None if ``source`` is not a registry alias
    """
    match = _ALIAS_PATTERN.fullmatch(source)
    if not match:
        return None

    registry = registry or RegistryConfig()
    owner, repo, major, minor, patch = match.groups()

    if major is None:
        return registry.latest.format(owner=owner, repo=repo)

    version = f"{major}.{minor or 0}.{patch or 0}"
    return registry.url.format(owner=owner, repo=repo, version=version)
