"""kubeimport configuration system.

Configuration is YAML-based with a handful of CLI overrides (--output,
--class-prefix, --exclude). Supports environment variable substitution
(${VAR}) in config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.kubeimport/config.yaml
3. ./kubeimport.yaml

The project file also carries the persisted ``imports`` list; every
successful non-core import is appended to it (see ``add_import_to_config``).
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE = "kubeimport.yaml"

# =============================================================================
# Configuration Dataclasses
# =============================================================================


@dataclass
class NamingConfig:
    """Defaults injected into the type-name resolver.

    Each default is its own field because the CRD and core-API flows do not
    share a single rule.

    Attributes:
        crd_class_prefix: Prefix for constructs imported from CRDs
        k8s_class_prefix: Prefix for core Kubernetes API constructs
        k8s_stable_version: Core API version that gets no name suffix
        data_type_default_version: Version assumed for unversioned data types
    """

    crd_class_prefix: str = ""
    k8s_class_prefix: str = "Kube"
    k8s_stable_version: str = "v1"
    data_type_default_version: str = "v1"


@dataclass
class KubernetesApiConfig:
    """Core Kubernetes API import settings.

    Attributes:
        default_api_version: API version used for a bare ``k8s`` import
        schema_url: URL template of the upstream definitions document
        exclude: Fully qualified definition names to skip
    """

    default_api_version: str = "1.15.0"
    schema_url: str = (
        "https://raw.githubusercontent.com/cdk8s-team/cdk8s/master/"
        "kubernetes-schemas/v{version}/_definitions.json"
    )
    exclude: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate Kubernetes API configuration."""
        if "{version}" not in self.schema_url:
            raise ValueError(
                f"k8s.schema_url must contain a {{version}} placeholder (got {self.schema_url})"
            )


@dataclass
class RegistryConfig:
    """Schema registry alias settings (``github:<owner>/<repo>[@version]``).

    Attributes:
        url: URL template used when a version is given
        latest: URL template used when the version is omitted
    """

    url: str = "https://doc.crds.dev/raw/github.com/{owner}/{repo}@v{version}"
    latest: str = "https://doc.crds.dev/raw/github.com/{owner}/{repo}"


@dataclass
class FetchConfig:
    """Source fetching limits.

    Attributes:
        timeout: Network timeout in seconds
        max_redirects: Maximum number of redirects followed per fetch
    """

    timeout: float = 60.0
    max_redirects: int = 5

    def __post_init__(self) -> None:
        """Validate fetch limits."""
        if self.timeout <= 0:
            raise ValueError(f"fetch.timeout must be positive (got {self.timeout})")
        if self.max_redirects < 0:
            raise ValueError(
                f"fetch.max_redirects must not be negative (got {self.max_redirects})"
            )


@dataclass
class HelmConfig:
    """Helm binary settings.

    Attributes:
        binary: Helm executable name or path
        timeout: Timeout for ``helm pull`` in seconds
    """

    binary: str = "helm"
    timeout: int = 300

    def __post_init__(self) -> None:
        """Validate Helm settings."""
        if self.timeout <= 0:
            raise ValueError(f"helm.timeout must be positive (got {self.timeout})")


@dataclass
class KubeImportConfig:
    """Top-level kubeimport configuration.

    Attributes:
        output: Directory emitted modules are written to
        imports: Persisted import specifications
        naming: Type-name resolver defaults
        k8s: Core Kubernetes API settings
        registry: Schema registry alias settings
        fetch: Source fetching limits
        helm: Helm binary settings
    """

    output: str = "imports"
    imports: list[str] = field(default_factory=list)
    naming: NamingConfig = field(default_factory=NamingConfig)
    k8s: KubernetesApiConfig = field(default_factory=KubernetesApiConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    helm: HelmConfig = field(default_factory=HelmConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================

_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(value: Any) -> Any:
    """Substitute ${VAR} references in config values.

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return _ENV_VAR_PATTERN.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.kubeimport/config.yaml
    2. ./kubeimport.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    start_path = (start_path or Path.cwd()).resolve()

    candidates = [
        start_path / ".kubeimport" / "config.yaml",
        start_path / CONFIG_FILE,
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f'Config section "{name}" must be a mapping')
    return section


def load_config_from_dict(data: dict[str, Any]) -> KubeImportConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        KubeImportConfig instance
    """
    data = substitute_env_vars(data)
    config = KubeImportConfig()

    if "output" in data:
        config.output = str(data["output"])

    if "imports" in data:
        imports = data["imports"] or []
        if not isinstance(imports, list):
            raise ValueError('Config key "imports" must be a list')
        config.imports = [str(i) for i in imports]

    if "naming" in data:
        naming = _section(data, "naming")
        defaults = NamingConfig()
        config.naming = NamingConfig(
            crd_class_prefix=naming.get("crd_class_prefix", defaults.crd_class_prefix),
            k8s_class_prefix=naming.get("k8s_class_prefix", defaults.k8s_class_prefix),
            k8s_stable_version=naming.get("k8s_stable_version", defaults.k8s_stable_version),
            data_type_default_version=naming.get(
                "data_type_default_version", defaults.data_type_default_version
            ),
        )

    if "k8s" in data:
        k8s = _section(data, "k8s")
        defaults_k8s = KubernetesApiConfig()
        config.k8s = KubernetesApiConfig(
            default_api_version=str(
                k8s.get("default_api_version", defaults_k8s.default_api_version)
            ),
            schema_url=k8s.get("schema_url", defaults_k8s.schema_url),
            exclude=list(k8s.get("exclude") or []),
        )

    if "registry" in data:
        registry = _section(data, "registry")
        defaults_registry = RegistryConfig()
        config.registry = RegistryConfig(
            url=registry.get("url", defaults_registry.url),
            latest=registry.get("latest", defaults_registry.latest),
        )

    if "fetch" in data:
        fetch = _section(data, "fetch")
        config.fetch = FetchConfig(
            timeout=float(fetch.get("timeout", 60.0)),
            max_redirects=int(fetch.get("max_redirects", 5)),
        )

    if "helm" in data:
        helm = _section(data, "helm")
        config.helm = HelmConfig(
            binary=helm.get("binary", "helm"),
            timeout=int(helm.get("timeout", 300)),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> KubeImportConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        KubeImportConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = KubeImportConfig()

    return config


def add_import_to_config(spec: str, config_path: Path | None = None) -> bool:
    """Append an import specification to the persisted import list.

    The raw YAML mapping is rewritten so keys this module does not know
    about survive. Appending is idempotent.

    Args:
        spec: The import specification exactly as the user wrote it
        config_path: Project file (defaults to ./kubeimport.yaml)

    Returns:
        True if the spec was appended, False if it was already present
    """
    path = config_path or Path.cwd() / CONFIG_FILE

    data: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            data = yaml.safe_load(f) or {}

    imports = data.get("imports") or []
    if spec in imports:
        return False

    imports.append(spec)
    data["imports"] = imports

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)

    return True


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return """# kubeimport configuration

# Directory that emitted modules are written to
output: "imports"

# Persisted import specifications ([NAME:=]SPEC)
imports:
  - k8s

naming:
  crd_class_prefix: ""          # prefix for constructs imported from CRDs
  k8s_class_prefix: "Kube"      # prefix for core Kubernetes API constructs
  k8s_stable_version: "v1"      # core API version imported without suffix
  data_type_default_version: "v1"

k8s:
  default_api_version: "1.15.0"
  # exclude:
  #   - io.k8s.api.core.v1.PodSpec

fetch:
  timeout: 60
  max_redirects: 5

helm:
  binary: "helm"
  timeout: 300
"""
