"""Shared pytest fixtures for kubeimport tests.

Fixtures are organized by category:
- Path fixtures: fixture manifests, definitions and charts
- Fetch fixtures: an in-memory SourceFetcher (tests never touch the network)
- Helm fixtures: a fake ``helm pull`` (tests never run the Helm binary)
- Configuration fixtures: configs pointing at the fakes
"""

import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from kubeimport.config import KubeImportConfig, KubernetesApiConfig
from kubeimport.errors import SourceFetchError
from kubeimport.utils.fetch import SourceFetcher

TEST_SCHEMA_URL = "https://schemas.test/v{version}/_definitions.json"

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def crds_dir(fixtures_dir: Path) -> Path:
    """Return the path to the CRD manifest fixtures."""
    return fixtures_dir / "crds"


@pytest.fixture
def chart_dir(fixtures_dir: Path) -> Path:
    """Return the path to the unpacked Helm chart fixture."""
    return fixtures_dir / "charts" / "mychart"


@pytest.fixture
def k8s_definitions(fixtures_dir: Path) -> str:
    """Return the trimmed Kubernetes definitions document."""
    return (fixtures_dir / "k8s" / "_definitions.json").read_text(encoding="utf-8")


# =============================================================================
# Fetch Fixtures
# =============================================================================


class FakeFetcher(SourceFetcher):
    """SourceFetcher serving documents from memory.

    Sources not registered in ``documents`` fail like an HTTP 404.
    """

    def __init__(self, documents: dict[str, str] | None = None) -> None:
        super().__init__()
        self.documents = dict(documents or {})
        self.requests: list[str] = []

    def fetch(self, source: str) -> str:
        self.requests.append(source)
        if source not in self.documents:
            raise SourceFetchError(source, "404 Not Found")
        return self.documents[source]


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    """Return an empty in-memory fetcher."""
    return FakeFetcher()


@pytest.fixture
def k8s_fetcher(k8s_definitions: str) -> FakeFetcher:
    """Return a fetcher serving the definitions fixture for Kubernetes 1.22.0."""
    return FakeFetcher({TEST_SCHEMA_URL.format(version="1.22.0"): k8s_definitions})


# =============================================================================
# Helm Fixtures
# =============================================================================


@pytest.fixture
def fake_helm_pull(
    monkeypatch: pytest.MonkeyPatch,
    chart_dir: Path,
) -> list[list[str]]:
    """Replace ``subprocess.run`` for ``helm pull`` with a copy of the chart fixture.

    Returns:
        The recorded command lines
    """
    calls: list[list[str]] = []

    def fake_run(command: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        calls.append(list(command))
        untar_dir = Path(command[command.index("--untardir") + 1])
        if "--repo" in command:
            chart_name = command[2]
        else:
            chart_name = command[2].rsplit("/", 1)[-1]
        shutil.copytree(chart_dir, untar_dir / chart_name)
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")

    monkeypatch.setattr("kubeimport.tools.helm.subprocess.run", fake_run)
    return calls


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def config() -> KubeImportConfig:
    """Return a config whose core API schema URL points at the fake fetcher."""
    return KubeImportConfig(
        k8s=KubernetesApiConfig(default_api_version="1.22.0", schema_url=TEST_SCHEMA_URL),
    )


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    """Return a helper writing a kubeimport.yaml into tmp_path."""

    def _write(content: str) -> Path:
        path = tmp_path / "kubeimport.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def make_fetcher() -> type[FakeFetcher]:
    """Return the in-memory fetcher class for tests that need custom documents."""
    return FakeFetcher
