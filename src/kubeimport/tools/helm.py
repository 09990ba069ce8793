"""Helm adapter.

Pulls and unpacks a chart archive with ``helm pull --untar``.
https://helm.sh/docs/helm/helm_pull/
"""

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from kubeimport.tools.base import ToolAdapter, ToolExecutionError, ToolNotAvailableError

logger = logging.getLogger(__name__)

OCI_SCHEME = "oci://"


@dataclass(frozen=True)
class HelmPullRequest:
    """Arguments of a single ``helm pull``.

    Attributes:
        chart_url: Repository URL, or the full ``oci://`` chart reference
        chart_name: Chart name (the directory the archive unpacks into)
        chart_version: Exact chart version
        untar_dir: Directory the chart is unpacked into
    """

    chart_url: str
    chart_name: str
    chart_version: str
    untar_dir: Path

    @property
    def is_oci(self) -> bool:
        return self.chart_url.startswith(OCI_SCHEME)

    def args(self) -> list[str]:
        """``helm`` arguments (without the binary)."""
        args = ["pull"]
        if self.is_oci:
            args.append(self.chart_url)
        else:
            args.extend([self.chart_name, "--repo", self.chart_url])
        args.extend(
            [
                "--version", self.chart_version,
                "--untar",
                "--untardir", str(self.untar_dir),
            ]
        )
        return args


class HelmAdapter(ToolAdapter[HelmPullRequest, Path]):
    """Adapter around the ``helm`` binary.

    Args:
        binary: Helm executable name or path
        timeout: Timeout for ``helm pull`` in seconds
    """

    def __init__(self, binary: str = "helm", timeout: int = 300) -> None:
        super().__init__(name="helm", capability="chart-pull")
        self.binary = binary
        self.timeout = timeout

    def check_available(self) -> bool:
        """Check if Helm is installed and accessible."""
        try:
            result = subprocess.run(
                [self.binary, "version", "--short"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
            return False

    def get_version(self) -> str | None:
        """Get Helm version string (e.g. "v3.14.0+g3fc9f4b")."""
        try:
            result = subprocess.run(
                [self.binary, "version", "--short"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            if result.returncode == 0:
                output = result.stdout.strip()
                return output.split("\n")[0].strip() if output else None
            return None
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
            return None

    def execute(self, request: HelmPullRequest) -> Path:
        """Pull and unpack a chart.

        Args:
            request: What to pull and where to unpack it

        Returns:
            Path of the unpacked chart directory

        Raises:
            ToolNotAvailableError: If Helm is not installed
            ToolExecutionError: If the pull fails
        """
        command = [self.binary, *request.args()]
        logger.debug("Running %s", " ".join(command))

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise ToolNotAvailableError(
                self.name,
                f"Unable to execute '{self.binary}' to pull the Helm chart. "
                "Is helm installed on your system?",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ToolExecutionError(
                self.name,
                f"helm pull timed out after {self.timeout} seconds ({request.chart_url})",
                stderr=str(e),
            ) from e
        except OSError as e:
            raise ToolExecutionError(
                self.name,
                f"Failed pulling helm chart from URL ({request.chart_url}): {e}",
            ) from e

        if result.returncode != 0:
            raise ToolExecutionError(
                self.name,
                result.stderr.strip() or "helm pull failed",
                exit_code=result.returncode,
                stderr=result.stderr,
            )

        return request.untar_dir / request.chart_name
