"""Preflight validation of external tools.

Only Helm imports shell out to an external binary. ``kubeimport check``
reports whether it is installed before a chart import is attempted.
"""

import shutil
import subprocess
from dataclasses import dataclass, field
from typing import Any

from kubeimport.config import HelmConfig


@dataclass
class ToolCheck:
    """Result of checking a single tool.

    Attributes:
        name: Tool name
        available: Whether tool is available
        version: Tool version if available
        required: Whether tool is required for this run
        path: Path to executable if available
        message: Status message (human-readable context)
    """

    name: str
    available: bool
    version: str | None = None
    required: bool = True
    path: str | None = None
    message: str = ""


@dataclass
class PreflightResult:
    """Result of preflight validation.

    Attributes:
        success: Whether all required tools are available
        checks: Individual tool check results
        errors: Error messages for missing required tools
        warnings: Warning messages for missing optional tools
    """

    success: bool = True
    checks: list[ToolCheck] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def add_check(self, check: ToolCheck) -> None:
        """Add a tool check result."""
        self.checks.append(check)

        if not check.available:
            if check.required:
                self.success = False
                self.errors.append(f"Required tool not found: {check.name}")
            else:
                self.warnings.append(f"Optional tool not found: {check.name}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "success": self.success,
            "checks": [
                {
                    "name": c.name,
                    "available": c.available,
                    "version": c.version,
                    "required": c.required,
                    "path": c.path,
                    "message": c.message,
                }
                for c in self.checks
            ],
            "errors": self.errors,
            "warnings": self.warnings,
        }


class PreflightChecker:
    """Validates external tool availability.

    Usage:
        checker = PreflightChecker()
        result = checker.check_all(config.helm)
        if not result.success:
            sys.exit(1)
    """

    def __init__(self, timeout: int = 10) -> None:
        """Initialize preflight checker.

        Args:
            timeout: Timeout in seconds for version checks
        """
        self.timeout = timeout

    def check_command_available(self, command: str) -> tuple[bool, str | None]:
        """Check if a command is available in PATH.

        Returns:
            Tuple of (available, path)
        """
        path = shutil.which(command)
        return path is not None, path

    def get_command_version(
        self,
        command: str,
        version_args: list[str] | None = None,
    ) -> str | None:
        """Get version string for a command.

        Args:
            command: Command to get version for
            version_args: Arguments to get version (default: ["--version"])

        Returns:
            Version string if available, None otherwise
        """
        if version_args is None:
            version_args = ["--version"]

        try:
            result = subprocess.run(
                [command, *version_args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
            if result.returncode == 0:
                # first line carries the version
                output = result.stdout.strip() or result.stderr.strip()
                return output.split("\n")[0] if output else None
        except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
            pass
        return None

    def check_helm(self, binary: str = "helm", required: bool = False) -> ToolCheck:
        """Check if Helm is available.

        Args:
            binary: Helm executable name or path
            required: Whether Helm is required for this run
        """
        available, path = self.check_command_available(binary)

        if available:
            version = self.get_command_version(binary, ["version", "--short"])
            return ToolCheck(
                name="helm",
                available=True,
                version=version,
                required=required,
                path=path,
                message="Helm chart imports (helm:...)",
            )

        return ToolCheck(
            name="helm",
            available=False,
            required=required,
            message="Needed for helm: imports. Install from: https://helm.sh/docs/intro/install/",
        )

    def check_all(self, helm: HelmConfig | None = None, require_helm: bool = False) -> PreflightResult:
        """Run all preflight checks.

        Args:
            helm: Helm settings (binary to look for)
            require_helm: Treat a missing Helm binary as an error
        """
        helm = helm or HelmConfig()
        result = PreflightResult()
        result.add_check(self.check_helm(helm.binary, required=require_helm))
        return result
