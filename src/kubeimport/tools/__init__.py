"""External tool adapters."""

from kubeimport.tools.base import ToolAdapter, ToolExecutionError, ToolNotAvailableError
from kubeimport.tools.helm import HelmAdapter, HelmPullRequest

__all__ = [
    "HelmAdapter",
    "HelmPullRequest",
    "ToolAdapter",
    "ToolExecutionError",
    "ToolNotAvailableError",
]
