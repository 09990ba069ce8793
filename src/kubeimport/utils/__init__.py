"""kubeimport utility modules.

- logging: Standardized logging with human/verbose/JSON modes
- fetch: Source fetching with timeout and bounded redirects
- preflight: External tool availability checks
"""

from kubeimport.utils.fetch import SourceFetcher
from kubeimport.utils.logging import get_logger, setup_logging
from kubeimport.utils.preflight import PreflightChecker, PreflightResult

__all__ = [
    "PreflightChecker",
    "PreflightResult",
    "SourceFetcher",
    "get_logger",
    "setup_logging",
]
