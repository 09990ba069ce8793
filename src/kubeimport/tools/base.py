"""Abstract base class for external tool adapters.

Each adapter:
1. Invokes the external tool with appropriate arguments
2. Translates the tool's failures into ToolNotAvailableError/ToolExecutionError
3. Returns a typed result the importers consume
"""

from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

# request and result types of an adapter
R = TypeVar("R")
T = TypeVar("T")


class ToolAdapter(ABC, Generic[R, T]):
    """Abstract interface for external tools.

    Type Parameters:
        R: The request type handed to ``execute``
        T: The result type returned by ``execute``

    Attributes:
        name: Tool identifier (e.g., "helm")
        capability: What the tool is used for (e.g., "chart-pull")
        version: Tool version if available
    """

    def __init__(self, name: str, capability: str) -> None:
        """Initialize the adapter.

        Args:
            name: Tool identifier
            capability: Capability type
        """
        self.name = name
        self.capability = capability
        self._version: str | None = None

    @property
    def version(self) -> str | None:
        """Get the tool version (cached after first check)."""
        if self._version is None:
            self._version = self.get_version()
        return self._version

    @abstractmethod
    def check_available(self) -> bool:
        """Verify tool is installed and accessible."""

    @abstractmethod
    def get_version(self) -> str | None:
        """Return tool version string, or None if unavailable."""

    @abstractmethod
    def execute(self, request: R) -> T:
        """Run the tool.

        Raises:
            ToolNotAvailableError: If tool is not installed
            ToolExecutionError: If tool execution fails
        """

    def get_metadata(self) -> dict[str, Any]:
        """Get adapter metadata for logging and debugging."""
        return {
            "name": self.name,
            "capability": self.capability,
            "version": self.version,
            "available": self.check_available(),
        }


class ToolNotAvailableError(Exception):
    """Raised when a required tool is not installed or accessible."""

    def __init__(self, tool_name: str, message: str | None = None) -> None:
        self.tool_name = tool_name
        self.message = message or f"Tool not available: {tool_name}"
        super().__init__(self.message)


class ToolExecutionError(Exception):
    """Raised when a tool execution fails."""

    def __init__(
        self,
        tool_name: str,
        message: str,
        exit_code: int | None = None,
        stderr: str | None = None,
    ) -> None:
        self.tool_name = tool_name
        self.exit_code = exit_code
        self.stderr = stderr
        full_message = f"Tool execution failed: {tool_name} - {message}"
        if exit_code is not None:
            full_message += f" (exit code: {exit_code})"
        super().__init__(full_message)
