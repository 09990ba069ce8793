"""Error taxonomy for schema imports.

Every fatal condition raised while resolving an import derives from
KubeImportError, so callers can unwind an entire import with a single
except clause. Recoverable value anomalies are never raised; the reviver
replaces them with a marker instead.
"""


class KubeImportError(Exception):
    """Base class for all fatal import errors."""


class InvalidImportSpecError(KubeImportError):
    """Raised when an import specification string cannot be parsed."""


class UnknownImportTypeError(KubeImportError):
    """Raised when no importer matches an import specification."""

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(f'unable to determine import type for "{source}"')


class InvalidManifestError(KubeImportError):
    """Raised when a CustomResourceDefinition manifest is malformed."""


class DuplicateVersionError(KubeImportError):
    """Raised when merged CRD documents declare the same version twice."""

    def __init__(self, version: str, key: str) -> None:
        self.version = version
        self.key = key
        super().__init__(f"found multiple occurrences of version {version} for {key}")


class DuplicateDefinitionError(KubeImportError):
    """Raised when two definitions resolve to one identifier in a module."""

    def __init__(self, module: str, identifier: str) -> None:
        self.module = module
        self.identifier = identifier
        super().__init__(
            f'identifier "{identifier}" is already defined in module "{module}"'
        )


class IllegalKeyError(KubeImportError):
    """Raised when a document key contains characters outside the allowed set."""

    def __init__(self, key: object, path: tuple[str, ...], pattern: str) -> None:
        self.key = key
        self.path = path
        if isinstance(key, str):
            message = f"Key '{key}' contains non standard characters (Must match regex '{pattern}')"
        else:
            message = f"Key ({key!r}) must be a string, but got '{type(key).__name__}'"
        super().__init__(message)


class DocumentParseError(KubeImportError):
    """Raised when document bytes are not valid JSON or YAML."""


class SchemaValidationError(KubeImportError):
    """Raised with every meta-schema violation found across an import."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        details = "\n".join(f" * {e}" for e in errors)
        super().__init__(f"Schema validation errors detected\n{details}")


class SourceFetchError(KubeImportError):
    """Raised when a document cannot be fetched from its source."""

    def __init__(self, source: str, message: str) -> None:
        self.source = source
        super().__init__(f"{message}: {source}")
