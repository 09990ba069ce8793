"""Structural validation of CRD manifests against the meta-schema.

Validation is delegated to ``jsonschema``. Errors from every discovered CRD
are collected and reported together; an import either fails as a whole or
all of its CRDs proceed.
"""

from collections.abc import Iterable
from typing import Any

from jsonschema import Draft7Validator

from kubeimport.errors import SchemaValidationError
from kubeimport.schema.crd_schema import CRD_SCHEMA


class CrdSchemaValidator:
    """Checks CRD manifests against CRD_SCHEMA."""

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self._validator = Draft7Validator(schema or CRD_SCHEMA)

    def validate(self, document: Any) -> list[str]:
        """Return the structural errors of a single document, in path order."""
        errors = sorted(self._validator.iter_errors(document), key=lambda e: e.json_path)
        return [f"{error.json_path}: {error.message}" for error in errors]

    def validate_all(self, documents: Iterable[Any]) -> None:
        """Validate every document and raise once with all errors.

        Raises:
            SchemaValidationError: If any document has structural errors
        """
        errors: list[str] = []
        for document in documents:
            errors.extend(self.validate(document))

        if errors:
            raise SchemaValidationError(errors)
