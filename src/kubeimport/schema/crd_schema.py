"""Meta-schema for CustomResourceDefinition manifests.

Describes the subset of a CRD manifest the importer reads. Anything else in
the manifest is allowed and ignored. The schema is draft-07, matching the
shape served by ``apiextensions.k8s.io``.
"""

from typing import Any

CRD_KIND = "CustomResourceDefinition"
LIST_KIND = "List"

# all of these are compatible from the importer's point of view
SUPPORTED_API_VERSIONS = (
    "apiextensions.k8s.io/v1beta1",
    "apiextensions.k8s.io/v1",
)

_OPENAPI_SCHEMA_HOLDER: dict[str, Any] = {
    "type": "object",
    "properties": {"openAPIV3Schema": {}},
}

CRD_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "$ref": "#/definitions/ManifestObjectDefinition",
    "definitions": {
        "ManifestObjectDefinition": {
            "type": "object",
            "properties": {
                "apiVersion": {"type": "string"},
                "kind": {"type": "string"},
                "items": {
                    "type": "array",
                    "items": {"$ref": "#/definitions/ManifestObjectDefinition"},
                },
                "metadata": {
                    "type": "object",
                    "properties": {"name": {"type": "string"}},
                },
                "spec": {
                    "type": "object",
                    "properties": {
                        "group": {"type": "string"},
                        "names": {
                            "type": "object",
                            "properties": {"kind": {"type": "string"}},
                            "required": ["kind"],
                        },
                        "versions": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "properties": {
                                    "name": {"type": "string"},
                                    "schema": _OPENAPI_SCHEMA_HOLDER,
                                },
                                "required": ["name"],
                            },
                        },
                        "version": {"type": "string"},
                        "validation": _OPENAPI_SCHEMA_HOLDER,
                    },
                    "required": ["group", "names"],
                },
            },
        },
    },
}
