"""Untrusted document handling: sanitizing, parsing and meta-schema validation."""

from kubeimport.schema.crd_schema import CRD_KIND, CRD_SCHEMA, LIST_KIND, SUPPORTED_API_VERSIONS
from kubeimport.schema.parse import (
    collect_crds,
    safe_parse_crds,
    safe_parse_json,
    safe_parse_json_schema,
    safe_parse_yaml,
)
from kubeimport.schema.reviver import (
    STRIPPED_VALUE,
    SafeReviver,
    description_sanitizer,
    legal_char_sanitizer,
    meta_schema_sanitizer,
)
from kubeimport.schema.validator import CrdSchemaValidator

__all__ = [
    "CRD_KIND",
    "CRD_SCHEMA",
    "LIST_KIND",
    "STRIPPED_VALUE",
    "SUPPORTED_API_VERSIONS",
    "CrdSchemaValidator",
    "SafeReviver",
    "collect_crds",
    "description_sanitizer",
    "legal_char_sanitizer",
    "meta_schema_sanitizer",
    "safe_parse_crds",
    "safe_parse_json",
    "safe_parse_json_schema",
    "safe_parse_yaml",
]
