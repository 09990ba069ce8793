"""kubeimport data models.

- ImportSpec: A parsed ``[NAME:=]SPEC`` import specification
- Canonical type model: CRDs, API object definitions and the definition set
"""

from kubeimport.models.canonical import (
    ApiObjectDefinition,
    ChartDefinition,
    CrdVersion,
    CustomResourceDefinition,
    DataTypeDefinition,
    DefinitionSet,
    GroupVersionKind,
    ModuleDefinitions,
    ResolvedDefinition,
)
from kubeimport.models.import_spec import ImportSpec, format_import_spec, parse_imports

__all__ = [
    "ApiObjectDefinition",
    "ChartDefinition",
    "CrdVersion",
    "CustomResourceDefinition",
    "DataTypeDefinition",
    "DefinitionSet",
    "GroupVersionKind",
    "ImportSpec",
    "ModuleDefinitions",
    "ResolvedDefinition",
    "format_import_spec",
    "parse_imports",
]
