"""Canonical type model produced by the importers.

Every importer (core API, CRD, Helm) produces these formats, and the emitter
only ever consumes a DefinitionSet built from them.

Canonical formats:
- CustomResourceDefinition: One record per (group, kind), all versions merged
- ApiObjectDefinition: An object that can appear in a manifest
- DefinitionSet: Ordered module -> definitions mapping handed to the emitter
"""

from kubeimport.models.canonical.api_object import ApiObjectDefinition, GroupVersionKind
from kubeimport.models.canonical.crd import CrdVersion, CustomResourceDefinition
from kubeimport.models.canonical.definition_set import (
    ChartDefinition,
    DataTypeDefinition,
    DefinitionSet,
    ModuleDefinitions,
    ResolvedDefinition,
)

__all__ = [
    # CRD
    "CustomResourceDefinition",
    "CrdVersion",
    # API objects
    "ApiObjectDefinition",
    "GroupVersionKind",
    # Definition set
    "DefinitionSet",
    "ModuleDefinitions",
    "ResolvedDefinition",
    "DataTypeDefinition",
    "ChartDefinition",
]
