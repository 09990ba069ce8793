"""Importers: turn import sources into definition sets."""

from kubeimport.importers.base import Importer, ImportOptions
from kubeimport.importers.crd import ImportCustomResourceDefinition, build_crds, crd_from_manifest
from kubeimport.importers.dispatch import ImportDispatcher, ImportKind, ImportMatch
from kubeimport.importers.helm import ImportHelm, parse_helm_locator
from kubeimport.importers.k8s import ImportKubernetesApi
from kubeimport.importers.naming import TypeNameResolver
from kubeimport.importers.registry_alias import match_registry_alias

__all__ = [
    "ImportCustomResourceDefinition",
    "ImportDispatcher",
    "ImportHelm",
    "ImportKind",
    "ImportKubernetesApi",
    "ImportMatch",
    "ImportOptions",
    "Importer",
    "TypeNameResolver",
    "build_crds",
    "crd_from_manifest",
    "match_registry_alias",
    "parse_helm_locator",
]
