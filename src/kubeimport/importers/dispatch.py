"""Import dispatch: map an ImportSpec to the importer that handles it.

Matchers run in a fixed order and the first match wins:

1. ``k8s`` / ``k8s@<version>``: core Kubernetes API
2. ``helm:...``: Helm chart
3. ``github:<owner>/<repo>[@version]``: schema-registry alias, rewritten to
   a registry URL and imported as CRDs
4. anything else (non-empty): a CRD manifest path or URL
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from kubeimport.config import KubeImportConfig
from kubeimport.errors import UnknownImportTypeError
from kubeimport.importers.base import Importer
from kubeimport.importers.crd import ImportCustomResourceDefinition
from kubeimport.importers.helm import ImportHelm, is_helm_locator
from kubeimport.importers.k8s import ImportKubernetesApi, match_k8s
from kubeimport.importers.registry_alias import match_registry_alias
from kubeimport.models.import_spec import ImportSpec
from kubeimport.tools.helm import HelmAdapter
from kubeimport.utils.fetch import SourceFetcher

logger = logging.getLogger(__name__)


class ImportKind(Enum):
    """The importer variants a spec can dispatch to."""

    K8S = "k8s"
    HELM = "helm"
    REGISTRY = "registry"
    CRD = "crd"


@dataclass(frozen=True)
class ImportMatch:
    """Result of matching an ImportSpec.

    Attributes:
        kind: Which importer handles the spec
        spec: Spec the importer reads (registry aliases are rewritten to URLs)
        api_version: Requested core API version (K8S only)
    """

    kind: ImportKind
    spec: ImportSpec
    api_version: str | None = None

    @property
    def is_core(self) -> bool:
        return self.kind is ImportKind.K8S


Matcher = Callable[[ImportSpec], ImportMatch | None]


class ImportDispatcher:
    """Resolves import specs to importers.

    Args:
        config: kubeimport configuration
        fetcher: Fetcher shared by all importers of a run
        helm: Helm adapter (defaults to one built from ``config.helm``)
    """

    def __init__(
        self,
        config: KubeImportConfig,
        fetcher: SourceFetcher,
        helm: HelmAdapter | None = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.helm = helm or HelmAdapter(binary=config.helm.binary, timeout=config.helm.timeout)
        self.matchers: list[Matcher] = [
            self._match_k8s,
            self._match_helm,
            self._match_registry,
            self._match_crd,
        ]

    def match(self, spec: ImportSpec) -> ImportMatch:
        """Run the matchers in order and return the first match.

        Raises:
            UnknownImportTypeError: If no matcher applies
        """
        for matcher in self.matchers:
            result = matcher(spec)
            if result is not None:
                logger.debug("Matched %s as %s import", spec.source, result.kind.value)
                return result
        raise UnknownImportTypeError(spec.source)

    def resolve(self, spec: ImportSpec) -> Importer:
        """Match ``spec`` and build its importer."""
        return self.create(self.match(spec))

    def create(self, result: ImportMatch) -> Importer:
        """Build the importer for a match.

        Fetching (CRDs) or pulling (Helm) happens here, so a returned
        importer is ready to build.
        """
        if result.kind is ImportKind.K8S:
            return ImportKubernetesApi(
                api_version=result.api_version or self.config.k8s.default_api_version,
                fetcher=self.fetcher,
                config=self.config.k8s,
            )

        if result.kind is ImportKind.HELM:
            return ImportHelm.from_spec(result.spec, self.helm)

        return ImportCustomResourceDefinition.from_spec(result.spec, self.fetcher)

    def _match_k8s(self, spec: ImportSpec) -> ImportMatch | None:
        api_version = match_k8s(spec.source, self.config.k8s.default_api_version)
        if api_version is None:
            return None
        return ImportMatch(kind=ImportKind.K8S, spec=spec, api_version=api_version)

    def _match_helm(self, spec: ImportSpec) -> ImportMatch | None:
        if not is_helm_locator(spec.source):
            return None
        return ImportMatch(kind=ImportKind.HELM, spec=spec)

    def _match_registry(self, spec: ImportSpec) -> ImportMatch | None:
        url = match_registry_alias(spec.source, self.config.registry)
        if url is None:
            return None
        rewritten = ImportSpec(source=url, module_name_prefix=spec.module_name_prefix)
        return ImportMatch(kind=ImportKind.REGISTRY, spec=rewritten)

    def _match_crd(self, spec: ImportSpec) -> ImportMatch | None:
        if not spec.source.strip():
            return None
        return ImportMatch(kind=ImportKind.CRD, spec=spec)
