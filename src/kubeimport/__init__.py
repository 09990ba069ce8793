"""kubeimport - Kubernetes schema import and type-model resolution.

kubeimport ingests externally authored schema documents (the Kubernetes API
definitions, Custom Resource Definitions and Helm chart value schemas) and
resolves them into a deterministic, collision-free type model that a code
emitter turns into language-native bindings.

Core principles:
- Untrusted Input: every fetched document is sanitized before it is read
- Determinism: the same input always produces a byte-identical definition set
- Ordered Imports: import specifications run sequentially, in the order given
"""

__version__ = "0.1.0"
__author__ = "kubeimport Contributors"
