"""Entry point for running kubeimport as a module.

Usage:
    python -m kubeimport [command] [options]

Example:
    python -m kubeimport import k8s@1.22.0
    python -m kubeimport import crds:=https://example.com/crds.yaml
"""

from kubeimport.cli import app

if __name__ == "__main__":
    app()
