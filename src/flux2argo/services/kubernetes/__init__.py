"""Kubernetes resource managers used by the migration."""

from flux2argo.services.kubernetes.base import K8sBaseManager
from flux2argo.services.kubernetes.flux_manager import FluxManager
from flux2argo.services.kubernetes.flux_uninstaller import FluxUninstaller
from flux2argo.services.kubernetes.object_accessor import ObjectAccessor

__all__ = [
    "FluxManager",
    "FluxUninstaller",
    "K8sBaseManager",
    "ObjectAccessor",
]
