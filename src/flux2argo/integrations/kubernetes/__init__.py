"""Kubernetes integration - API client, configuration and resource registry."""

from flux2argo.integrations.kubernetes.client import KubernetesClient
from flux2argo.integrations.kubernetes.config import FluxVersionsConfig, MigrationConfig
from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesTimeoutError,
    KubernetesValidationError,
    MigrationError,
    PathDerivationError,
    UninstallError,
    UnsupportedSourceError,
)
from flux2argo.integrations.kubernetes.registry import (
    ResourceKind,
    ResourceRegistry,
    build_registry,
)

__all__ = [
    "FluxVersionsConfig",
    "KubernetesAuthError",
    "KubernetesClient",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "KubernetesTimeoutError",
    "KubernetesValidationError",
    "MigrationConfig",
    "MigrationError",
    "PathDerivationError",
    "ResourceKind",
    "ResourceRegistry",
    "UninstallError",
    "UnsupportedSourceError",
    "build_registry",
]
