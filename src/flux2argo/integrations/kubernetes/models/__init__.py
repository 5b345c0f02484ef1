"""Kubernetes resource models for Flux inputs and Argo CD outputs."""

from flux2argo.integrations.kubernetes.models.argocd import (
    ApplicationDescriptor,
    ApplicationSetDescriptor,
    ArgoCDDescriptor,
    RepositorySecretDescriptor,
    SyncPolicy,
)
from flux2argo.integrations.kubernetes.models.base import K8sEntityBase
from flux2argo.integrations.kubernetes.models.flux import (
    FluxCondition,
    GitRepositorySummary,
    HelmReleaseSummary,
    HelmRepositorySummary,
    KustomizationSummary,
)
from flux2argo.integrations.kubernetes.models.secrets import SourceCredentials

__all__ = [
    "ApplicationDescriptor",
    "ApplicationSetDescriptor",
    "ArgoCDDescriptor",
    "FluxCondition",
    "GitRepositorySummary",
    "HelmReleaseSummary",
    "HelmRepositorySummary",
    "K8sEntityBase",
    "KustomizationSummary",
    "RepositorySecretDescriptor",
    "SourceCredentials",
    "SyncPolicy",
]
