"""Flux CD resource manager.

Reads Flux GitRepositories, HelmRepositories, Kustomizations and
HelmReleases (plus source credential Secrets) into typed models, and
suspends Kustomizations and HelmReleases ahead of a migration.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from flux2argo.integrations.kubernetes.exceptions import MigrationError
from flux2argo.integrations.kubernetes.models.flux import (
    GitRepositorySummary,
    HelmReleaseSummary,
    HelmRepositorySummary,
    KustomizationSummary,
)
from flux2argo.integrations.kubernetes.models.secrets import SourceCredentials
from flux2argo.services.kubernetes.base import K8sBaseManager
from flux2argo.services.kubernetes.object_accessor import ObjectAccessor

if TYPE_CHECKING:
    from flux2argo.integrations.kubernetes.client import KubernetesClient
    from flux2argo.integrations.kubernetes.registry import ResourceRegistry

# Default Flux namespace
FLUX_NAMESPACE = "flux-system"


class FluxManager(K8sBaseManager):
    """Manager for the Flux CD resources a migration reads and suspends."""

    _entity_name = "flux"

    def __init__(
        self,
        client: KubernetesClient,
        registry: ResourceRegistry,
        objects: ObjectAccessor | None = None,
    ) -> None:
        super().__init__(client, registry)
        self._objects = objects or ObjectAccessor(client, registry)

    # =========================================================================
    # Kustomization Operations
    # =========================================================================

    def get_kustomization(self, name: str, namespace: str | None = None) -> KustomizationSummary:
        """Get a single Flux Kustomization by name.

        Args:
            name: Kustomization name.
            namespace: Target namespace (defaults to flux-system).
        """
        ns = namespace or FLUX_NAMESPACE
        obj = self._objects.get("Kustomization", name, ns)
        return KustomizationSummary.from_k8s_object(obj)

    def list_kustomizations(self, namespace: str | None = None) -> list[KustomizationSummary]:
        """List Flux Kustomizations.

        Args:
            namespace: Namespace to list, or None for every namespace.
        """
        items = self._objects.list_objects("Kustomization", namespace)
        return [KustomizationSummary.from_k8s_object(item) for item in items]

    # =========================================================================
    # HelmRelease Operations
    # =========================================================================

    def get_helm_release(self, name: str, namespace: str | None = None) -> HelmReleaseSummary:
        """Get a single Flux HelmRelease by name.

        Args:
            name: HelmRelease name.
            namespace: Target namespace (defaults to flux-system).
        """
        ns = namespace or FLUX_NAMESPACE
        obj = self._objects.get("HelmRelease", name, ns)
        return HelmReleaseSummary.from_k8s_object(obj)

    def list_helm_releases(self, namespace: str | None = None) -> list[HelmReleaseSummary]:
        """List Flux HelmReleases.

        Args:
            namespace: Namespace to list, or None for every namespace.
        """
        items = self._objects.list_objects("HelmRelease", namespace)
        return [HelmReleaseSummary.from_k8s_object(item) for item in items]

    # =========================================================================
    # Source Operations
    # =========================================================================

    def get_git_repository(self, name: str, namespace: str | None = None) -> GitRepositorySummary:
        """Get a single Flux GitRepository by name."""
        ns = namespace or FLUX_NAMESPACE
        obj = self._objects.get("GitRepository", name, ns)
        return GitRepositorySummary.from_k8s_object(obj)

    def get_helm_repository(
        self, name: str, namespace: str | None = None
    ) -> HelmRepositorySummary:
        """Get a single Flux HelmRepository by name."""
        ns = namespace or FLUX_NAMESPACE
        obj = self._objects.get("HelmRepository", name, ns)
        return HelmRepositorySummary.from_k8s_object(obj)

    def list_helm_repositories(
        self, namespace: str | None = None
    ) -> list[HelmRepositorySummary]:
        """List Flux HelmRepositories.

        Args:
            namespace: Namespace to list, or None for every namespace.
        """
        items = self._objects.list_objects("HelmRepository", namespace)
        return [HelmRepositorySummary.from_k8s_object(item) for item in items]

    def get_source_credentials(self, name: str, namespace: str) -> SourceCredentials:
        """Read and decode the Secret a Flux source references.

        Args:
            name: Secret name from the source's ``secretRef``.
            namespace: Namespace of the source.

        Raises:
            KubernetesNotFoundError: If the Secret does not exist.
            MigrationError: If the Secret data cannot be decoded.
        """
        obj = self._objects.get("Secret", name, namespace)
        try:
            return SourceCredentials.from_k8s_object(obj)
        except ValueError as e:
            self._log.error("invalid_source_secret", name=name, namespace=namespace, error=str(e))
            raise MigrationError(
                message=str(e),
                resource_type="Secret",
                resource_name=name,
                namespace=namespace,
            ) from e

    # =========================================================================
    # Suspend
    # =========================================================================

    def suspend(self, resource: KustomizationSummary | HelmReleaseSummary) -> dict[str, Any]:
        """Persist ``spec.suspend: true`` on a Kustomization or HelmRelease.

        The full object read earlier is written back, so the update fails
        with a conflict if the object changed in the meantime.

        Args:
            resource: The resource as previously read.

        Returns:
            The updated object.
        """
        body = copy.deepcopy(resource.raw)
        body.setdefault("spec", {})["suspend"] = True
        kind = body.get("kind", type(resource).__name__.removesuffix("Summary"))
        body["kind"] = kind
        self._log.debug("suspending", kind=kind, name=resource.name, namespace=resource.namespace)
        result = self._objects.update(body)
        self._log.info("suspended", kind=kind, name=resource.name, namespace=resource.namespace)
        return result
