"""Construction of the services a command runs against."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from flux2argo.integrations.kubernetes.client import KubernetesClient
from flux2argo.integrations.kubernetes.config import MigrationConfig
from flux2argo.integrations.kubernetes.registry import build_registry
from flux2argo.services.kubernetes import FluxManager, FluxUninstaller, ObjectAccessor
from flux2argo.services.migration import MigrationService, ObjectMaterializer

logger = structlog.get_logger()


@dataclass
class Services:
    """Everything one command invocation needs, sharing one client."""

    config: MigrationConfig
    client: KubernetesClient
    migration: MigrationService
    uninstaller: FluxUninstaller

    def close(self) -> None:
        self.client.close()


def build_services(config: MigrationConfig) -> Services:
    """Connect to the cluster and wire up the services.

    Raises:
        KubernetesConnectionError: If the kubeconfig cannot be loaded or the
            API server does not answer the connection check.
    """
    client = KubernetesClient(config)
    client.verify_connection()

    registry = build_registry(config.flux_versions)
    objects = ObjectAccessor(client, registry)
    flux = FluxManager(client, registry, objects)
    migration = MigrationService(flux, ObjectMaterializer(objects), config)

    logger.info(
        "services_ready",
        context=client.get_current_context(),
        argocd_namespace=config.argocd_namespace,
    )
    return Services(
        config=config,
        client=client,
        migration=migration,
        uninstaller=FluxUninstaller(client, registry),
    )
