"""Base manager for Kubernetes service managers.

Provides shared infrastructure for all managers, including client
access, the resource registry, and error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import structlog

if TYPE_CHECKING:
    from flux2argo.integrations.kubernetes.client import KubernetesClient
    from flux2argo.integrations.kubernetes.registry import ResourceRegistry

logger = structlog.get_logger()


class K8sBaseManager:
    """Base class for Kubernetes service managers.

    Provides shared concerns for all managers:
    - Client and registry references
    - Structured logging with entity binding
    - Consistent API error translation

    Subclasses set ``_entity_name`` for structured log context.

    Example:
        >>> class FluxManager(K8sBaseManager):
        ...     _entity_name = "flux"
    """

    _entity_name: str = ""

    def __init__(self, client: KubernetesClient, registry: ResourceRegistry) -> None:
        """Initialize the manager.

        Args:
            client: Kubernetes API client instance.
            registry: Resource kinds the manager may address.
        """
        self._client = client
        self._registry = registry
        self._log = logger.bind(entity=self._entity_name)

    def _handle_api_error(
        self,
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> NoReturn:
        """Translate a Kubernetes API exception and re-raise.

        Args:
            e: The original exception (typically ApiException).
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Raises:
            KubernetesError: Always raises an appropriate subclass.
        """
        raise self._client.translate_api_exception(
            e,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        ) from e
