"""Kubernetes API client wrapper.

Wraps the official kubernetes Python client with kubeconfig loading,
lazy API group initialization, a retried connectivity check, and
consistent error translation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)

if TYPE_CHECKING:
    from kubernetes.client import (
        ApiClient,
        ApiextensionsV1Api,
        AppsV1Api,
        CoreV1Api,
        CustomObjectsApi,
        NetworkingV1Api,
        RbacAuthorizationV1Api,
        VersionApi,
    )

    from flux2argo.integrations.kubernetes.config import MigrationConfig

logger = structlog.get_logger()


class KubernetesClient:
    """Kubernetes API client for a single cluster.

    Wraps the official kubernetes Python client with:
    - kubeconfig loading with an in-cluster fallback
    - Lazy API group initialization
    - A connectivity check retried with tenacity
    - Consistent error translation to custom exceptions
    - Context manager support

    Example:
        ```python
        from flux2argo.integrations.kubernetes import KubernetesClient, MigrationConfig

        with KubernetesClient(MigrationConfig.from_env()) as client:
            client.verify_connection()
            secret = client.core_v1.read_namespaced_secret("repo", "flux-system")
        ```
    """

    def __init__(self, migration_config: MigrationConfig) -> None:
        """Initialize Kubernetes client from the migration config.

        Args:
            migration_config: Complete migration configuration.
        """
        self._config = migration_config
        self._retries = migration_config.retry_attempts
        self._current_context: str | None = None

        # Lazy-loaded API group instances
        self._api_client: ApiClient | None = None
        self._core_v1: CoreV1Api | None = None
        self._apps_v1: AppsV1Api | None = None
        self._networking_v1: NetworkingV1Api | None = None
        self._rbac_v1: RbacAuthorizationV1Api | None = None
        self._custom_objects: CustomObjectsApi | None = None
        self._apiextensions_v1: ApiextensionsV1Api | None = None
        self._version_api: VersionApi | None = None

        self._load_config()

        logger.info(
            "Kubernetes client initialized",
            context=self._current_context,
            kubeconfig=migration_config.kubeconfig,
        )

    def _load_config(self) -> None:
        """Load Kubernetes configuration from kubeconfig or in-cluster."""
        from kubernetes import config
        from kubernetes.config import ConfigException

        try:
            config.load_kube_config(
                config_file=self._config.kubeconfig,
                context=self._config.context,
            )
            self._current_context = self._config.context or "current-context"
            logger.debug(
                "loaded_kubeconfig",
                context=self._config.context,
                kubeconfig=self._config.kubeconfig,
            )
        except (ConfigException, FileNotFoundError) as kubeconfig_error:
            try:
                config.load_incluster_config()
                self._current_context = "in-cluster"
                logger.debug("loaded_incluster_config")
            except ConfigException as e:
                raise KubernetesConnectionError(
                    message=f"Cannot load Kubernetes configuration from "
                    f"'{self._config.kubeconfig}' and not running inside a cluster.",
                    original_error=kubeconfig_error,
                ) from e

        self._invalidate_api_cache()

    def _invalidate_api_cache(self) -> None:
        """Clear cached API group instances."""
        self._api_client = None
        self._core_v1 = None
        self._apps_v1 = None
        self._networking_v1 = None
        self._rbac_v1 = None
        self._custom_objects = None
        self._apiextensions_v1 = None
        self._version_api = None

    # =========================================================================
    # Lazy API Group Accessors
    # =========================================================================

    @property
    def api_client(self) -> ApiClient:
        """Get the shared ApiClient (used for serialization)."""
        if self._api_client is None:
            from kubernetes.client import ApiClient

            self._api_client = ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> CoreV1Api:
        """Get CoreV1Api instance (secrets, services, namespaces, serviceaccounts)."""
        if self._core_v1 is None:
            from kubernetes.client import CoreV1Api

            self._core_v1 = CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def apps_v1(self) -> AppsV1Api:
        """Get AppsV1Api instance (deployments)."""
        if self._apps_v1 is None:
            from kubernetes.client import AppsV1Api

            self._apps_v1 = AppsV1Api(self.api_client)
        return self._apps_v1

    @property
    def networking_v1(self) -> NetworkingV1Api:
        """Get NetworkingV1Api instance (networkpolicies)."""
        if self._networking_v1 is None:
            from kubernetes.client import NetworkingV1Api

            self._networking_v1 = NetworkingV1Api(self.api_client)
        return self._networking_v1

    @property
    def rbac_v1(self) -> RbacAuthorizationV1Api:
        """Get RbacAuthorizationV1Api instance (clusterroles, clusterrolebindings)."""
        if self._rbac_v1 is None:
            from kubernetes.client import RbacAuthorizationV1Api

            self._rbac_v1 = RbacAuthorizationV1Api(self.api_client)
        return self._rbac_v1

    @property
    def custom_objects(self) -> CustomObjectsApi:
        """Get CustomObjectsApi instance (Flux and Argo CD CRDs)."""
        if self._custom_objects is None:
            from kubernetes.client import CustomObjectsApi

            self._custom_objects = CustomObjectsApi(self.api_client)
        return self._custom_objects

    @property
    def apiextensions_v1(self) -> ApiextensionsV1Api:
        """Get ApiextensionsV1Api instance (customresourcedefinitions)."""
        if self._apiextensions_v1 is None:
            from kubernetes.client import ApiextensionsV1Api

            self._apiextensions_v1 = ApiextensionsV1Api(self.api_client)
        return self._apiextensions_v1

    @property
    def version_api(self) -> VersionApi:
        """Get VersionApi instance for cluster version info."""
        if self._version_api is None:
            from kubernetes.client import VersionApi

            self._version_api = VersionApi(self.api_client)
        return self._version_api

    def get_current_context(self) -> str:
        """Get the current context name, or 'in-cluster' inside a pod."""
        return self._current_context or "unknown"

    def sanitize(self, obj: Any) -> dict[str, Any]:
        """Convert a typed SDK object into its API (camelCase) dict form."""
        result: dict[str, Any] = self.api_client.sanitize_for_serialization(obj)
        return result

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(
        e: Exception,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> KubernetesError:
        """Translate a kubernetes ApiException to a custom exception.

        Args:
            e: The original ApiException.
            resource_type: Type of resource being operated on.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.

        Returns:
            An appropriate KubernetesError subclass.
        """
        from kubernetes.client import ApiException
        from urllib3.exceptions import HTTPError

        if isinstance(e, KubernetesError):
            return e

        if isinstance(e, HTTPError):
            return KubernetesConnectionError(
                message=f"Kubernetes API server unreachable: {e}",
                original_error=e,
            )

        if not isinstance(e, ApiException):
            return KubernetesError(
                message=str(e),
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        status = e.status

        if status in (401, 403):
            return KubernetesAuthError(
                message=e.reason or "Authentication/authorization failed",
                status_code=status,
                reason=e.reason,
            )

        if status == 404:
            return KubernetesNotFoundError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status == 409:
            return KubernetesConflictError(
                resource_type=resource_type,
                resource_name=resource_name,
                namespace=namespace,
            )

        if status in (400, 422):
            return KubernetesValidationError(
                message=e.reason or "Validation failed",
                status_code=status,
            )

        return KubernetesError(
            message=e.reason or f"Kubernetes API error: {status}",
            status_code=status,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )

    # =========================================================================
    # Connection Check
    # =========================================================================

    def make_retry_decorator(self) -> Any:
        """Create a retry decorator for transient connection errors.

        Returns:
            A tenacity retry decorator configured with exponential backoff.
        """
        return retry(
            retry=retry_if_exception_type(KubernetesConnectionError),
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            reraise=True,
        )

    def get_cluster_version(self) -> str:
        """Get the Kubernetes cluster version string.

        Raises:
            KubernetesConnectionError: If the cluster is unreachable.
        """
        try:
            version_info = self.version_api.get_code()
            return f"v{version_info.major}.{version_info.minor}"
        except Exception as e:
            raise KubernetesConnectionError(
                message="Failed to get cluster version",
                original_error=e,
            ) from e

    def verify_connection(self) -> str:
        """Check the API server answers before any migration call.

        Only this check is retried; migration reads and writes never are.

        Returns:
            The cluster version.

        Raises:
            KubernetesConnectionError: If every attempt fails.
        """
        version: str = self.make_retry_decorator()(self.get_cluster_version)()
        logger.debug("verified_connection", version=version, context=self._current_context)
        return version

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the client and release resources."""
        if self._api_client is not None:
            self._api_client.close()
        self._invalidate_api_cache()
        logger.debug("Kubernetes client closed")

    def __enter__(self) -> KubernetesClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
