"""Kind-addressed access to cluster objects.

Reads and creates objects by kind, namespace and name, and updates
custom resources. Custom resources go through ``CustomObjectsApi``; core
``Secret``s go through ``CoreV1Api``. Every object is exchanged as its API
dict form.
"""

from __future__ import annotations

from typing import Any

from flux2argo.integrations.kubernetes.registry import ResourceKind
from flux2argo.services.kubernetes.base import K8sBaseManager


class ObjectAccessor(K8sBaseManager):
    """Get, update and create objects of any registered kind.

    Each call is a single blocking API request; nothing is retried.
    """

    _entity_name = "object"

    def get(self, kind: str, name: str, namespace: str) -> dict[str, Any]:
        """Read one object.

        Args:
            kind: Registered kind name (e.g. ``GitRepository``).
            name: Object name.
            namespace: Object namespace.

        Returns:
            The object as returned by the API.
        """
        resource_kind = self._registry.get(kind)
        self._log.debug("getting_object", kind=kind, name=name, namespace=namespace)
        try:
            if resource_kind.is_core:
                return self._get_core(resource_kind, name, namespace)
            result: dict[str, Any] = self._client.custom_objects.get_namespaced_custom_object(
                resource_kind.group,
                resource_kind.version,
                namespace,
                resource_kind.plural,
                name,
            )
            return result
        except Exception as e:
            self._handle_api_error(e, kind, name, namespace)

    def list_objects(self, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        """List custom objects of a kind in one namespace or cluster-wide.

        Args:
            kind: Registered custom resource kind.
            namespace: Namespace to list, or None for all namespaces.

        Returns:
            The listed items.
        """
        resource_kind = self._registry.get(kind)
        self._log.debug("listing_objects", kind=kind, namespace=namespace or "*")
        try:
            if namespace:
                result = self._client.custom_objects.list_namespaced_custom_object(
                    resource_kind.group,
                    resource_kind.version,
                    namespace,
                    resource_kind.plural,
                )
            else:
                result = self._client.custom_objects.list_cluster_custom_object(
                    resource_kind.group,
                    resource_kind.version,
                    resource_kind.plural,
                )
            items: list[dict[str, Any]] = result.get("items", [])
            self._log.debug("listed_objects", kind=kind, count=len(items))
            return items
        except Exception as e:
            self._handle_api_error(e, kind, None, namespace)

    def update(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Replace a custom object with ``obj``.

        The body carries the ``resourceVersion`` it was read with, so a
        concurrent modification is rejected with a conflict.

        Args:
            obj: Full object body including ``kind`` and ``metadata``.

        Returns:
            The updated object.
        """
        resource_kind, name, namespace = self._identify(obj)
        self._log.debug("updating_object", kind=resource_kind.kind, name=name, namespace=namespace)
        try:
            result: dict[str, Any] = self._client.custom_objects.replace_namespaced_custom_object(
                resource_kind.group,
                resource_kind.version,
                namespace,
                resource_kind.plural,
                name,
                obj,
            )
            self._log.info(
                "updated_object", kind=resource_kind.kind, name=name, namespace=namespace
            )
            return result
        except Exception as e:
            self._handle_api_error(e, resource_kind.kind, name, namespace)

    def create(self, obj: dict[str, Any]) -> dict[str, Any]:
        """Create ``obj`` on the cluster.

        Args:
            obj: Full object body including ``apiVersion``, ``kind`` and ``metadata``.

        Returns:
            The created object.
        """
        resource_kind, name, namespace = self._identify(obj)
        self._log.debug("creating_object", kind=resource_kind.kind, name=name, namespace=namespace)
        try:
            if resource_kind.is_core:
                result = self._client.sanitize(
                    self._client.core_v1.create_namespaced_secret(namespace, obj)
                )
            else:
                result = self._client.custom_objects.create_namespaced_custom_object(
                    resource_kind.group,
                    resource_kind.version,
                    namespace,
                    resource_kind.plural,
                    obj,
                )
            self._log.info(
                "created_object", kind=resource_kind.kind, name=name, namespace=namespace
            )
            return result
        except Exception as e:
            self._handle_api_error(e, resource_kind.kind, name, namespace)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_core(self, resource_kind: ResourceKind, name: str, namespace: str) -> dict[str, Any]:
        if resource_kind.kind != "Secret":
            raise KeyError(f"core kind '{resource_kind.kind}' is not supported")
        secret = self._client.core_v1.read_namespaced_secret(name, namespace)
        return self._client.sanitize(secret)

    def _identify(self, obj: dict[str, Any]) -> tuple[ResourceKind, str, str]:
        metadata: dict[str, Any] = obj.get("metadata", {})
        resource_kind = self._registry.for_object(obj)
        return resource_kind, metadata.get("name", ""), metadata.get("namespace", "")
