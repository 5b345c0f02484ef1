"""Shared fixtures for Kubernetes service tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from kubernetes.client import ApiException

from flux2argo.integrations.kubernetes.client import KubernetesClient
from flux2argo.integrations.kubernetes.registry import ResourceRegistry, build_registry


@pytest.fixture
def mock_k8s_client() -> MagicMock:
    """Create a mock Kubernetes client with API sub-mocks.

    Error translation is the real one, and ``sanitize`` passes dicts
    through unchanged.
    """
    mock_client = MagicMock()
    mock_client.translate_api_exception.side_effect = KubernetesClient.translate_api_exception
    mock_client.sanitize.side_effect = lambda obj: obj
    return mock_client


@pytest.fixture
def registry() -> ResourceRegistry:
    """A registry with the default Flux and Argo CD kinds."""
    return build_registry()


def api_error(status: int, reason: str = "") -> ApiException:
    """Build an ApiException with the given status."""
    return ApiException(status=status, reason=reason)


def k8s_item(name: str) -> MagicMock:
    """A typed-client list item with ``metadata.name`` set."""
    item = MagicMock()
    item.metadata.name = name
    return item


def flux_object(
    kind: str, name: str, namespace: str = "flux-system", **spec: Any
) -> dict[str, Any]:
    """A Flux custom object in API dict form."""
    groups = {
        "Kustomization": "kustomize.toolkit.fluxcd.io/v1",
        "HelmRelease": "helm.toolkit.fluxcd.io/v2",
        "GitRepository": "source.toolkit.fluxcd.io/v1",
        "HelmRepository": "source.toolkit.fluxcd.io/v1",
    }
    return {
        "apiVersion": groups[kind],
        "kind": kind,
        "metadata": {"name": name, "namespace": namespace, "resourceVersion": "100"},
        "spec": spec,
    }
