"""Unit tests for K8sBaseManager."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesConflictError,
    KubernetesNotFoundError,
)
from flux2argo.integrations.kubernetes.registry import ResourceRegistry
from flux2argo.services.kubernetes.base import K8sBaseManager
from tests.unit.services.kubernetes.conftest import api_error


class TestK8sBaseManager:
    """Tests for K8sBaseManager base class."""

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_init(self, mock_k8s_client: MagicMock, registry: ResourceRegistry) -> None:
        """Manager should keep the client and registry."""
        manager = K8sBaseManager(mock_k8s_client, registry)

        assert manager._client is mock_k8s_client
        assert manager._registry is registry
        assert manager._log is not None

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_handle_api_error_translates(
        self, mock_k8s_client: MagicMock, registry: ResourceRegistry
    ) -> None:
        """API exceptions are re-raised as KubernetesError subclasses."""
        manager = K8sBaseManager(mock_k8s_client, registry)
        original = api_error(404)

        with pytest.raises(KubernetesNotFoundError) as exc_info:
            manager._handle_api_error(original, "Kustomization", "apps", "flux-system")

        assert exc_info.value.resource_name == "apps"
        assert exc_info.value.__cause__ is original

    @pytest.mark.unit
    @pytest.mark.kubernetes
    def test_handle_api_error_passes_context(
        self, mock_k8s_client: MagicMock, registry: ResourceRegistry
    ) -> None:
        """Resource context is forwarded to the client's translation."""
        manager = K8sBaseManager(mock_k8s_client, registry)

        with pytest.raises(KubernetesConflictError):
            manager._handle_api_error(api_error(409), "HelmRelease", "podinfo", "apps")

        mock_k8s_client.translate_api_exception.assert_called_once()
        _, kwargs = mock_k8s_client.translate_api_exception.call_args
        assert kwargs == {
            "resource_type": "HelmRelease",
            "resource_name": "podinfo",
            "namespace": "apps",
        }
