"""Unit tests for service construction."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import MagicMock, patch

import pytest

from flux2argo.cli.factory import build_services
from flux2argo.integrations.kubernetes.config import MigrationConfig
from flux2argo.integrations.kubernetes.exceptions import KubernetesConnectionError
from flux2argo.services.kubernetes import FluxUninstaller
from flux2argo.services.migration import MigrationService


@pytest.fixture
def mock_client_class() -> Generator[MagicMock]:
    """Patch KubernetesClient in the factory."""
    with patch("flux2argo.cli.factory.KubernetesClient") as client_class:
        client_class.return_value.get_current_context.return_value = "kind-dev"
        yield client_class


@pytest.mark.unit
@pytest.mark.kubernetes
class TestBuildServices:
    """Tests for build_services."""

    def test_wires_services(self, mock_client_class: MagicMock) -> None:
        """One verified client backs every service."""
        config = MigrationConfig(argocd_namespace="gitops")

        services = build_services(config)

        mock_client_class.assert_called_once_with(config)
        mock_client_class.return_value.verify_connection.assert_called_once()
        assert services.config is config
        assert services.client is mock_client_class.return_value
        assert isinstance(services.migration, MigrationService)
        assert isinstance(services.uninstaller, FluxUninstaller)

    def test_close_closes_client(self, mock_client_class: MagicMock) -> None:
        """Closing the bundle closes the client."""
        services = build_services(MigrationConfig())

        services.close()

        mock_client_class.return_value.close.assert_called_once()

    def test_connection_failure(self, mock_client_class: MagicMock) -> None:
        """An unreachable cluster fails before any service is built."""
        mock_client_class.return_value.verify_connection.side_effect = (
            KubernetesConnectionError()
        )

        with pytest.raises(KubernetesConnectionError):
            build_services(MigrationConfig())
