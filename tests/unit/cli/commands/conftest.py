"""Shared fixtures for CLI command tests."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from flux2argo.integrations.kubernetes.models.flux import (
    HelmReleaseSummary,
    KustomizationSummary,
)
from flux2argo.services.kubernetes.flux_uninstaller import UninstallReport
from flux2argo.services.migration import MigrationCandidate, MigrationJournal, StepAction


def make_plan(kind: str, name: str, document: str) -> MagicMock:
    """A mock MigrationPlan rendering ``document``."""
    plan = MagicMock()
    plan.source_kind = kind
    plan.source.name = name
    plan.render.return_value = document
    return plan


def make_result(kind: str, name: str, namespace: str, created: list[str]) -> MagicMock:
    """A mock MigrationResult with a filled journal."""
    journal = MigrationJournal(kind, name, namespace)
    journal.record(StepAction.SUSPENDED, kind, name, namespace)
    for created_kind in created:
        journal.record(StepAction.CREATED, created_kind, name, "argocd")
    result = MagicMock()
    result.journal = journal
    return result


def make_candidate(
    kind: str, name: str, namespace: str = "flux-system", reason: str | None = None
) -> MigrationCandidate:
    """A scanned resource."""
    resource = (
        KustomizationSummary(name=name, namespace=namespace)
        if kind == "Kustomization"
        else HelmReleaseSummary(name=name, namespace=namespace)
    )
    return MigrationCandidate(
        kind=kind,
        name=name,
        namespace=namespace,
        migratable=reason is None,
        reason=reason,
        resource=resource,
    )


@pytest.fixture
def mock_services() -> MagicMock:
    """Mock Services bundle with an empty uninstall report."""
    services = MagicMock()
    services.uninstaller.uninstall.return_value = UninstallReport()
    return services


@pytest.fixture
def get_services(mock_services: MagicMock) -> MagicMock:
    """Factory returning the mock services; records the config it was given."""
    return MagicMock(return_value=mock_services)
