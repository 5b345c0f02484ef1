"""Unit tests for MigrationJournal."""

from __future__ import annotations

import pytest

from flux2argo.services.migration.journal import JournalEntry, MigrationJournal, StepAction


@pytest.mark.unit
class TestMigrationJournal:
    """Tests for MigrationJournal."""

    def test_empty(self) -> None:
        """A new journal records nothing."""
        journal = MigrationJournal("HelmRelease", "podinfo", "apps")
        assert journal.entries == []
        assert journal.suspended is False
        assert journal.created == []
        assert journal.describe() == []

    def test_records_in_order(self) -> None:
        """Entries keep the order writes happened in."""
        journal = MigrationJournal("Kustomization", "team-a", "flux-system")
        journal.record(StepAction.SUSPENDED, "Kustomization", "team-a", "flux-system")
        journal.record(StepAction.CREATED, "Secret", "mta-migration", "argocd")
        journal.record(StepAction.CREATED, "ApplicationSet", "team-a", "argocd")

        assert journal.suspended is True
        assert [e.kind for e in journal.created] == ["Secret", "ApplicationSet"]
        assert journal.describe() == [
            "suspended Kustomization flux-system/team-a",
            "created Secret argocd/mta-migration",
            "created ApplicationSet argocd/team-a",
        ]

    def test_entry_without_namespace(self) -> None:
        """Cluster-scoped entries print the bare name."""
        assert str(JournalEntry(StepAction.CREATED, "Namespace", "apps", None)) == (
            "created Namespace apps"
        )
