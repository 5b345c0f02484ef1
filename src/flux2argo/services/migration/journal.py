"""Record of the cluster writes a migration has performed."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class StepAction(StrEnum):
    """Kinds of cluster writes a migration performs."""

    SUSPENDED = "suspended"
    CREATED = "created"


@dataclass(frozen=True)
class JournalEntry:
    """One completed write."""

    action: StepAction
    kind: str
    name: str
    namespace: str | None

    def __str__(self) -> str:
        location = f"{self.namespace}/{self.name}" if self.namespace else self.name
        return f"{self.action} {self.kind} {location}"


@dataclass
class MigrationJournal:
    """Ordered list of writes applied for one migrated resource.

    Suspend and create calls are not transactional; when a migration
    fails part way, the journal tells the operator which writes landed.
    """

    source_kind: str
    source_name: str
    source_namespace: str | None
    entries: list[JournalEntry] = field(default_factory=list)

    def record(
        self, action: StepAction, kind: str, name: str, namespace: str | None = None
    ) -> None:
        """Append a completed write."""
        self.entries.append(JournalEntry(action, kind, name, namespace))

    @property
    def suspended(self) -> bool:
        """Whether the Flux source resource was suspended."""
        return any(e.action is StepAction.SUSPENDED for e in self.entries)

    @property
    def created(self) -> list[JournalEntry]:
        """Objects created so far, in creation order."""
        return [e for e in self.entries if e.action is StepAction.CREATED]

    def describe(self) -> list[str]:
        """Human-readable lines, one per write."""
        return [str(e) for e in self.entries]
