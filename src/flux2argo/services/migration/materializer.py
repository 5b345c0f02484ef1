"""Sequential creation of generated objects."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import structlog

from flux2argo.services.migration.journal import StepAction

if TYPE_CHECKING:
    from flux2argo.services.kubernetes.object_accessor import ObjectAccessor
    from flux2argo.services.migration.journal import MigrationJournal

logger = structlog.get_logger()


class ObjectMaterializer:
    """Create objects one at a time, in the order given.

    The first failure stops the batch and propagates. Objects created
    before it are left in place and nothing is retried.
    """

    def __init__(self, objects: ObjectAccessor) -> None:
        self._objects = objects
        self._log = logger.bind(entity="materializer")

    def create_all(
        self,
        bodies: Sequence[dict[str, Any]],
        journal: MigrationJournal | None = None,
    ) -> list[dict[str, Any]]:
        """Create every body in order.

        Args:
            bodies: Object bodies, each with ``apiVersion``, ``kind`` and ``metadata``.
            journal: Records each successful create when given.

        Returns:
            The created objects as returned by the API.

        Raises:
            KubernetesError: From the first create that fails.
        """
        created: list[dict[str, Any]] = []
        for index, body in enumerate(bodies):
            metadata: dict[str, Any] = body.get("metadata", {})
            self._log.debug(
                "materializing_object",
                position=index + 1,
                total=len(bodies),
                kind=body.get("kind"),
                name=metadata.get("name"),
            )
            created.append(self._objects.create(body))
            if journal is not None:
                journal.record(
                    StepAction.CREATED,
                    str(body.get("kind", "")),
                    metadata.get("name", ""),
                    metadata.get("namespace"),
                )
        return created
