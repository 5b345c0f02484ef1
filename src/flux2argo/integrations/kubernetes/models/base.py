"""Base models for Kubernetes resources read from the cluster."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field


class K8sEntityBase(BaseModel):
    """Base class for resources read from the cluster.

    ``raw`` keeps the object exactly as the API returned it, so it can be
    written back with an update that carries its ``resourceVersion``.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(description="Resource name")
    namespace: str | None = Field(default=None, description="Resource namespace")
    uid: str | None = Field(default=None, description="Kubernetes UID")
    resource_version: str | None = Field(default=None, description="Resource version")
    creation_timestamp: str | None = Field(default=None, description="Creation time")
    labels: dict[str, str] | None = Field(default=None, description="Resource labels")
    annotations: dict[str, str] | None = Field(default=None, description="Resource annotations")
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    _entity_name: ClassVar[str] = "entity"

    @property
    def age(self) -> str:
        """Human-readable age string."""
        if not self.creation_timestamp:
            return "Unknown"
        try:
            created = datetime.fromisoformat(self.creation_timestamp.replace("Z", "+00:00"))
            delta = datetime.now(UTC) - created
            days = delta.days
            hours, remainder = divmod(delta.seconds, 3600)
            minutes = remainder // 60
            if days > 0:
                return f"{days}d"
            if hours > 0:
                return f"{hours}h"
            return f"{minutes}m"
        except (ValueError, TypeError):
            return "Unknown"


def _metadata_fields(obj: dict[str, Any]) -> dict[str, Any]:
    """Extract the common metadata fields of a CRD dict."""
    metadata: dict[str, Any] = obj.get("metadata", {})
    return {
        "name": metadata.get("name", ""),
        "namespace": metadata.get("namespace"),
        "uid": metadata.get("uid"),
        "resource_version": metadata.get("resourceVersion"),
        "creation_timestamp": metadata.get("creationTimestamp"),
        "labels": metadata.get("labels") or None,
        "annotations": metadata.get("annotations") or None,
        "raw": obj,
    }
