"""Unit tests for the shared entity base model."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from flux2argo.integrations.kubernetes.models.base import K8sEntityBase, _metadata_fields


def _timestamp(delta: timedelta) -> str:
    return (datetime.now(UTC) - delta).strftime("%Y-%m-%dT%H:%M:%SZ")


@pytest.mark.unit
@pytest.mark.kubernetes
class TestMetadataFields:
    """Test _metadata_fields extraction."""

    def test_extracts_metadata(self) -> None:
        """Metadata keys map to model fields and raw keeps the object."""
        obj = {
            "metadata": {
                "name": "apps",
                "namespace": "flux-system",
                "uid": "abc-123",
                "resourceVersion": "42",
                "creationTimestamp": "2026-01-01T00:00:00Z",
                "labels": {"team": "platform"},
            },
        }

        fields = _metadata_fields(obj)

        assert fields["name"] == "apps"
        assert fields["namespace"] == "flux-system"
        assert fields["resource_version"] == "42"
        assert fields["labels"] == {"team": "platform"}
        assert fields["annotations"] is None
        assert fields["raw"] is obj

    def test_missing_metadata(self) -> None:
        """An object without metadata yields empty defaults."""
        fields = _metadata_fields({})
        assert fields["name"] == ""
        assert fields["namespace"] is None


@pytest.mark.unit
@pytest.mark.kubernetes
class TestK8sEntityBase:
    """Test K8sEntityBase behavior."""

    def test_raw_is_excluded_from_dump(self) -> None:
        """The raw API object never appears in output."""
        entity = K8sEntityBase(name="apps", raw={"spec": {"secret": "x"}})
        assert "raw" not in entity.model_dump()

    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(days=3, hours=2), "3d"),
            (timedelta(hours=5, minutes=10), "5h"),
            (timedelta(minutes=7), "7m"),
        ],
    )
    def test_age(self, delta: timedelta, expected: str) -> None:
        """Age is reported in its largest unit."""
        entity = K8sEntityBase(name="apps", creation_timestamp=_timestamp(delta))
        assert entity.age == expected

    @pytest.mark.parametrize("timestamp", [None, "yesterday"])
    def test_age_unknown(self, timestamp: str | None) -> None:
        """Missing or malformed timestamps give an unknown age."""
        assert K8sEntityBase(name="apps", creation_timestamp=timestamp).age == "Unknown"
