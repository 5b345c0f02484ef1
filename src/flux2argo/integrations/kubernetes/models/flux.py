"""Flux CD resource models.

Flux CRDs are accessed via ``CustomObjectsApi`` which returns raw
``dict`` objects rather than typed SDK classes.  The ``from_k8s_object``
classmethods therefore use ``dict.get()`` instead of ``getattr()``.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from flux2argo.integrations.kubernetes.models.base import (
    K8sEntityBase,
    _metadata_fields,
)


class FluxCondition(BaseModel):
    """Flux status condition from ``.status.conditions[]``."""

    model_config = ConfigDict(extra="ignore")

    type: str = Field(default="", description="Condition type (Ready, Reconciling, Stalled, etc.)")
    status: str = Field(default="Unknown", description="Condition status (True, False, Unknown)")
    reason: str = Field(default="", description="Machine-readable reason")
    message: str | None = Field(default=None, description="Human-readable message")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> FluxCondition:
        """Create from a condition dict."""
        return cls(
            type=obj.get("type", ""),
            status=obj.get("status", "Unknown"),
            reason=obj.get("reason", ""),
            message=obj.get("message"),
        )


def _is_ready(conditions: list[FluxCondition]) -> bool:
    """Determine readiness from a list of Flux conditions."""
    for c in conditions:
        if c.type == "Ready":
            return c.status == "True"
    return False


def _parse_conditions(obj: dict[str, Any]) -> list[FluxCondition]:
    """Parse ``.status.conditions`` into a list of FluxCondition."""
    status: dict[str, Any] = obj.get("status") or {}
    raw: list[dict[str, Any]] = status.get("conditions") or []
    return [FluxCondition.from_k8s_object(c) for c in raw]


# =============================================================================
# Sources
# =============================================================================


class GitRepositorySummary(K8sEntityBase):
    """Flux GitRepository model."""

    _entity_name: ClassVar[str] = "flux_git_repository"

    url: str = Field(default="", description="Git repository URL")
    ref_branch: str | None = Field(default=None, description="Branch reference")
    ref_tag: str | None = Field(default=None, description="Tag reference")
    ref_semver: str | None = Field(default=None, description="Semver range reference")
    ref_commit: str | None = Field(default=None, description="Commit SHA reference")
    secret_ref_name: str | None = Field(default=None, description="Secret reference name")
    suspended: bool = Field(default=False, description="Whether reconciliation is suspended")
    ready: bool = Field(default=False, description="Whether the resource is ready")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> GitRepositorySummary:
        """Create from a Flux GitRepository CRD dict."""
        spec: dict[str, Any] = obj.get("spec", {})
        ref: dict[str, Any] = spec.get("ref") or {}
        secret_ref: dict[str, Any] = spec.get("secretRef") or {}

        return cls(
            **_metadata_fields(obj),
            url=spec.get("url", ""),
            ref_branch=ref.get("branch"),
            ref_tag=ref.get("tag"),
            ref_semver=ref.get("semver"),
            ref_commit=ref.get("commit"),
            secret_ref_name=secret_ref.get("name"),
            suspended=spec.get("suspend", False),
            ready=_is_ready(_parse_conditions(obj)),
        )

    @property
    def revision(self) -> str:
        """Revision for Argo CD, following Flux's ref precedence.

        Flux honours commit, then semver, then tag, then branch; with no
        ref at all the remote's default branch is used, which Argo CD
        spells ``HEAD``.
        """
        return self.ref_commit or self.ref_semver or self.ref_tag or self.ref_branch or "HEAD"


class HelmRepositorySummary(K8sEntityBase):
    """Flux HelmRepository model."""

    _entity_name: ClassVar[str] = "flux_helm_repository"

    url: str = Field(default="", description="Helm repository URL")
    repo_type: str = Field(default="default", description="Repository type (default or oci)")
    secret_ref_name: str | None = Field(default=None, description="Secret reference name")
    suspended: bool = Field(default=False, description="Whether reconciliation is suspended")
    ready: bool = Field(default=False, description="Whether the resource is ready")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> HelmRepositorySummary:
        """Create from a Flux HelmRepository CRD dict."""
        spec: dict[str, Any] = obj.get("spec", {})
        secret_ref: dict[str, Any] = spec.get("secretRef") or {}

        return cls(
            **_metadata_fields(obj),
            url=spec.get("url", ""),
            repo_type=spec.get("type", "default"),
            secret_ref_name=secret_ref.get("name"),
            suspended=spec.get("suspend", False),
            ready=_is_ready(_parse_conditions(obj)),
        )

    @property
    def is_oci(self) -> bool:
        """Whether charts are pulled from an OCI registry."""
        return self.repo_type == "oci" or self.url.startswith("oci://")


# =============================================================================
# Kustomization
# =============================================================================


class KustomizationSummary(K8sEntityBase):
    """Flux Kustomization model."""

    _entity_name: ClassVar[str] = "flux_kustomization"

    source_kind: str = Field(default="", description="Source reference kind")
    source_name: str = Field(default="", description="Source reference name")
    source_namespace: str | None = Field(default=None, description="Source reference namespace")
    path: str = Field(default="./", description="Path within the source")
    target_namespace: str | None = Field(default=None, description="Target namespace override")
    suspended: bool = Field(default=False, description="Whether reconciliation is suspended")
    ready: bool = Field(default=False, description="Whether the resource is ready")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> KustomizationSummary:
        """Create from a Flux Kustomization CRD dict."""
        spec: dict[str, Any] = obj.get("spec", {})
        source_ref: dict[str, Any] = spec.get("sourceRef") or {}

        return cls(
            **_metadata_fields(obj),
            source_kind=source_ref.get("kind", ""),
            source_name=source_ref.get("name", ""),
            source_namespace=source_ref.get("namespace"),
            path=spec.get("path") or "./",
            target_namespace=spec.get("targetNamespace") or None,
            suspended=spec.get("suspend", False),
            ready=_is_ready(_parse_conditions(obj)),
        )


# =============================================================================
# HelmRelease
# =============================================================================


class HelmReleaseSummary(K8sEntityBase):
    """Flux HelmRelease model."""

    _entity_name: ClassVar[str] = "flux_helm_release"

    chart_name: str = Field(default="", description="Helm chart name")
    chart_version: str = Field(default="*", description="Chart version or semver range")
    chart_source_kind: str = Field(default="", description="Chart source reference kind")
    chart_source_name: str = Field(default="", description="Chart source reference name")
    chart_source_namespace: str | None = Field(
        default=None, description="Chart source reference namespace"
    )
    target_namespace: str | None = Field(default=None, description="Target namespace override")
    release_name: str | None = Field(default=None, description="Helm release name override")
    create_namespace: bool = Field(
        default=False, description="Whether install creates the target namespace"
    )
    values: dict[str, Any] = Field(default_factory=dict, description="Inline chart values")
    suspended: bool = Field(default=False, description="Whether reconciliation is suspended")
    ready: bool = Field(default=False, description="Whether the resource is ready")

    @classmethod
    def from_k8s_object(cls, obj: dict[str, Any]) -> HelmReleaseSummary:
        """Create from a Flux HelmRelease CRD dict."""
        spec: dict[str, Any] = obj.get("spec", {})
        chart_spec: dict[str, Any] = (spec.get("chart") or {}).get("spec") or {}
        source_ref: dict[str, Any] = chart_spec.get("sourceRef") or {}
        install: dict[str, Any] = spec.get("install") or {}

        return cls(
            **_metadata_fields(obj),
            chart_name=chart_spec.get("chart", ""),
            chart_version=chart_spec.get("version") or "*",
            chart_source_kind=source_ref.get("kind", ""),
            chart_source_name=source_ref.get("name", ""),
            chart_source_namespace=source_ref.get("namespace"),
            target_namespace=spec.get("targetNamespace") or None,
            release_name=spec.get("releaseName") or None,
            create_namespace=install.get("createNamespace", False),
            values=spec.get("values") or {},
            suspended=spec.get("suspend", False),
            ready=_is_ready(_parse_conditions(obj)),
        )
