"""Migration configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_KUBECONFIG = "~/.kube/config"
DEFAULT_ARGOCD_NAMESPACE = "argocd"
DEFAULT_FLUX_NAMESPACE = "flux-system"
DEFAULT_DESTINATION_SERVER = "https://kubernetes.default.svc"
DEFAULT_CREDENTIAL_SECRET_NAME = "mta-migration"


class FluxVersionsConfig(BaseModel):
    """API versions of the Flux CRDs installed on the cluster."""

    model_config = ConfigDict(extra="forbid")

    source: str = "v1"
    kustomize: str = "v1"
    helm: str = "v2"

    @field_validator("source", "kustomize", "helm")
    @classmethod
    def validate_version(cls, v: str) -> str:
        """Validate version looks like a Kubernetes API version."""
        if not v.startswith("v"):
            raise ValueError(f"invalid API version '{v}'")
        return v


class MigrationConfig(BaseModel):
    """Complete migration configuration.

    The credential secret name is shared by every migration into the same
    Argo CD namespace, so only one migrated repository credential can live
    there under the default name.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str = Field(default=DEFAULT_KUBECONFIG, validate_default=True)
    context: str | None = None
    argocd_namespace: str = DEFAULT_ARGOCD_NAMESPACE
    flux_namespace: str = DEFAULT_FLUX_NAMESPACE
    project: str = "default"
    destination_server: str = DEFAULT_DESTINATION_SERVER
    credential_secret_name: str = DEFAULT_CREDENTIAL_SECRET_NAME
    retry_attempts: int = 3
    flux_versions: FluxVersionsConfig = FluxVersionsConfig()

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str) -> str:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser())

    @field_validator(
        "argocd_namespace",
        "flux_namespace",
        "project",
        "destination_server",
        "credential_secret_name",
    )
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Reject empty names."""
        if not v.strip():
            raise ValueError("value must not be empty")
        return v.strip()

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one attempt."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> MigrationConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            FLUX2ARGO_KUBECONFIG: Path to the kubeconfig file
            FLUX2ARGO_CONTEXT: Kubeconfig context to use
            FLUX2ARGO_ARGOCD_NAMESPACE: Namespace Argo CD runs in
            FLUX2ARGO_FLUX_NAMESPACE: Namespace Flux is installed in
            FLUX2ARGO_PROJECT: Argo CD project for generated applications
            FLUX2ARGO_SECRET_NAME: Name of the generated repository secret
            FLUX2ARGO_SOURCE_API_VERSION: API version of the Flux source CRDs
            FLUX2ARGO_KUSTOMIZE_API_VERSION: API version of the Flux Kustomization CRD
            FLUX2ARGO_HELM_API_VERSION: API version of the Flux HelmRelease CRD
        """
        config_dict = base_config.copy() if base_config else {}

        env_map = {
            "FLUX2ARGO_KUBECONFIG": "kubeconfig",
            "FLUX2ARGO_CONTEXT": "context",
            "FLUX2ARGO_ARGOCD_NAMESPACE": "argocd_namespace",
            "FLUX2ARGO_FLUX_NAMESPACE": "flux_namespace",
            "FLUX2ARGO_PROJECT": "project",
            "FLUX2ARGO_SECRET_NAME": "credential_secret_name",
        }
        for env_var, key in env_map.items():
            if value := os.environ.get(env_var):
                config_dict[key] = value

        versions_map = {
            "FLUX2ARGO_SOURCE_API_VERSION": "source",
            "FLUX2ARGO_KUSTOMIZE_API_VERSION": "kustomize",
            "FLUX2ARGO_HELM_API_VERSION": "helm",
        }
        versions = dict(config_dict.get("flux_versions") or {})
        for env_var, key in versions_map.items():
            if value := os.environ.get(env_var):
                versions[key] = value
        if versions:
            config_dict["flux_versions"] = versions

        return cls.model_validate(config_dict)

    def with_overrides(self, **overrides: Any) -> MigrationConfig:
        """Return a copy with non-None overrides applied and re-validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return MigrationConfig.model_validate(data)
