"""Argo CD resources generated by the migration.

These are immutable value objects: each is built once from the Flux
resources it replaces, then rendered with ``to_k8s_object()`` for the
create API or a YAML stream.
"""

from __future__ import annotations

import base64
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from flux2argo.integrations.kubernetes.config import DEFAULT_DESTINATION_SERVER
from flux2argo.integrations.kubernetes.registry import ARGOCD_GROUP, ARGOCD_VERSION

ARGOCD_API_VERSION = f"{ARGOCD_GROUP}/{ARGOCD_VERSION}"
REPOSITORY_SECRET_LABEL = "argocd.argoproj.io/secret-type"
REPOSITORY_SECRET_TYPE = "repository"

# Argo CD git directory generator placeholders, resolved by Argo CD itself
PATH_BASENAME_TOKEN = "{{path.basename}}"
PATH_TOKEN = "{{path}}"


class ArgoCDDescriptor(BaseModel):
    """Base class for generated Argo CD objects."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, description="Object name")
    namespace: str = Field(min_length=1, description="Namespace Argo CD runs in")

    kind: ClassVar[str] = ""
    api_version: ClassVar[str] = ARGOCD_API_VERSION

    def _metadata(self, **extra: Any) -> dict[str, Any]:
        return {"name": self.name, "namespace": self.namespace, **extra}

    def to_k8s_object(self) -> dict[str, Any]:
        """Render the object body for the Kubernetes API."""
        raise NotImplementedError


class SyncPolicy(BaseModel):
    """Argo CD automated sync policy."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    prune: bool = True
    self_heal: bool = True
    create_namespace: bool = False

    def to_k8s_object(self) -> dict[str, Any]:
        """Render as ``spec.syncPolicy``."""
        policy: dict[str, Any] = {
            "automated": {"prune": self.prune, "selfHeal": self.self_heal},
        }
        if self.create_namespace:
            policy["syncOptions"] = ["CreateNamespace=true"]
        return policy


# =============================================================================
# Application
# =============================================================================


class ApplicationDescriptor(ArgoCDDescriptor):
    """An Argo CD Application sourced from a Helm chart or a Git path."""

    kind: ClassVar[str] = "Application"

    project: str = "default"
    repo_url: str = Field(min_length=1)
    target_revision: str = Field(min_length=1)
    path: str | None = None
    chart: str | None = None
    helm_values: str | None = None
    release_name: str | None = None
    destination_server: str = DEFAULT_DESTINATION_SERVER
    destination_namespace: str | None = None
    sync_policy: SyncPolicy = SyncPolicy()

    @model_validator(mode="after")
    def validate_source(self) -> ApplicationDescriptor:
        """Exactly one of ``path`` or ``chart`` must be set."""
        if bool(self.path) == bool(self.chart):
            raise ValueError("an Application needs exactly one of path or chart")
        if self.path and (self.helm_values or self.release_name):
            raise ValueError("helm options require a chart source")
        return self

    def to_k8s_object(self) -> dict[str, Any]:
        """Render the Application body."""
        source: dict[str, Any] = {
            "repoURL": self.repo_url,
            "targetRevision": self.target_revision,
        }
        if self.chart:
            source["chart"] = self.chart
            helm: dict[str, Any] = {}
            if self.release_name:
                helm["releaseName"] = self.release_name
            if self.helm_values:
                helm["values"] = self.helm_values
            if helm:
                source["helm"] = helm
        else:
            source["path"] = self.path

        destination: dict[str, Any] = {"server": self.destination_server}
        if self.destination_namespace:
            destination["namespace"] = self.destination_namespace

        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self._metadata(),
            "spec": {
                "project": self.project,
                "source": source,
                "destination": destination,
                "syncPolicy": self.sync_policy.to_k8s_object(),
            },
        }


# =============================================================================
# ApplicationSet
# =============================================================================


class ApplicationSetDescriptor(ArgoCDDescriptor):
    """An ApplicationSet with a git directory generator.

    One Application is generated per directory matching ``include_glob``
    (minus ``exclude_glob``), named after the directory.
    """

    kind: ClassVar[str] = "ApplicationSet"

    project: str = "default"
    repo_url: str = Field(min_length=1)
    target_revision: str = Field(min_length=1)
    include_glob: str = Field(min_length=1)
    exclude_glob: str = Field(min_length=1)
    app_name: str = PATH_BASENAME_TOKEN
    app_path: str = PATH_TOKEN
    destination_server: str = DEFAULT_DESTINATION_SERVER
    destination_namespace: str | None = None
    sync_policy: SyncPolicy = SyncPolicy()

    def to_k8s_object(self) -> dict[str, Any]:
        """Render the ApplicationSet body."""
        destination: dict[str, Any] = {"server": self.destination_server}
        if self.destination_namespace:
            destination["namespace"] = self.destination_namespace

        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self._metadata(),
            "spec": {
                "generators": [
                    {
                        "git": {
                            "repoURL": self.repo_url,
                            "revision": self.target_revision,
                            "directories": [
                                {"path": self.include_glob},
                                {"path": self.exclude_glob, "exclude": True},
                            ],
                        },
                    },
                ],
                "template": {
                    "metadata": {"name": self.app_name},
                    "spec": {
                        "project": self.project,
                        "source": {
                            "repoURL": self.repo_url,
                            "targetRevision": self.target_revision,
                            "path": self.app_path,
                        },
                        "destination": destination,
                        "syncPolicy": self.sync_policy.to_k8s_object(),
                    },
                },
            },
        }


# =============================================================================
# Repository Secret
# =============================================================================


class RepositorySecretDescriptor(ArgoCDDescriptor):
    """An Argo CD declarative repository credential Secret."""

    kind: ClassVar[str] = "Secret"
    api_version: ClassVar[str] = "v1"

    url: str = Field(min_length=1)
    ssh_private_key: str | None = Field(default=None, repr=False)
    username: str | None = None
    password: str | None = Field(default=None, repr=False)

    @model_validator(mode="after")
    def validate_credentials(self) -> RepositorySecretDescriptor:
        """Require an SSH key or a username/password pair."""
        if not self.ssh_private_key and not (self.username and self.password):
            raise ValueError("a repository secret needs an SSH key or username and password")
        return self

    @property
    def string_data(self) -> dict[str, str]:
        """The plain-text data map."""
        data = {"type": "git", "url": self.url}
        if self.ssh_private_key:
            data["sshPrivateKey"] = self.ssh_private_key
        else:
            data["username"] = self.username or ""
            data["password"] = self.password or ""
        return data

    def to_k8s_object(self, *, encode: bool = False) -> dict[str, Any]:
        """Render the Secret body.

        Args:
            encode: Emit base64 ``data`` instead of ``stringData``.
        """
        body: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self._metadata(
                labels={REPOSITORY_SECRET_LABEL: REPOSITORY_SECRET_TYPE},
            ),
            "type": "Opaque",
        }
        if encode:
            body["data"] = {
                k: base64.b64encode(v.encode("utf-8")).decode("ascii")
                for k, v in self.string_data.items()
            }
        else:
            body["stringData"] = self.string_data
        return body
