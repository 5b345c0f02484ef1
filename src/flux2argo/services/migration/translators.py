"""Flux to Argo CD resource translation.

Pure functions: they take resources already read from the cluster and
return Argo CD descriptors. Nothing here talks to the API.
"""

from __future__ import annotations

from typing import Any, NamedTuple

import yaml

from flux2argo.integrations.kubernetes.config import MigrationConfig
from flux2argo.integrations.kubernetes.exceptions import (
    MigrationError,
    PathDerivationError,
    UnsupportedSourceError,
)
from flux2argo.integrations.kubernetes.models.argocd import (
    ApplicationDescriptor,
    ApplicationSetDescriptor,
    RepositorySecretDescriptor,
    SyncPolicy,
)
from flux2argo.integrations.kubernetes.models.flux import (
    GitRepositorySummary,
    HelmReleaseSummary,
    HelmRepositorySummary,
    KustomizationSummary,
)
from flux2argo.integrations.kubernetes.models.secrets import SourceCredentials

FLUX_SYSTEM_DIR = "flux-system"
PATH_MARKER = "./"
OCI_UNSUPPORTED = "OCI HelmRepositories are not supported"


class DirectoryGlobs(NamedTuple):
    """Include and exclude globs for a git directory generator."""

    include: str
    exclude: str


def derive_directory_globs(
    path: str,
    resource_name: str | None = None,
    namespace: str | None = None,
) -> DirectoryGlobs:
    """Map a Kustomization ``spec.path`` to directory generator globs.

    The path must start with ``./`` and hold no other ``./``. The
    repository root yields ``*`` and excludes ``flux-system``; any other
    directory yields ``<dir>/*`` and excludes ``<dir>/flux-system``.

    Args:
        path: The Kustomization path, e.g. ``./apps/team-a``.
        resource_name: Kustomization name, for error reporting.
        namespace: Kustomization namespace, for error reporting.

    Raises:
        PathDerivationError: If ``./`` is missing, repeated or not leading.
    """
    if not path.startswith(PATH_MARKER) or path.count(PATH_MARKER) != 1:
        raise PathDerivationError(path, resource_name, namespace)

    remainder = path[len(PATH_MARKER) :].rstrip("/")
    if not remainder:
        return DirectoryGlobs(include="*", exclude=FLUX_SYSTEM_DIR)
    return DirectoryGlobs(include=f"{remainder}/*", exclude=f"{remainder}/{FLUX_SYSTEM_DIR}")


def serialize_values(values: dict[str, Any]) -> str | None:
    """Serialize HelmRelease values to the YAML blob Argo CD expects.

    Returns:
        The YAML text, or None when there are no values.
    """
    if not values:
        return None
    text: str = yaml.safe_dump(values, default_flow_style=False, sort_keys=False)
    return text


def build_application_set(
    kustomization: KustomizationSummary,
    git_repository: GitRepositorySummary,
    config: MigrationConfig,
) -> ApplicationSetDescriptor:
    """Translate a Kustomization and its GitRepository into an ApplicationSet.

    Args:
        kustomization: The Flux Kustomization being replaced.
        git_repository: The GitRepository it reconciles from.
        config: Migration settings (Argo CD namespace, project, server).
    """
    if kustomization.source_kind != "GitRepository":
        raise UnsupportedSourceError(
            kustomization.source_kind,
            resource_type="Kustomization",
            resource_name=kustomization.name,
            namespace=kustomization.namespace,
        )
    globs = derive_directory_globs(
        kustomization.path, kustomization.name, kustomization.namespace
    )
    try:
        return ApplicationSetDescriptor(
            name=kustomization.name,
            namespace=config.argocd_namespace,
            project=config.project,
            repo_url=git_repository.url,
            target_revision=git_repository.revision,
            include_glob=globs.include,
            exclude_glob=globs.exclude,
            destination_server=config.destination_server,
            destination_namespace=kustomization.target_namespace,
        )
    except ValueError as e:
        raise MigrationError(
            message=f"Cannot build ApplicationSet: {e}",
            resource_type="Kustomization",
            resource_name=kustomization.name,
            namespace=kustomization.namespace,
        ) from e


def build_repository_secret(
    repo_url: str,
    credentials: SourceCredentials,
    config: MigrationConfig,
) -> RepositorySecretDescriptor:
    """Build the Argo CD repository credential Secret.

    Args:
        repo_url: URL Argo CD will clone.
        credentials: Decoded Flux source secret.
        config: Migration settings (secret name, Argo CD namespace).

    Raises:
        MigrationError: If the Flux secret holds no usable credential.
    """
    if not credentials.has_credentials:
        raise MigrationError(
            message="Secret has neither an 'identity' key nor a username/password pair",
            resource_type="Secret",
            resource_name=credentials.name,
            namespace=credentials.namespace,
        )
    return RepositorySecretDescriptor(
        name=config.credential_secret_name,
        namespace=config.argocd_namespace,
        url=repo_url,
        ssh_private_key=credentials.ssh_private_key,
        username=None if credentials.ssh_private_key else credentials.username,
        password=None if credentials.ssh_private_key else credentials.password,
    )


def build_helm_application(
    helm_release: HelmReleaseSummary,
    helm_repository: HelmRepositorySummary,
    config: MigrationConfig,
) -> ApplicationDescriptor:
    """Translate a HelmRelease and its HelmRepository into an Application.

    Args:
        helm_release: The Flux HelmRelease being replaced.
        helm_repository: The HelmRepository serving its chart.
        config: Migration settings (Argo CD namespace, project, server).
    """
    if helm_release.chart_source_kind != "HelmRepository":
        raise UnsupportedSourceError(
            helm_release.chart_source_kind,
            resource_type="HelmRelease",
            resource_name=helm_release.name,
            namespace=helm_release.namespace,
        )
    if helm_repository.is_oci:
        raise UnsupportedSourceError(
            "HelmRepository",
            resource_type="HelmRelease",
            resource_name=helm_release.name,
            namespace=helm_release.namespace,
            reason=OCI_UNSUPPORTED,
        )
    try:
        return ApplicationDescriptor(
            name=helm_release.name,
            namespace=config.argocd_namespace,
            project=config.project,
            repo_url=helm_repository.url,
            target_revision=helm_release.chart_version,
            chart=helm_release.chart_name,
            helm_values=serialize_values(helm_release.values),
            release_name=helm_release.release_name,
            destination_server=config.destination_server,
            destination_namespace=helm_release.target_namespace or helm_release.namespace,
            sync_policy=SyncPolicy(create_namespace=helm_release.create_namespace),
        )
    except ValueError as e:
        raise MigrationError(
            message=f"Cannot build Application: {e}",
            resource_type="HelmRelease",
            resource_name=helm_release.name,
            namespace=helm_release.namespace,
        ) from e
