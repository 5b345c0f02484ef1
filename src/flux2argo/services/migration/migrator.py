"""Migration of Flux Kustomizations and HelmReleases to Argo CD.

Each migration reads every input first, translates, then suspends the
Flux resource and creates the Argo CD objects, in that order. A read or
translation failure leaves the cluster untouched; a write failure
leaves the writes already made in place and reports them through the
raised error's journal.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
import yaml
from pydantic import BaseModel, Field

from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesError,
    MigrationError,
    UnsupportedSourceError,
)
from flux2argo.integrations.kubernetes.models.argocd import (
    ArgoCDDescriptor,
    RepositorySecretDescriptor,
)
from flux2argo.integrations.kubernetes.models.flux import (
    HelmReleaseSummary,
    HelmRepositorySummary,
    KustomizationSummary,
)
from flux2argo.services.migration.journal import MigrationJournal, StepAction
from flux2argo.services.migration.translators import (
    OCI_UNSUPPORTED,
    build_application_set,
    build_helm_application,
    build_repository_secret,
    derive_directory_globs,
)

if TYPE_CHECKING:
    from flux2argo.integrations.kubernetes.config import MigrationConfig
    from flux2argo.services.kubernetes.flux_manager import FluxManager
    from flux2argo.services.migration.materializer import ObjectMaterializer

logger = structlog.get_logger()


@dataclass(frozen=True)
class MigrationPlan:
    """The Argo CD objects that replace one Flux resource."""

    source: KustomizationSummary | HelmReleaseSummary
    descriptors: tuple[ArgoCDDescriptor, ...]

    @property
    def source_kind(self) -> str:
        return type(self.source).__name__.removesuffix("Summary")

    @property
    def secrets(self) -> list[RepositorySecretDescriptor]:
        return [d for d in self.descriptors if isinstance(d, RepositorySecretDescriptor)]

    def bodies(self) -> list[dict[str, Any]]:
        """Object bodies for the create API, in creation order."""
        return [d.to_k8s_object() for d in self.descriptors]

    def documents(self) -> list[dict[str, Any]]:
        """Object bodies for a manifest file.

        Secrets carry base64 ``data`` as ``kubectl apply`` expects.
        """
        return [
            d.to_k8s_object(encode=True)
            if isinstance(d, RepositorySecretDescriptor)
            else d.to_k8s_object()
            for d in self.descriptors
        ]

    def render(self) -> str:
        """Render the plan as a multi-document YAML stream."""
        return _dump_documents(self.documents())


def _dump_documents(documents: list[dict[str, Any]]) -> str:
    text: str = yaml.safe_dump_all(
        documents, default_flow_style=False, sort_keys=False, explicit_start=True
    )
    return text


def _secret_key(secret: RepositorySecretDescriptor) -> tuple[str, str]:
    return secret.namespace, secret.name


def check_secret_conflicts(plans: Iterable[MigrationPlan]) -> None:
    """Refuse plans that need one credential Secret to hold two repositories.

    Every generated Secret shares the configured name, so two private
    sources with different URLs cannot both be migrated into the same
    Argo CD namespace.

    Raises:
        MigrationError: Naming the Secret and both URLs.
    """
    urls: dict[tuple[str, str], str] = {}
    for plan in plans:
        for secret in plan.secrets:
            seen = urls.setdefault(_secret_key(secret), secret.url)
            if seen != secret.url:
                raise _secret_conflict(plan, secret, seen)


def _secret_conflict(
    plan: MigrationPlan, secret: RepositorySecretDescriptor, existing_url: str
) -> MigrationError:
    return MigrationError(
        message=(
            f"Secret '{secret.namespace}/{secret.name}' is already used for "
            f"'{existing_url}' and cannot also hold '{secret.url}'; "
            "migrate this resource with a different FLUX2ARGO_SECRET_NAME"
        ),
        resource_type=plan.source_kind,
        resource_name=plan.source.name,
        namespace=plan.source.namespace,
    )


def render_plans(plans: Sequence[MigrationPlan]) -> str:
    """Render several plans as one YAML stream.

    A credential Secret shared by several plans is written once.

    Raises:
        MigrationError: If the plans need conflicting credential Secrets.
    """
    check_secret_conflicts(plans)
    documents: list[dict[str, Any]] = []
    emitted: set[tuple[str, str]] = set()
    for plan in plans:
        for descriptor, document in zip(plan.descriptors, plan.documents(), strict=True):
            if isinstance(descriptor, RepositorySecretDescriptor):
                if _secret_key(descriptor) in emitted:
                    continue
                emitted.add(_secret_key(descriptor))
            documents.append(document)
    return _dump_documents(documents)


@dataclass
class MigrationResult:
    """Outcome of a completed migration."""

    plan: MigrationPlan
    journal: MigrationJournal
    created: list[dict[str, Any]] = field(default_factory=list)


class MigrationCandidate(BaseModel):
    """A Flux resource found on the cluster and whether it can be migrated."""

    kind: str
    name: str
    namespace: str | None = None
    source: str = ""
    suspended: bool = False
    ready: bool = False
    age: str = "Unknown"
    migratable: bool = True
    reason: str | None = Field(default=None, description="Why the resource cannot be migrated")
    resource: KustomizationSummary | HelmReleaseSummary = Field(exclude=True, repr=False)


class MigrationService:
    """Plan and apply Flux to Argo CD migrations."""

    def __init__(
        self,
        flux: FluxManager,
        materializer: ObjectMaterializer,
        config: MigrationConfig,
    ) -> None:
        self._flux = flux
        self._materializer = materializer
        self._config = config
        # (namespace, name) -> URL of each credential secret this run created
        self._created_secrets: dict[tuple[str, str], str] = {}
        self._log = logger.bind(entity="migration")

    # =========================================================================
    # Discovery (read-only)
    # =========================================================================

    def scan(self, namespace: str | None = None) -> list[MigrationCandidate]:
        """List Kustomizations and HelmReleases and check each can be translated.

        Kustomizations are judged on their own fields. HelmReleases are
        also checked against their HelmRepository, which is looked up
        cluster-wide since it may live outside the scanned namespace.
        Credential secrets are only read when a plan is built.

        Args:
            namespace: Restrict the scan to one namespace (all when None).
        """
        candidates = [
            self._assess_kustomization(ks) for ks in self._flux.list_kustomizations(namespace)
        ]
        helm_releases = self._flux.list_helm_releases(namespace)
        if helm_releases:
            repositories = {
                (repo.namespace, repo.name): repo for repo in self._flux.list_helm_repositories()
            }
            candidates.extend(self._assess_helm_release(hr, repositories) for hr in helm_releases)
        self._log.debug(
            "scanned",
            total=len(candidates),
            migratable=sum(1 for c in candidates if c.migratable),
        )
        return candidates

    def _assess_kustomization(self, kustomization: KustomizationSummary) -> MigrationCandidate:
        reason: str | None = None
        if kustomization.source_kind != "GitRepository":
            reason = f"unsupported source kind '{kustomization.source_kind or '<empty>'}'"
        else:
            try:
                derive_directory_globs(
                    kustomization.path, kustomization.name, kustomization.namespace
                )
            except MigrationError as e:
                reason = e.message
        return MigrationCandidate(
            kind="Kustomization",
            name=kustomization.name,
            namespace=kustomization.namespace,
            source=f"{kustomization.source_kind}/{kustomization.source_name}",
            suspended=kustomization.suspended,
            ready=kustomization.ready,
            age=kustomization.age,
            migratable=reason is None,
            reason=reason,
            resource=kustomization,
        )

    def _assess_helm_release(
        self,
        helm_release: HelmReleaseSummary,
        repositories: dict[tuple[str | None, str], HelmRepositorySummary],
    ) -> MigrationCandidate:
        reason: str | None = None
        if helm_release.chart_source_kind != "HelmRepository":
            source_kind = helm_release.chart_source_kind or "<empty>"
            reason = f"unsupported chart source kind '{source_kind}'"
        else:
            source_ns = helm_release.chart_source_namespace or helm_release.namespace
            repository = repositories.get((source_ns, helm_release.chart_source_name))
            # A missing repository is reported when the plan reads it
            if repository is not None and repository.is_oci:
                reason = OCI_UNSUPPORTED
        return MigrationCandidate(
            kind="HelmRelease",
            name=helm_release.name,
            namespace=helm_release.namespace,
            source=f"{helm_release.chart_source_kind}/{helm_release.chart_source_name}",
            suspended=helm_release.suspended,
            ready=helm_release.ready,
            age=helm_release.age,
            migratable=reason is None,
            reason=reason,
            resource=helm_release,
        )

    # =========================================================================
    # Planning (read-only)
    # =========================================================================

    def plan_candidate(self, candidate: MigrationCandidate) -> MigrationPlan:
        """Build the plan for a scanned resource."""
        if isinstance(candidate.resource, KustomizationSummary):
            return self.plan_for_kustomization(candidate.resource)
        return self.plan_for_helm_release(candidate.resource)

    def plan_kustomization(self, name: str, namespace: str) -> MigrationPlan:
        """Read a Kustomization and its sources and translate them.

        Args:
            name: Kustomization name.
            namespace: Kustomization namespace.

        Returns:
            A plan holding the credential Secret (for private sources)
            followed by the ApplicationSet.
        """
        kustomization = self._flux.get_kustomization(name, namespace)
        return self.plan_for_kustomization(kustomization)

    def plan_for_kustomization(self, kustomization: KustomizationSummary) -> MigrationPlan:
        """Translate an already read Kustomization."""
        if kustomization.source_kind != "GitRepository":
            raise UnsupportedSourceError(
                kustomization.source_kind,
                resource_type="Kustomization",
                resource_name=kustomization.name,
                namespace=kustomization.namespace,
            )
        source_ns = kustomization.source_namespace or kustomization.namespace
        git_repository = self._flux.get_git_repository(kustomization.source_name, source_ns)
        if not git_repository.ready:
            self._warn_not_ready("GitRepository", git_repository.name, git_repository.namespace)

        descriptors: list[ArgoCDDescriptor] = []
        if git_repository.secret_ref_name:
            secret_ns = git_repository.namespace or source_ns or ""
            try:
                credentials = self._flux.get_source_credentials(
                    git_repository.secret_ref_name, secret_ns
                )
            except KubernetesError as e:
                self._log.error(
                    "source_secret_read_failed",
                    secret=git_repository.secret_ref_name,
                    namespace=secret_ns,
                    error=str(e),
                )
                raise
            descriptors.append(
                build_repository_secret(git_repository.url, credentials, self._config)
            )

        descriptors.append(build_application_set(kustomization, git_repository, self._config))

        self._log.debug(
            "planned_kustomization",
            name=kustomization.name,
            namespace=kustomization.namespace,
            objects=len(descriptors),
        )
        return MigrationPlan(source=kustomization, descriptors=tuple(descriptors))

    def plan_helm_release(self, name: str, namespace: str) -> MigrationPlan:
        """Read a HelmRelease and its HelmRepository and translate them.

        Args:
            name: HelmRelease name.
            namespace: HelmRelease namespace.
        """
        helm_release = self._flux.get_helm_release(name, namespace)
        return self.plan_for_helm_release(helm_release)

    def plan_for_helm_release(self, helm_release: HelmReleaseSummary) -> MigrationPlan:
        """Translate an already read HelmRelease."""
        if helm_release.chart_source_kind != "HelmRepository":
            raise UnsupportedSourceError(
                helm_release.chart_source_kind,
                resource_type="HelmRelease",
                resource_name=helm_release.name,
                namespace=helm_release.namespace,
            )
        source_ns = helm_release.chart_source_namespace or helm_release.namespace
        helm_repository = self._flux.get_helm_repository(helm_release.chart_source_name, source_ns)
        if not helm_repository.ready:
            self._warn_not_ready(
                "HelmRepository", helm_repository.name, helm_repository.namespace
            )
        application = build_helm_application(helm_release, helm_repository, self._config)

        self._log.debug(
            "planned_helm_release", name=helm_release.name, namespace=helm_release.namespace
        )
        return MigrationPlan(source=helm_release, descriptors=(application,))

    # =========================================================================
    # Migration (writes)
    # =========================================================================

    def migrate_kustomization(self, name: str, namespace: str) -> MigrationResult:
        """Replace a Kustomization with an ApplicationSet on the cluster."""
        return self.apply(self.plan_kustomization(name, namespace))

    def migrate_helm_release(self, name: str, namespace: str) -> MigrationResult:
        """Replace a HelmRelease with an Application on the cluster."""
        return self.apply(self.plan_helm_release(name, namespace))

    def apply(self, plan: MigrationPlan) -> MigrationResult:
        """Suspend the plan's Flux resource, then create its objects.

        A credential Secret this run already created for the same URL is
        not created again. One created for a different URL under the same
        name makes the plan fail before anything is written.

        Raises:
            MigrationError: Carrying the journal of writes that landed.
        """
        source = plan.source
        for secret in plan.secrets:
            existing_url = self._created_secrets.get(_secret_key(secret), secret.url)
            if existing_url != secret.url:
                raise _secret_conflict(plan, secret, existing_url)

        journal = MigrationJournal(plan.source_kind, source.name, source.namespace)

        try:
            self._flux.suspend(source)
        except KubernetesError as e:
            raise self._failure(plan, journal, e) from e
        journal.record(StepAction.SUSPENDED, plan.source_kind, source.name, source.namespace)

        bodies = []
        for descriptor in plan.descriptors:
            if isinstance(descriptor, RepositorySecretDescriptor):
                if _secret_key(descriptor) in self._created_secrets:
                    self._log.info("reusing_repository_secret", url=descriptor.url)
                    continue
            bodies.append(descriptor.to_k8s_object())

        try:
            created = self._materializer.create_all(bodies, journal)
        except KubernetesError as e:
            raise self._failure(plan, journal, e) from e

        for secret in plan.secrets:
            self._created_secrets[_secret_key(secret)] = secret.url

        self._log.info(
            "migrated",
            kind=plan.source_kind,
            name=source.name,
            namespace=source.namespace,
            created=len(created),
        )
        return MigrationResult(plan=plan, journal=journal, created=created)

    def _warn_not_ready(self, kind: str, name: str, namespace: str | None) -> None:
        self._log.warning("source_not_ready", kind=kind, name=name, namespace=namespace)

    def _failure(
        self, plan: MigrationPlan, journal: MigrationJournal, error: KubernetesError
    ) -> MigrationError:
        self._log.error(
            "migration_failed",
            kind=plan.source_kind,
            name=plan.source.name,
            namespace=plan.source.namespace,
            completed=journal.describe(),
            error=str(error),
        )
        return MigrationError(
            message=f"Migration of {plan.source_kind} '{plan.source.name}' failed: {error}",
            resource_type=plan.source_kind,
            resource_name=plan.source.name,
            namespace=plan.source.namespace,
            journal=journal,
        )
