"""Resource kind registry.

Maps each resource kind the migration reads or writes to its API
coordinates. A registry is built once at start-up from the configured
Flux API versions and handed to the managers that need it.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flux2argo.integrations.kubernetes.config import FluxVersionsConfig

# API groups
CORE_GROUP = ""
SOURCE_GROUP = "source.toolkit.fluxcd.io"
KUSTOMIZE_GROUP = "kustomize.toolkit.fluxcd.io"
HELM_GROUP = "helm.toolkit.fluxcd.io"
NOTIFICATION_GROUP = "notification.toolkit.fluxcd.io"
IMAGE_GROUP = "image.toolkit.fluxcd.io"
ARGOCD_GROUP = "argoproj.io"
ARGOCD_VERSION = "v1alpha1"


@dataclass(frozen=True)
class ResourceKind:
    """API coordinates of one resource kind."""

    kind: str
    group: str
    version: str
    plural: str
    namespaced: bool = True

    @property
    def api_version(self) -> str:
        """The ``apiVersion`` string for objects of this kind."""
        if self.group == CORE_GROUP:
            return self.version
        return f"{self.group}/{self.version}"

    @property
    def is_core(self) -> bool:
        """Whether the kind is served by the core API group."""
        return self.group == CORE_GROUP


@dataclass
class ResourceRegistry:
    """Lookup table of resource kinds keyed by kind name."""

    kinds: dict[str, ResourceKind] = field(default_factory=dict)

    def register(self, resource_kind: ResourceKind) -> None:
        """Add or replace a kind."""
        self.kinds[resource_kind.kind] = resource_kind

    def get(self, kind: str) -> ResourceKind:
        """Return the coordinates for ``kind``.

        Raises:
            KeyError: If the kind is not registered.
        """
        try:
            return self.kinds[kind]
        except KeyError:
            raise KeyError(f"resource kind '{kind}' is not registered") from None

    def for_object(self, obj: dict[str, object]) -> ResourceKind:
        """Return the registered kind matching an object's ``kind`` and ``apiVersion``."""
        resource_kind = self.get(str(obj.get("kind", "")))
        api_version = obj.get("apiVersion")
        if api_version and api_version != resource_kind.api_version:
            raise KeyError(
                f"{resource_kind.kind} apiVersion '{api_version}' does not match "
                f"registered '{resource_kind.api_version}'"
            )
        return resource_kind

    def in_group(self, *groups: str) -> list[ResourceKind]:
        """Return every registered kind belonging to one of ``groups``."""
        return [k for k in self.kinds.values() if k.group in groups]

    def __contains__(self, kind: object) -> bool:
        return kind in self.kinds


FLUX_GROUPS = (SOURCE_GROUP, KUSTOMIZE_GROUP, HELM_GROUP, NOTIFICATION_GROUP, IMAGE_GROUP)


def build_registry(versions: FluxVersionsConfig | None = None) -> ResourceRegistry:
    """Build the registry of every kind used by migration and uninstall.

    Args:
        versions: Flux API versions to register; defaults to current Flux.

    Returns:
        A populated registry.
    """
    versions = versions or FluxVersionsConfig()
    registry = ResourceRegistry()

    for resource_kind in (
        # Core
        ResourceKind("Secret", CORE_GROUP, "v1", "secrets"),
        # Flux sources
        ResourceKind("GitRepository", SOURCE_GROUP, versions.source, "gitrepositories"),
        ResourceKind("HelmRepository", SOURCE_GROUP, versions.source, "helmrepositories"),
        ResourceKind("HelmChart", SOURCE_GROUP, versions.source, "helmcharts"),
        ResourceKind("Bucket", SOURCE_GROUP, versions.source, "buckets"),
        ResourceKind("OCIRepository", SOURCE_GROUP, "v1beta2", "ocirepositories"),
        # Flux appliers
        ResourceKind("Kustomization", KUSTOMIZE_GROUP, versions.kustomize, "kustomizations"),
        ResourceKind("HelmRelease", HELM_GROUP, versions.helm, "helmreleases"),
        # Flux notification and image automation
        ResourceKind("Alert", NOTIFICATION_GROUP, "v1beta3", "alerts"),
        ResourceKind("Provider", NOTIFICATION_GROUP, "v1beta3", "providers"),
        ResourceKind("Receiver", NOTIFICATION_GROUP, "v1", "receivers"),
        ResourceKind("ImageRepository", IMAGE_GROUP, "v1beta2", "imagerepositories"),
        ResourceKind("ImagePolicy", IMAGE_GROUP, "v1beta2", "imagepolicies"),
        ResourceKind("ImageUpdateAutomation", IMAGE_GROUP, "v1beta2", "imageupdateautomations"),
        # Argo CD
        ResourceKind("Application", ARGOCD_GROUP, ARGOCD_VERSION, "applications"),
        ResourceKind("ApplicationSet", ARGOCD_GROUP, ARGOCD_VERSION, "applicationsets"),
    ):
        registry.register(resource_kind)

    return registry
