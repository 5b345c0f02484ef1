"""Flux CD uninstaller.

Removes a Flux installation in four ordered phases: controllers and
their RBAC, finalizers on Flux custom resources, the Flux CRDs, and
finally the Flux namespace. A failing phase stops the teardown; the
phases already completed are not undone.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from flux2argo.integrations.kubernetes.exceptions import (
    KubernetesNotFoundError,
    UninstallError,
)
from flux2argo.integrations.kubernetes.registry import FLUX_GROUPS
from flux2argo.services.kubernetes.base import K8sBaseManager

PART_OF_LABEL = "app.kubernetes.io/part-of"
PART_OF_VALUE = "flux"
INSTANCE_LABEL = "app.kubernetes.io/instance"


@dataclass
class UninstallReport:
    """What each phase removed (or would remove on a dry run)."""

    dry_run: bool = False
    components: list[str] = field(default_factory=list)
    finalizers: list[str] = field(default_factory=list)
    crds: list[str] = field(default_factory=list)
    namespace: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Summarize the report for display."""
        return {
            "dry_run": self.dry_run,
            "components": len(self.components),
            "finalizers_removed": len(self.finalizers),
            "crds": len(self.crds),
            "namespace": self.namespace or "-",
        }


class FluxUninstaller(K8sBaseManager):
    """Four-phase Flux teardown."""

    _entity_name = "flux_uninstall"

    def uninstall(self, namespace: str, *, dry_run: bool = False) -> UninstallReport:
        """Run every phase in order.

        Args:
            namespace: Namespace Flux is installed in.
            dry_run: Issue every write as a server-side dry run.

        Returns:
            The phases' combined report.

        Raises:
            UninstallError: Naming the first phase that failed.
        """
        report = UninstallReport(dry_run=dry_run)
        phases: list[tuple[str, Callable[[], None]]] = [
            ("components", lambda: self.remove_components(namespace, report, dry_run=dry_run)),
            ("finalizers", lambda: self.remove_finalizers(report, dry_run=dry_run)),
            ("crds", lambda: self.remove_crds(report, dry_run=dry_run)),
            ("namespace", lambda: self.remove_namespace(namespace, report, dry_run=dry_run)),
        ]
        for phase, run in phases:
            self._log.info("uninstall_phase_started", phase=phase, dry_run=dry_run)
            try:
                run()
            except Exception as e:
                self._log.error("uninstall_phase_failed", phase=phase, error=str(e))
                raise UninstallError(phase, e) from e
        self._log.info("uninstalled_flux", namespace=namespace, dry_run=dry_run)
        return report

    # =========================================================================
    # Phases
    # =========================================================================

    def remove_components(
        self, namespace: str, report: UninstallReport, *, dry_run: bool = False
    ) -> None:
        """Delete the Flux controllers, their services, policies and RBAC."""
        selector = f"{PART_OF_LABEL}={PART_OF_VALUE},{INSTANCE_LABEL}={namespace}"
        kwargs = self._write_kwargs(dry_run)
        apps = self._client.apps_v1
        core = self._client.core_v1
        net = self._client.networking_v1
        rbac = self._client.rbac_v1

        namespaced: list[tuple[str, Any, Any]] = [
            ("Deployment", apps.list_namespaced_deployment, apps.delete_namespaced_deployment),
            ("Service", core.list_namespaced_service, core.delete_namespaced_service),
            (
                "NetworkPolicy",
                net.list_namespaced_network_policy,
                net.delete_namespaced_network_policy,
            ),
            (
                "ServiceAccount",
                core.list_namespaced_service_account,
                core.delete_namespaced_service_account,
            ),
        ]
        for kind, list_fn, delete_fn in namespaced:
            try:
                items = list_fn(namespace, label_selector=selector).items
                for item in items:
                    delete_fn(item.metadata.name, namespace, **kwargs)
                    report.components.append(f"{kind}/{namespace}/{item.metadata.name}")
                    self._log.info(
                        "deleted_component", kind=kind, name=item.metadata.name, dry_run=dry_run
                    )
            except Exception as e:
                self._handle_api_error(e, kind, None, namespace)

        cluster_scoped: list[tuple[str, Any, Any]] = [
            ("ClusterRole", rbac.list_cluster_role, rbac.delete_cluster_role),
            (
                "ClusterRoleBinding",
                rbac.list_cluster_role_binding,
                rbac.delete_cluster_role_binding,
            ),
        ]
        for kind, list_fn, delete_fn in cluster_scoped:
            try:
                items = list_fn(label_selector=selector).items
                for item in items:
                    delete_fn(item.metadata.name, **kwargs)
                    report.components.append(f"{kind}/{item.metadata.name}")
                    self._log.info(
                        "deleted_component", kind=kind, name=item.metadata.name, dry_run=dry_run
                    )
            except Exception as e:
                self._handle_api_error(e, kind)

    def remove_finalizers(self, report: UninstallReport, *, dry_run: bool = False) -> None:
        """Clear finalizers on every Flux custom resource in every namespace.

        Kinds whose CRD is not installed are skipped.
        """
        kwargs = self._write_kwargs(dry_run)
        custom = self._client.custom_objects
        patch: dict[str, Any] = {"metadata": {"finalizers": None}}

        for resource_kind in self._registry.in_group(*FLUX_GROUPS):
            try:
                result = custom.list_cluster_custom_object(
                    resource_kind.group, resource_kind.version, resource_kind.plural
                )
            except Exception as e:
                error = self._client.translate_api_exception(e, resource_kind.kind)
                if isinstance(error, KubernetesNotFoundError):
                    self._log.debug("skipped_missing_crd", kind=resource_kind.kind)
                    continue
                raise error from e

            for item in result.get("items", []):
                metadata: dict[str, Any] = item.get("metadata", {})
                if not metadata.get("finalizers"):
                    continue
                name = metadata.get("name", "")
                ns = metadata.get("namespace", "")
                try:
                    custom.patch_namespaced_custom_object(
                        resource_kind.group,
                        resource_kind.version,
                        ns,
                        resource_kind.plural,
                        name,
                        patch,
                        **kwargs,
                    )
                except Exception as e:
                    self._handle_api_error(e, resource_kind.kind, name, ns)
                report.finalizers.append(f"{resource_kind.kind}/{ns}/{name}")
                self._log.info(
                    "removed_finalizers", kind=resource_kind.kind, name=name, namespace=ns
                )

    def remove_crds(self, report: UninstallReport, *, dry_run: bool = False) -> None:
        """Delete the CustomResourceDefinitions installed by Flux."""
        kwargs = self._write_kwargs(dry_run)
        ext = self._client.apiextensions_v1
        try:
            crds = ext.list_custom_resource_definition(
                label_selector=f"{PART_OF_LABEL}={PART_OF_VALUE}"
            ).items
            for crd in crds:
                ext.delete_custom_resource_definition(crd.metadata.name, **kwargs)
                report.crds.append(crd.metadata.name)
                self._log.info("deleted_crd", name=crd.metadata.name, dry_run=dry_run)
        except Exception as e:
            self._handle_api_error(e, "CustomResourceDefinition")

    def remove_namespace(
        self, namespace: str, report: UninstallReport, *, dry_run: bool = False
    ) -> None:
        """Delete the Flux namespace; an already absent namespace is not an error."""
        try:
            self._client.core_v1.delete_namespace(namespace, **self._write_kwargs(dry_run))
        except Exception as e:
            error = self._client.translate_api_exception(e, "Namespace", namespace)
            if isinstance(error, KubernetesNotFoundError):
                self._log.info("namespace_already_absent", namespace=namespace)
                return
            raise error from e
        report.namespace = namespace
        self._log.info("deleted_namespace", namespace=namespace, dry_run=dry_run)

    @staticmethod
    def _write_kwargs(dry_run: bool) -> dict[str, Any]:
        return {"dry_run": "All"} if dry_run else {}
