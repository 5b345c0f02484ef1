"""Unit tests for generated Argo CD objects."""

from __future__ import annotations

import base64

import pytest
from pydantic import ValidationError

from flux2argo.integrations.kubernetes.models.argocd import (
    REPOSITORY_SECRET_LABEL,
    ApplicationDescriptor,
    ApplicationSetDescriptor,
    RepositorySecretDescriptor,
    SyncPolicy,
)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSyncPolicy:
    """Test SyncPolicy rendering."""

    def test_defaults(self) -> None:
        """Sync is automated with prune and self-heal."""
        assert SyncPolicy().to_k8s_object() == {"automated": {"prune": True, "selfHeal": True}}

    def test_create_namespace(self) -> None:
        """Namespace creation becomes a sync option."""
        policy = SyncPolicy(create_namespace=True).to_k8s_object()
        assert policy["syncOptions"] == ["CreateNamespace=true"]


@pytest.mark.unit
@pytest.mark.kubernetes
class TestApplicationDescriptor:
    """Test ApplicationDescriptor."""

    def test_helm_application(self) -> None:
        """A chart source renders helm options and the destination."""
        app = ApplicationDescriptor(
            name="podinfo",
            namespace="argocd",
            repo_url="https://stefanprodan.github.io/podinfo",
            target_revision="6.5.x",
            chart="podinfo",
            release_name="web",
            helm_values="replicaCount: 2\n",
            destination_namespace="apps",
        )

        obj = app.to_k8s_object()

        assert obj["apiVersion"] == "argoproj.io/v1alpha1"
        assert obj["kind"] == "Application"
        assert obj["metadata"] == {"name": "podinfo", "namespace": "argocd"}
        source = obj["spec"]["source"]
        assert source["chart"] == "podinfo"
        assert source["targetRevision"] == "6.5.x"
        assert source["helm"] == {"releaseName": "web", "values": "replicaCount: 2\n"}
        assert "path" not in source
        assert obj["spec"]["destination"] == {
            "server": "https://kubernetes.default.svc",
            "namespace": "apps",
        }
        assert obj["spec"]["project"] == "default"

    def test_chart_without_helm_options(self) -> None:
        """No helm block is rendered when there is nothing to put in it."""
        app = ApplicationDescriptor(
            name="podinfo",
            namespace="argocd",
            repo_url="https://charts.example.com",
            target_revision="*",
            chart="podinfo",
        )
        obj = app.to_k8s_object()
        assert "helm" not in obj["spec"]["source"]
        assert "namespace" not in obj["spec"]["destination"]

    def test_path_application(self) -> None:
        """A git path source renders the path."""
        app = ApplicationDescriptor(
            name="apps",
            namespace="argocd",
            repo_url="git@example.com:org/repo.git",
            target_revision="main",
            path="apps",
        )
        assert app.to_k8s_object()["spec"]["source"]["path"] == "apps"

    @pytest.mark.parametrize(
        "source",
        [{}, {"path": "apps", "chart": "podinfo"}, {"path": "apps", "release_name": "web"}],
    )
    def test_invalid_sources(self, source: dict[str, str]) -> None:
        """Exactly one source type is allowed, and helm options need a chart."""
        with pytest.raises(ValidationError):
            ApplicationDescriptor(
                name="apps", namespace="argocd", repo_url="r", target_revision="main", **source
            )

    def test_frozen(self) -> None:
        """Descriptors are immutable."""
        app = ApplicationDescriptor(
            name="apps", namespace="argocd", repo_url="r", target_revision="main", path="apps"
        )
        with pytest.raises(ValidationError):
            app.name = "other"  # type: ignore[misc]


@pytest.mark.unit
@pytest.mark.kubernetes
class TestApplicationSetDescriptor:
    """Test ApplicationSetDescriptor."""

    def test_git_directory_generator(self) -> None:
        """Directories are included by glob and the Flux bootstrap dir is excluded."""
        appset = ApplicationSetDescriptor(
            name="apps",
            namespace="argocd",
            repo_url="git@example.com:org/repo.git",
            target_revision="main",
            include_glob="apps/team-a/*",
            exclude_glob="apps/team-a/flux-system",
        )

        obj = appset.to_k8s_object()

        assert obj["kind"] == "ApplicationSet"
        git = obj["spec"]["generators"][0]["git"]
        assert git["repoURL"] == "git@example.com:org/repo.git"
        assert git["revision"] == "main"
        assert git["directories"] == [
            {"path": "apps/team-a/*"},
            {"path": "apps/team-a/flux-system", "exclude": True},
        ]
        template = obj["spec"]["template"]
        assert template["metadata"] == {"name": "{{path.basename}}"}
        assert template["spec"]["source"]["path"] == "{{path}}"
        assert template["spec"]["syncPolicy"]["automated"]["prune"] is True

    def test_requires_globs(self) -> None:
        """Both globs are mandatory."""
        with pytest.raises(ValidationError):
            ApplicationSetDescriptor(
                name="apps",
                namespace="argocd",
                repo_url="r",
                target_revision="main",
                include_glob="",
                exclude_glob="flux-system",
            )


@pytest.mark.unit
@pytest.mark.kubernetes
class TestRepositorySecretDescriptor:
    """Test RepositorySecretDescriptor."""

    def test_ssh_secret(self) -> None:
        """SSH credentials render as a labelled git repository Secret."""
        secret = RepositorySecretDescriptor(
            name="mta-migration",
            namespace="argocd",
            url="git@example.com:org/repo.git",
            ssh_private_key="KEY\n",
        )

        obj = secret.to_k8s_object()

        assert obj["apiVersion"] == "v1"
        assert obj["kind"] == "Secret"
        assert obj["type"] == "Opaque"
        assert obj["metadata"]["labels"] == {REPOSITORY_SECRET_LABEL: "repository"}
        assert obj["stringData"] == {
            "type": "git",
            "url": "git@example.com:org/repo.git",
            "sshPrivateKey": "KEY\n",
        }
        assert "data" not in obj

    def test_basic_auth_secret(self) -> None:
        """Username and password replace the SSH key."""
        secret = RepositorySecretDescriptor(
            name="mta-migration",
            namespace="argocd",
            url="https://example.com/org/repo.git",
            username="bot",
            password="s3cret",
        )
        assert secret.string_data == {
            "type": "git",
            "url": "https://example.com/org/repo.git",
            "username": "bot",
            "password": "s3cret",
        }

    def test_encoded(self) -> None:
        """encode=True emits base64 data."""
        secret = RepositorySecretDescriptor(
            name="mta-migration", namespace="argocd", url="u", ssh_private_key="KEY\n"
        )

        obj = secret.to_k8s_object(encode=True)

        assert "stringData" not in obj
        assert base64.b64decode(obj["data"]["sshPrivateKey"]) == b"KEY\n"
        assert base64.b64decode(obj["data"]["type"]) == b"git"

    def test_requires_credentials(self) -> None:
        """A secret without credentials is rejected."""
        with pytest.raises(ValidationError):
            RepositorySecretDescriptor(
                name="mta-migration", namespace="argocd", url="u", username="bot"
            )

    def test_key_hidden_from_repr(self) -> None:
        """Key material stays out of repr."""
        secret = RepositorySecretDescriptor(
            name="mta-migration", namespace="argocd", url="u", ssh_private_key="TOPSECRET"
        )
        assert "TOPSECRET" not in repr(secret)
