"""Flux to Argo CD migration services."""

from flux2argo.services.migration.journal import MigrationJournal, StepAction
from flux2argo.services.migration.materializer import ObjectMaterializer
from flux2argo.services.migration.migrator import (
    MigrationCandidate,
    MigrationPlan,
    MigrationResult,
    MigrationService,
    check_secret_conflicts,
    render_plans,
)
from flux2argo.services.migration.translators import (
    DirectoryGlobs,
    build_application_set,
    build_helm_application,
    build_repository_secret,
    derive_directory_globs,
    serialize_values,
)

__all__ = [
    "DirectoryGlobs",
    "MigrationCandidate",
    "MigrationJournal",
    "MigrationPlan",
    "MigrationResult",
    "MigrationService",
    "ObjectMaterializer",
    "StepAction",
    "build_application_set",
    "build_helm_application",
    "build_repository_secret",
    "check_secret_conflicts",
    "derive_directory_globs",
    "render_plans",
    "serialize_values",
]
