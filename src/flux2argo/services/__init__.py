"""Service layer for flux2argo."""
