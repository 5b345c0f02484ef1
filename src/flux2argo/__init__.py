"""flux2argo - migrate Flux CD resources to Argo CD."""

__version__ = "0.1.0"
