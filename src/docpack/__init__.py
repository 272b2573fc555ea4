"""docpack: documentation package archives and code-graph visualization."""

__version__ = "0.1.0"
