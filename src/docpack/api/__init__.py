"""HTTP API for docpack content and visualization."""
