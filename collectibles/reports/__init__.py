"""Read-only reports over the cached collection."""
