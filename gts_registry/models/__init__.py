"""Entity model shared across the registry."""
