"""Root conftest so pytest imports config and timeline from the project root."""
