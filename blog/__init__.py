"""Blog posts service."""
