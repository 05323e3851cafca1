"""API route modules that do not belong to a feature module."""
