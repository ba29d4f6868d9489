"""Service layer: application-facing helpers built on the domain."""
