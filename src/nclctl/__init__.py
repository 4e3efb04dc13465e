"""nclctl: Non-deterministic Constraint Logic workbench."""

__version__ = "0.3.0"
