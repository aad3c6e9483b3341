"""IRC network identity bridge: template-driven Matrix <-> IRC identifier mapping."""

__version__ = "0.1.0"
