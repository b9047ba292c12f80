"""Quality scoring, version tracking and reporting for markdown agent/role templates."""

__version__ = "1.0.0"
