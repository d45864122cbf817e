"""Console client for a remote task-management API."""

__version__ = "0.1.0"
