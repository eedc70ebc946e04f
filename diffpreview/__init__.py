"""Preview uncommitted git changes as before/after trees in a directory diff viewer."""

__version__ = "0.1.0"
