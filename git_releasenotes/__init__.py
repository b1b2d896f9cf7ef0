"""Release notes from git history, with PR lookup and dependency update consolidation."""

__version__ = "0.1.0"
