"""Local git repository access."""

from .client import GitClient, GitError, RangeResolutionError, parse_log

__all__ = ["GitClient", "GitError", "RangeResolutionError", "parse_log"]
