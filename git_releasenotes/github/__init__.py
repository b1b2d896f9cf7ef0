"""GitHub API access."""

from .client import GitHubClient, parse_repo_url

__all__ = ["GitHubClient", "parse_repo_url"]
