"""GitHub client wrapper using the requests library."""

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

import requests

from ..config import Config


GITHUB_REMOTE_RE = re.compile(r'github\.com[:/]([^/]+)/([^/]+?)(?:\.git)?/?$')


def parse_repo_url(remote_url: str) -> Optional[Tuple[str, str]]:
    """Extract owner and repository name from a GitHub remote URL.

    Args:
        remote_url: ``git@github.com:owner/repo.git`` or ``https://github.com/owner/repo``

    Returns:
        (owner, repo) tuple or None for non-GitHub remotes
    """
    match = GITHUB_REMOTE_RE.search(remote_url.strip())
    if not match:
        return None
    return match.group(1), match.group(2)


class GitHubClient:
    """Wrapper for the GitHub REST API."""

    def __init__(self, config: Config, owner: str, repo: str,
                 logger: Optional[logging.Logger] = None,
                 session: Optional[requests.Session] = None):
        """Initialize GitHub client.

        Args:
            config: Configuration object containing GitHub settings
            owner: Repository owner
            repo: Repository name
            logger: Logger instance
            session: HTTP session, mainly for tests
        """
        self.config = config
        self.owner = owner
        self.repo = repo
        self.logger = logger or logging.getLogger(__name__)

        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/vnd.github+json"})
        if config.github_token:
            self.session.headers["Authorization"] = f"Bearer {config.github_token}"

    @property
    def has_token(self) -> bool:
        return self.config.has_token

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.config.github_api_url}{path}"
        self.logger.debug(f"GET {url} {params or ''}")
        response = self.session.get(url, params=params, timeout=self.config.request_timeout)
        response.raise_for_status()
        return response.json()

    def search_prs_by_commit(self, sha: str) -> List[int]:
        """Search pull requests containing a commit.

        Args:
            sha: Full commit hash

        Returns:
            PR numbers, empty when none match, the request fails or there is no token
        """
        if not self.has_token:
            return []

        query = f"repo:{self.owner}/{self.repo} sha:{sha} is:pr"
        try:
            data = self._get("/search/issues", params={"q": query})
        except (requests.RequestException, ValueError) as e:
            self.logger.warning(f"Error searching PRs for commit {sha[:7]}: {e}")
            return []

        return [
            item['number']
            for item in data.get('items', [])
            if 'pull_request' in item and isinstance(item.get('number'), int)
        ]

    def get_pull_request(self, number: int) -> Optional[Dict[str, Any]]:
        """Get pull request by number.

        Args:
            number: Pull request number

        Returns:
            Pull request data as dictionary or None if not found
        """
        if not self.has_token:
            return None

        try:
            pr = self._get(f"/repos/{self.owner}/{self.repo}/pulls/{number}")
        except (requests.RequestException, ValueError) as e:
            self.logger.warning(f"Error getting pull request {number}: {e}")
            return None

        return {
            'number': pr.get('number', number),
            'title': pr.get('title') or '',
            'body': pr.get('body') or '',
            'html_url': pr.get('html_url', ''),
            'author': {
                'login': (pr.get('user') or {}).get('login', ''),
            },
            'merged_at': pr.get('merged_at'),
            'state': pr.get('state', ''),
        }
