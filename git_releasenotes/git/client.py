"""Local git access for reading the commit range."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from ..releasenote.models import CommitRecord


FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = FIELD_SEP.join(["%H", "%P", "%an", "%s", "%b"]) + RECORD_SEP


class GitError(Exception):
    """Raised when a git command fails."""


class RangeResolutionError(GitError):
    """Raised when the start of the commit range cannot be determined."""


class GitClient:
    """Read commits and tags from a local repository."""

    def __init__(self, repo_root: Path, logger: Optional[logging.Logger] = None):
        self.repo_root = repo_root
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def discover(cls, start: Path, logger: Optional[logging.Logger] = None) -> "GitClient":
        """Create a client for the repository containing ``start``.

        Raises:
            RangeResolutionError: If ``start`` is not inside a git repository
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return cls(current, logger)
            if current.parent == current:
                raise RangeResolutionError(f"Not a git repository: {start}")
            current = current.parent

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        full_cmd = ["git"] + args
        self.logger.debug(f"Executing git command: {' '.join(full_cmd)}")
        try:
            result = subprocess.run(
                full_cmd,
                cwd=self.repo_root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding='utf-8',
                errors='replace',
            )
        except FileNotFoundError as e:
            raise GitError("git is not installed or not in PATH") from e

        if check and result.returncode != 0:
            self.logger.debug(f"git {' '.join(args)} failed: {result.stderr.strip()}")
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    def latest_tag(self) -> str:
        """Return the most recent tag reachable from HEAD.

        Raises:
            RangeResolutionError: If the repository has no reachable tags
        """
        result = self._run(["describe", "--tags", "--abbrev=0"], check=False)
        tag = result.stdout.strip()
        if result.returncode != 0 or not tag:
            raise RangeResolutionError("No tags found in repository")
        return tag

    def tag_exists(self, name: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/tags/{name}"], check=False)
        return result.returncode == 0

    def resolve_commit(self, ref: str) -> str:
        """Resolve a tag, branch or abbreviated hash to a full commit hash.

        Raises:
            RangeResolutionError: If ``ref`` does not name a commit
        """
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], check=False)
        sha = result.stdout.strip()
        if result.returncode != 0 or not sha:
            raise RangeResolutionError(f"Unknown commit or tag: {ref}")
        return sha

    def remote_url(self, remote: str = "origin") -> str:
        result = self._run(["remote", "get-url", remote], check=False)
        return result.stdout.strip() if result.returncode == 0 else ""

    def is_dirty(self) -> bool:
        """Check for uncommitted changes in the worktree or the index."""
        unstaged = self._run(["diff", "--quiet"], check=False)
        staged = self._run(["diff", "--cached", "--quiet"], check=False)
        return unstaged.returncode != 0 or staged.returncode != 0

    def fetch_tags(self, remote: str = "origin") -> bool:
        """Fetch tags from ``remote`` so the latest tag is up to date.

        Returns:
            False when the remote is not configured, True after a fetch

        Raises:
            GitError: If the fetch fails
        """
        if not self.remote_url(remote):
            self.logger.debug(f"No {remote} remote, not fetching tags")
            return False
        self._run(["fetch", remote, "--tags"])
        return True

    def commits_since(self, ref: str) -> List[CommitRecord]:
        """List commits after ``ref`` up to HEAD, newest first.

        Merge commits are included.

        Args:
            ref: Tag, branch or commit the range starts after

        Returns:
            Commit records with positions in log order
        """
        start = self.resolve_commit(ref)
        result = self._run(["log", f"--format={LOG_FORMAT}", f"{start}..HEAD"])
        return parse_log(result.stdout)


def parse_log(output: str) -> List[CommitRecord]:
    """Parse ``git log`` output produced with LOG_FORMAT."""
    commits = []
    for raw in output.split(RECORD_SEP):
        raw = raw.strip("\n")
        if not raw.strip():
            continue
        fields = raw.split(FIELD_SEP)
        if len(fields) < 5:
            continue
        sha, parents, author, subject, body = fields[:5]
        commits.append(CommitRecord(
            sha=sha.strip(),
            subject=subject,
            body=body.strip(),
            parents=tuple(parents.split()),
            author=author,
            position=len(commits),
        ))
    return commits
