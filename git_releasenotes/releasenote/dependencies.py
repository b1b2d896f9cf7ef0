"""Recognize automated dependency update commits."""

import re
from typing import Iterable, Optional

from .models import CommitRecord, DependencyUpdate, PRReference


DEFAULT_BOT_AUTHORS = ("dependabot",)

# "Bump requests from 2.31.0 to 2.32.0", "chore(deps): bump [lodash](url) from 4.17.20 to 4.17.21 in /web (#12)"
BUMP_SUBJECT_RE = re.compile(
    r'^(?:[\w-]+(?:\((?P<scope>[^)]*)\))?!?:\s*)?'
    r'bumps?\s+'
    r'(?:\[(?P<linked>[^\]]+)\]\([^)]*\)|(?P<name>\S+))'
    r'\s+from\s+(?P<from>\S+)'
    r'\s+to\s+(?P<to>\S+)'
    r'(?:\s+in\s+\S+)?'
    r'(?:\s+\(#\d+\))*\s*$',
    re.IGNORECASE,
)

# Body line of a bot commit: "Updates `requests` from 2.31.0 to 2.32.0"
UPDATES_LINE_RE = re.compile(
    r'^\s*updates\s+`(?P<name>[^`]+)`\s+from\s+(?P<from>\S+)\s+to\s+(?P<to>\S+)',
    re.IGNORECASE,
)


def _clean_version(version: str) -> str:
    # Commit prose often ends the sentence right after the version.
    return version[:-1] if version.endswith('.') else version


def is_bot_author(author: str, bot_authors: Iterable[str] = DEFAULT_BOT_AUTHORS) -> bool:
    lowered = author.lower()
    return any(bot.lower() in lowered for bot in bot_authors if bot)


def is_deps_scope(scope: Optional[str]) -> bool:
    return bool(scope) and scope.lower().startswith('deps')


def parse(commit: CommitRecord, pr: Optional[PRReference] = None,
          bot_authors: Iterable[str] = DEFAULT_BOT_AUTHORS,
          from_bot: Optional[bool] = None) -> Optional[DependencyUpdate]:
    """Parse a dependency update out of a commit.

    A bump subject counts when the commit comes from an update bot or
    carries a ``deps`` scope (``chore(deps): bump ...``), so a person's
    ``Bump version from 1.2 to 1.3`` stays an ordinary commit. For bot
    commits the body is tried next, but only when it lists exactly one
    ``Updates `pkg` ...`` line; grouped updates stay ordinary commits.

    Args:
        commit: Commit to inspect
        pr: PR reference already resolved for the commit
        bot_authors: Author name fragments that identify update bots
        from_bot: Overrides the author check, e.g. for a merged bot branch

    Returns:
        DependencyUpdate or None when the commit is not a single-package bump
    """
    if from_bot is None:
        from_bot = is_bot_author(commit.author, bot_authors)

    match = BUMP_SUBJECT_RE.match(commit.subject.strip())
    if match and (from_bot or is_deps_scope(match.group('scope'))):
        package = match.group('linked') or match.group('name')
        return DependencyUpdate(
            package=package,
            from_version=_clean_version(match.group('from')),
            to_version=_clean_version(match.group('to')),
            commit=commit,
            pr=pr,
        )

    if not from_bot:
        return None

    matches = [m for m in map(UPDATES_LINE_RE.match, commit.body.splitlines()) if m]
    packages = {m.group('name') for m in matches}
    if len(packages) != 1:
        return None

    first = matches[0]
    return DependencyUpdate(
        package=first.group('name'),
        from_version=_clean_version(first.group('from')),
        to_version=_clean_version(first.group('to')),
        commit=commit,
        pr=pr,
    )
