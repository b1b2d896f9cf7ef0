"""Data types shared by the release note pipeline."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple


class PRSource(str, Enum):
    """How a pull request number was found for a commit."""

    SUBJECT = "subject-match"
    MERGE = "merge-scan"
    SEARCH = "api-search"


@dataclass(frozen=True)
class CommitRecord:
    """A single commit as read from ``git log``.

    ``position`` is the index of the commit in the order the commit source
    returned it (newest first), and is the sort key for the final output.
    """

    sha: str
    subject: str
    body: str = ""
    parents: Tuple[str, ...] = ()
    author: str = ""
    position: int = 0

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short_sha(self) -> str:
        return self.sha[:7]


@dataclass(frozen=True)
class PRReference:
    number: int
    source: PRSource

    def __post_init__(self):
        if self.number <= 0:
            raise ValueError(f"PR number must be positive, got {self.number}")


@dataclass(frozen=True)
class DependencyUpdate:
    package: str
    from_version: str
    to_version: str
    commit: CommitRecord
    pr: Optional[PRReference] = None


# Splits a version into runs of digits and runs of letters; separators are dropped.
_VERSION_PART_RE = re.compile(r'\d+|[A-Za-z]+')
_LEADING_NUMBER_RE = re.compile(r'^[vV]?(\d+)')


def version_key(version: str) -> Tuple[Tuple[int, int, str], ...]:
    """Build a sort key for a version string.

    Numeric parts compare as integers, and a release sorts above its
    pre-releases (``1.0.0`` > ``1.0.0-rc1``).
    """
    parts = []
    for part in _VERSION_PART_RE.findall(version.lstrip('vV')):
        if part.isdigit():
            parts.append((2, int(part), ''))
        else:
            parts.append((0, 0, part.lower()))
    parts.append((1, 0, ''))
    return tuple(parts)


def leading_number(version: str) -> Optional[int]:
    match = _LEADING_NUMBER_RE.match(version)
    if not match:
        return None
    return int(match.group(1))


def is_major_bump(from_version: str, to_version: str) -> bool:
    """Return True if the leading numeric component changed.

    Non-numeric leading components never count as a major bump.
    """
    old, new = leading_number(from_version), leading_number(to_version)
    if old is None or new is None:
        return False
    return old != new


@dataclass(frozen=True)
class ConsolidatedEntry:
    """All updates of one package within the processed range."""

    package: str
    from_version: str
    to_version: str
    pr_numbers: FrozenSet[int] = field(default_factory=frozenset)
    position: int = 0

    @classmethod
    def from_update(cls, update: DependencyUpdate) -> "ConsolidatedEntry":
        prs = frozenset([update.pr.number]) if update.pr else frozenset()
        return cls(
            package=update.package,
            from_version=update.from_version,
            to_version=update.to_version,
            pr_numbers=prs,
            position=update.commit.position,
        )

    @property
    def major_bump(self) -> bool:
        return is_major_bump(self.from_version, self.to_version)

    def sorted_prs(self) -> List[int]:
        return sorted(self.pr_numbers, reverse=True)


@dataclass(frozen=True)
class ReleaseNoteLine:
    position: int
    text: str
    warning: Optional[str] = None
    dependency: bool = False


@dataclass(frozen=True)
class RenderMode:
    """Output options; ``terse`` wins over everything that adds extra text."""

    terse: bool = False
    include_pr: bool = False
    include_author: bool = True
    raw_commits: bool = False
