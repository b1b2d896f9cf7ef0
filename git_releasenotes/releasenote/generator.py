"""Release note generation logic."""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from . import dependencies
from .consolidator import consolidate
from .formatter import format_commit_line, format_entry_line, major_warning, render
from .models import CommitRecord, DependencyUpdate, PRReference, ReleaseNoteLine, RenderMode
from .resolver import (
    DEFAULT_WORKER_COUNT,
    MERGE_PR_FROM_RE,
    MERGE_PR_RE,
    PRResolver,
    SearchCache,
    build_merge_map,
    fan_out,
    resolve_all,
)


def is_skipped(commit: CommitRecord, skip_subjects: Iterable[str]) -> bool:
    """Check if a commit is release tooling noise that gets no note.

    Args:
        commit: Commit to check
        skip_subjects: Lower-case phrases that mark a commit as noise

    Returns:
        True if commit should be left out of the release notes
    """
    subject = commit.subject.lower()
    return any(phrase.lower() in subject for phrase in skip_subjects if phrase)


def _body_title(commit: CommitRecord) -> Optional[str]:
    for line in commit.body.splitlines():
        if line.strip():
            return line.strip()
    return None


def merge_title(commit: CommitRecord, pr: Optional[PRReference],
                titles: Optional[Mapping[int, str]] = None) -> Optional[str]:
    """Find the PR title for a ``Merge pull request #N from ...`` commit.

    GitHub puts the PR title on the first body line of merge commits;
    ``titles`` (fetched by fetch_pr_titles) covers merges with an empty body.
    """
    if not MERGE_PR_RE.match(commit.subject):
        return None

    title = _body_title(commit)
    if title is not None:
        return title

    if titles is None or pr is None:
        return None
    return titles.get(pr.number)


def titles_to_fetch(commits: Iterable[CommitRecord],
                    refs: Mapping[str, Optional[PRReference]]) -> List[int]:
    """PR numbers of merge commits whose body carries no title."""
    numbers = set()
    for commit in commits:
        pr = refs.get(commit.sha)
        if pr is not None and MERGE_PR_RE.match(commit.subject) and _body_title(commit) is None:
            numbers.add(pr.number)
    return sorted(numbers)


def fetch_pr_titles(numbers: Sequence[int], client, max_workers: int = DEFAULT_WORKER_COUNT,
                    timeout: Optional[float] = None) -> Dict[int, str]:
    """Look up PR titles concurrently, each number at most once.

    Lookups that fail or miss the deadline are left out.
    """
    def lookup(number):
        data = client.get_pull_request(number)
        if data and data.get('title'):
            return data['title'].strip()
        return None

    found = fan_out(lookup, list(numbers), max_workers=max_workers, timeout=timeout,
                    label="PR title lookup")
    return {number: title for number, title in found.items() if title}


def merged_from_bot(commit: CommitRecord, bot_authors: Iterable[str]) -> bool:
    """Check if a merge commit merged a branch pushed by an update bot."""
    match = MERGE_PR_FROM_RE.match(commit.subject)
    return bool(match) and dependencies.is_bot_author(match.group(2), bot_authors)


def build_note_lines(commits: Sequence[CommitRecord], refs: Mapping[str, Optional[PRReference]],
                     mode: RenderMode, bot_authors: Iterable[str] = dependencies.DEFAULT_BOT_AUTHORS,
                     enrich_titles: bool = True,
                     titles: Optional[Mapping[int, str]] = None) -> List[ReleaseNoteLine]:
    """Turn resolved commits into note lines.

    Dependency updates are consolidated per package; every other commit
    yields one line at its own position.

    Args:
        commits: Commits to describe (skipped commits already removed)
        refs: Result of resolve_all
        mode: Output options
        bot_authors: Author name fragments that identify update bots
        enrich_titles: Show PR titles instead of merge commit subjects
        titles: PR titles fetched for merge commits with an empty body

    Returns:
        Note lines, unsorted
    """
    lines: List[ReleaseNoteLine] = []
    updates: List[DependencyUpdate] = []

    for commit in commits:
        pr = refs.get(commit.sha)
        update = dependencies.parse(commit, pr, bot_authors)
        if update is not None:
            updates.append(update)
            continue

        title = merge_title(commit, pr, titles) if enrich_titles else None
        if title is not None:
            # A merged bot PR folds into the same entry as the bump it merged.
            update = dependencies.parse(replace(commit, subject=title, body=""), pr, bot_authors,
                                        from_bot=merged_from_bot(commit, bot_authors))
            if update is not None:
                updates.append(update)
                continue
        lines.append(ReleaseNoteLine(commit.position, format_commit_line(commit, pr, mode, subject=title)))

    for entry in consolidate(updates):
        lines.append(ReleaseNoteLine(entry.position, format_entry_line(entry, mode),
                                     major_warning(entry), dependency=True))

    return lines


def generate_release_notes(commits: Sequence[CommitRecord], mode: RenderMode,
                           client=None, config=None,
                           since_ref: Optional[str] = None) -> str:
    """Generate formatted release notes for a commit range.

    Args:
        commits: Commits in commit source order, merge commits included
        mode: Output options
        client: Code host client; asked only when the config has a token
        config: Configuration object (defaults apply when None)
        since_ref: Tag or commit the range starts from, for the header

    Returns:
        Formatted release notes string
    """
    logger = logging.getLogger(__name__)

    has_token = bool(config and config.has_token)
    max_workers = config.search_workers if config else DEFAULT_WORKER_COUNT
    timeout = config.resolve_timeout if config else None
    skip_subjects = config.skip_subjects if config else ["setting new snapshot version"]
    bot_authors = config.bot_authors if config else dependencies.DEFAULT_BOT_AUTHORS
    enrich = config.enrich_merge_titles if config else True

    merge_map = build_merge_map(commits)
    logger.debug(f"Merge map holds {len(merge_map)} branch tips")

    kept = [commit for commit in commits if not is_skipped(commit, skip_subjects)]
    if len(kept) != len(commits):
        logger.debug(f"Skipped {len(commits) - len(kept)} release tooling commits")

    resolver = PRResolver.for_client(client, has_token, SearchCache())
    if resolver.search is None:
        logger.debug("No GitHub token, code host search disabled")
    refs = resolve_all(kept, resolver, merge_map, max_workers=max_workers, timeout=timeout)

    titles: Dict[int, str] = {}
    if enrich and client is not None and has_token:
        numbers = titles_to_fetch(kept, refs)
        if numbers:
            logger.debug(f"Fetching titles for {len(numbers)} merged PRs")
            titles = fetch_pr_titles(numbers, client, max_workers=max_workers, timeout=timeout)

    lines = build_note_lines(kept, refs, mode, bot_authors, enrich, titles)
    return render(lines, mode, since_ref=since_ref, raw_commits=commits)
