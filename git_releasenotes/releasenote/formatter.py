"""Rendering of release note lines and the final text."""

import re
from typing import List, Optional, Sequence

from .models import CommitRecord, ConsolidatedEntry, PRReference, ReleaseNoteLine, RenderMode


MAJOR_BUMP_MARKER = "⚠ MAJOR VERSION BUMP"
TITLE_LAST_RELEASE = "Last release: {ref}"
TITLE_COMMITS_SINCE = "Commits since {ref}:"
TITLE_RAW_COMMITS = "Raw commits:"
TITLE_MAJOR_WARNING = "⚠ WARNING: Major version changes detected: "
TITLE_DEPENDENCIES = "## Dependency updates:"
TITLE_OTHER_CHANGES = "## Other changes:"
RULE = "-" * 40

PR_SUFFIX_RE = re.compile(r'\s*\(#\d+\)')


def strip_pr_refs(subject: str) -> str:
    return PR_SUFFIX_RE.sub('', subject).strip()


def mentions_pr(text: str, number: int) -> bool:
    return re.search(rf'#{number}(?!\d)', text) is not None


def format_commit_line(commit: CommitRecord, pr: Optional[PRReference], mode: RenderMode,
                       subject: Optional[str] = None) -> str:
    """Render an ordinary commit as ``- <subject> (#<PR>) (<author>)``.

    Args:
        commit: Commit to render
        pr: Resolved PR reference, if any
        mode: Output options
        subject: Text to show instead of the commit subject

    Returns:
        Rendered line
    """
    text = strip_pr_refs(subject if subject is not None else commit.subject)
    if mode.include_pr and pr is not None and not mentions_pr(text, pr.number):
        text = f"{text} (#{pr.number})"
    if mode.include_author and commit.author:
        text = f"{text} ({commit.author})"
    return f"- {text}"


def format_entry_line(entry: ConsolidatedEntry, mode: RenderMode) -> str:
    """Render a consolidated dependency entry, PR numbers newest first."""
    text = f"- Updates `{entry.package}` from {entry.from_version} to {entry.to_version}"
    if mode.include_pr and entry.pr_numbers:
        prs = ", ".join(f"#{number}" for number in entry.sorted_prs())
        text = f"{text} ({prs})"
    if entry.major_bump:
        text = f"{text} {MAJOR_BUMP_MARKER}"
    return text


def major_warning(entry: ConsolidatedEntry) -> Optional[str]:
    if not entry.major_bump:
        return None
    return f"{entry.package}: {entry.from_version} → {entry.to_version}"


def render(lines: Sequence[ReleaseNoteLine], mode: RenderMode,
           since_ref: Optional[str] = None,
           raw_commits: Sequence[CommitRecord] = ()) -> str:
    """Render the final release notes text.

    Full mode puts the major version warning under the header, then a
    dependency section and a section for every other change. Both sections
    keep position order. Terse mode returns the note lines alone.

    Args:
        lines: Note lines in any order; they are sorted by position
        mode: Output options
        since_ref: Tag or commit the range starts from, for the header
        raw_commits: Every commit of the range, listed when requested

    Returns:
        Release notes text
    """
    ordered = sorted(lines, key=lambda line: line.position)

    if mode.terse:
        return '\n'.join(line.text for line in ordered)

    output: List[str] = []
    if since_ref:
        output.extend([
            TITLE_LAST_RELEASE.format(ref=since_ref),
            "",
            TITLE_COMMITS_SINCE.format(ref=since_ref),
            RULE,
        ])

    warnings = sorted(line.warning for line in ordered if line.warning)
    if warnings:
        output.extend([TITLE_MAJOR_WARNING + ", ".join(warnings), ""])

    dependencies = [line.text for line in ordered if line.dependency]
    others = [line.text for line in ordered if not line.dependency]
    sections = []
    if dependencies:
        sections.append([TITLE_DEPENDENCIES, ""] + dependencies)
    if others:
        sections.append([TITLE_OTHER_CHANGES] + others)
    for index, section in enumerate(sections):
        if index:
            output.append("")
        output.extend(section)

    if mode.raw_commits and raw_commits:
        output.extend(["", TITLE_RAW_COMMITS])
        for commit in sorted(raw_commits, key=lambda c: c.position):
            output.append(f"{commit.short_sha} {commit.subject}")

    return '\n'.join(output)
