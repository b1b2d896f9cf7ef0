"""Merge dependency updates of the same package into one entry."""

from typing import Dict, Iterable, List, Union

from .models import ConsolidatedEntry, DependencyUpdate, version_key


def merge_entries(current: ConsolidatedEntry, other: ConsolidatedEntry) -> ConsolidatedEntry:
    """Fold ``other`` into ``current``.

    The span is widened by comparing versions, not by trusting commit
    order: history can list a newer bump before an older one.
    """
    from_version = current.from_version
    if version_key(other.from_version) < version_key(from_version):
        from_version = other.from_version

    to_version = current.to_version
    if version_key(other.to_version) > version_key(to_version):
        to_version = other.to_version

    return ConsolidatedEntry(
        package=current.package,
        from_version=from_version,
        to_version=to_version,
        pr_numbers=current.pr_numbers | other.pr_numbers,
        position=min(current.position, other.position),
    )


def consolidate(updates: Iterable[Union[DependencyUpdate, ConsolidatedEntry]]) -> List[ConsolidatedEntry]:
    """Group updates by package, keeping the order packages were first seen.

    Already consolidated entries are accepted too, so consolidating a
    consolidated list returns it unchanged.

    Args:
        updates: Dependency updates (or entries) in commit source order

    Returns:
        One ConsolidatedEntry per package
    """
    entries: Dict[str, ConsolidatedEntry] = {}
    for update in updates:
        if isinstance(update, DependencyUpdate):
            entry = ConsolidatedEntry.from_update(update)
        else:
            entry = update

        if entry.package in entries:
            entries[entry.package] = merge_entries(entries[entry.package], entry)
        else:
            entries[entry.package] = entry

    return list(entries.values())
