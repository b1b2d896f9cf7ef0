import pytest

from git_releasenotes.releasenote.consolidator import consolidate
from git_releasenotes.releasenote.models import (
    ConsolidatedEntry,
    DependencyUpdate,
    PRReference,
    PRSource,
    is_major_bump,
    version_key,
)


@pytest.fixture
def update(make_commit):
    def _update(package, old, new, pr=None, position=None):
        commit = make_commit(f"Bump {package} from {old} to {new}", author="dependabot[bot]",
                             position=position)
        ref = PRReference(pr, PRSource.SUBJECT) if pr else None
        return DependencyUpdate(package, old, new, commit, ref)
    return _update


def test_chain_of_updates_becomes_one_entry(update):
    entries = consolidate([
        update("pkg", "1.0.0", "1.1.0", 100),
        update("pkg", "1.1.0", "1.2.0", 200),
        update("pkg", "1.2.0", "1.3.0", 300),
    ])

    assert len(entries) == 1
    entry = entries[0]
    assert entry.from_version == "1.0.0"
    assert entry.to_version == "1.3.0"
    assert entry.sorted_prs() == [300, 200, 100]
    assert entry.major_bump is False


def test_newest_first_order_gives_same_span(update):
    entries = consolidate([
        update("pkg", "1.2.0", "1.3.0", 300),
        update("pkg", "1.1.0", "1.2.0", 200),
        update("pkg", "1.0.0", "1.1.0", 100),
    ])

    assert (entries[0].from_version, entries[0].to_version) == ("1.0.0", "1.3.0")


def test_highest_to_version_kept_when_stream_is_out_of_order(update):
    entries = consolidate([
        update("pkg", "1.0.0", "1.10.0", 1),
        update("pkg", "1.0.0", "1.9.0", 2),
    ])

    assert entries[0].to_version == "1.10.0"


def test_pr_numbers_are_unique_and_absent_refs_skipped(update):
    entries = consolidate([
        update("lib", "1.0", "1.1", 100),
        update("lib", "1.1", "1.2", 100),
        update("lib", "1.2", "1.3"),
    ])

    assert entries[0].pr_numbers == frozenset({100})


def test_single_update_without_pr(update):
    entries = consolidate([update("lib", "1.0", "1.1")])

    assert entries[0].pr_numbers == frozenset()
    assert entries[0].sorted_prs() == []


def test_packages_keep_first_seen_order_and_newest_position(update):
    entries = consolidate([
        update("beta", "1.0", "1.1", position=2),
        update("alpha", "2.0", "2.1", position=3),
        update("beta", "0.9", "1.0", position=7),
    ])

    assert [e.package for e in entries] == ["beta", "alpha"]
    assert entries[0].position == 2
    assert entries[0].from_version == "0.9"


def test_consolidation_is_idempotent(update):
    entries = consolidate([
        update("pkg", "1.0.0", "1.1.0", 100),
        update("pkg", "1.1.0", "2.0.0", 200),
    ])

    assert consolidate(entries) == entries
    assert consolidate(consolidate(entries)) == entries


@pytest.mark.parametrize("old, new, expected", [
    ("1.2.0", "2.0.0", True),
    ("1.9", "2.1", True),
    ("v1.4.0", "v2.0.0", True),
    ("2.0.0", "1.0.0", True),
    ("1.2.0", "1.3.0", False),
    ("1.0.0", "1.0.0", False),
    ("latest", "2.0.0", False),
    ("1.0.0", "stable", False),
])
def test_major_bump(old, new, expected):
    assert is_major_bump(old, new) is expected
    assert ConsolidatedEntry("pkg", old, new).major_bump is expected


def test_version_key_ordering():
    assert version_key("1.10.0") > version_key("1.9.0")
    assert version_key("1.0.0") > version_key("1.0.0-rc1")
    assert version_key("1.0.0.1") > version_key("1.0.0")
    assert version_key("v2.0") == version_key("2.0")
