import itertools

import pytest

from git_releasenotes.releasenote.models import CommitRecord


@pytest.fixture
def make_commit():
    """Build CommitRecords with unique shas and increasing positions."""
    counter = itertools.count()

    def _make(subject, body="", parents=None, author="Alice", sha=None, position=None):
        n = next(counter)
        return CommitRecord(
            sha=sha or f"{n:040x}",
            subject=subject,
            body=body,
            parents=tuple(parents) if parents is not None else (f"parent{n}",),
            author=author,
            position=n if position is None else position,
        )

    return _make


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep user config files and tokens out of the tests."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    for name in ("GITHUB_TOKEN", "RELNOTES_GITHUB_TOKEN", "RELNOTES_GITHUB_REPO", "RELNOTES_GITHUB_API_URL"):
        monkeypatch.delenv(name, raising=False)
