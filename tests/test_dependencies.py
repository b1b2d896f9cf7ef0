import pytest

from git_releasenotes.releasenote.dependencies import is_bot_author, parse
from git_releasenotes.releasenote.models import PRReference, PRSource


def test_plain_bump_subject(make_commit):
    commit = make_commit("Bump requests from 2.31.0 to 2.32.0 (#12)", author="dependabot[bot]")
    pr = PRReference(12, PRSource.SUBJECT)

    update = parse(commit, pr)

    assert update.package == "requests"
    assert update.from_version == "2.31.0"
    assert update.to_version == "2.32.0"
    assert update.commit is commit
    assert update.pr == pr


@pytest.mark.parametrize("subject, package, old, new", [
    ("chore(deps): bump [lodash](https://github.com/lodash/lodash) from 4.17.20 to 4.17.21 in /web",
     "lodash", "4.17.20", "4.17.21"),
    ("build(deps-dev): Bump pytest from 7.4.0 to 8.0.0", "pytest", "7.4.0", "8.0.0"),
    ("Bumps [serde](https://github.com/serde-rs/serde) from 1.0 to 2.0.", "serde", "1.0", "2.0"),
    ("Bump com.fasterxml.jackson:jackson-bom from 2.15.2 to 2.16.0 (#2881)",
     "com.fasterxml.jackson:jackson-bom", "2.15.2", "2.16.0"),
])
def test_bump_subject_variants(make_commit, subject, package, old, new):
    update = parse(make_commit(subject, author="dependabot[bot]"))
    assert (update.package, update.from_version, update.to_version) == (package, old, new)


@pytest.mark.parametrize("subject", [
    "Bump lodash to 4.17.21",
    "Bump version to 1.2.0",
    "Bump lodash from 4.17.20",
    "Fix bump animation from 1 to 2 frames",
    "Add dark mode",
])
def test_non_matching_subjects_are_ordinary(make_commit, subject):
    assert parse(make_commit(subject, author="Bob")) is None


@pytest.mark.parametrize("subject", [
    "chore(deps): bump lodash from 4.17.20 to 4.17.21",
    "build(deps-dev): Bump pytest from 7.4.0 to 8.0.0",
])
def test_deps_scope_counts_without_a_bot_author(make_commit, subject):
    assert parse(make_commit(subject, author="Alice")) is not None


@pytest.mark.parametrize("subject", [
    "Bump version from 1.2.0 to 1.3.0",
    "chore: bump version from 1.2.0 to 1.3.0",
    "Bump requests from 2.31.0 to 2.32.0 (#12)",
])
def test_bump_subject_by_a_person_is_ordinary(make_commit, subject):
    assert parse(make_commit(subject, author="Alice")) is None


def test_from_bot_overrides_author(make_commit):
    commit = make_commit("Bump lib from 1.0.0 to 1.1.0", author="Alice")

    assert parse(commit, from_bot=True).package == "lib"
    assert parse(make_commit("Bump lib from 1.0.0 to 1.1.0", author="dependabot[bot]"), from_bot=False) is None


def test_bot_body_with_single_update(make_commit):
    body = (
        "Bumps the npm group with 1 update in the / directory: [vite](https://github.com/vitejs/vite).\n"
        "\n"
        "Updates `vite` from 5.0.0 to 5.0.12\n"
        "- [Release notes](https://github.com/vitejs/vite/releases)\n"
    )
    commit = make_commit("Bump the npm group across 1 directory with 1 update", body=body,
                         author="dependabot[bot]")

    update = parse(commit)

    assert (update.package, update.from_version, update.to_version) == ("vite", "5.0.0", "5.0.12")


def test_bot_body_with_several_packages_is_ordinary(make_commit):
    body = "Updates `vite` from 5.0.0 to 5.0.12\nUpdates `vitest` from 1.0.0 to 1.2.0\n"
    commit = make_commit("Bump the npm group with 2 updates", body=body, author="dependabot[bot]")

    assert parse(commit) is None


def test_body_ignored_for_human_authors(make_commit):
    commit = make_commit("Upgrade tooling", body="Updates `vite` from 5.0.0 to 5.0.12", author="Bob")

    assert parse(commit) is None


def test_is_bot_author():
    assert is_bot_author("dependabot[bot]")
    assert is_bot_author("Dependabot")
    assert not is_bot_author("Alice")
    assert is_bot_author("renovate[bot]", ["renovate"])
