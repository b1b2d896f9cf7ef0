"""Pull request resolution for commits.

Each commit is run through a chain of strategies, and the first one that
finds a PR number wins:

1. the commit subject (``Merge pull request #N`` or a ``(#N)`` reference),
2. the merge map, which maps each merged branch tip to the PR that merged it,
3. a code host search by commit sha (needs a token).

The merge map and search cache are plain values built once per run, so the
same resolver can be fed deterministic fixtures in tests.
"""

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .models import CommitRecord, PRReference, PRSource


DEFAULT_WORKER_COUNT = 4

MERGE_PR_RE = re.compile(r'^Merge pull request #(\d+)')
MERGE_PR_FROM_RE = re.compile(r'^Merge pull request #(\d+) from (\S+)')
PR_REF_RE = re.compile(r'\(#(\d+)\)')

Strategy = Callable[[CommitRecord, Mapping[str, int]], Optional[PRReference]]


def _to_reference(value: str, source: PRSource) -> Optional[PRReference]:
    try:
        number = int(value)
    except ValueError:
        return None
    if number <= 0:
        return None
    return PRReference(number, source)


def pr_from_subject(commit: CommitRecord, merge_map: Mapping[str, int]) -> Optional[PRReference]:
    """Extract a PR number from the commit subject.

    Squash merges end with ``(#N)``; when a subject carries more than one
    reference (reverts, cherry-picks) the last one is the PR itself.
    """
    match = MERGE_PR_RE.match(commit.subject)
    if match:
        return _to_reference(match.group(1), PRSource.SUBJECT)

    refs = PR_REF_RE.findall(commit.subject)
    if refs:
        return _to_reference(refs[-1], PRSource.SUBJECT)
    return None


def pr_from_merge_map(commit: CommitRecord, merge_map: Mapping[str, int]) -> Optional[PRReference]:
    number = merge_map.get(commit.sha)
    if number is None:
        return None
    return PRReference(number, PRSource.MERGE)


def build_merge_map(commits: Iterable[CommitRecord]) -> Dict[str, int]:
    """Map the tip of every merged branch to the PR that merged it.

    Args:
        commits: All commits in the range, merge commits included

    Returns:
        Dictionary of branch tip sha to PR number
    """
    merge_map: Dict[str, int] = {}
    for commit in commits:
        if not commit.is_merge:
            continue
        match = MERGE_PR_FROM_RE.match(commit.subject)
        if not match:
            continue
        number = int(match.group(1))
        if number > 0:
            merge_map.setdefault(commit.parents[1], number)
    return merge_map


class SearchCache:
    """Per-run cache of code host search results, misses included."""

    _MISSING = object()

    def __init__(self):
        self._results: Dict[str, Optional[int]] = {}
        self._lock = threading.Lock()

    def __contains__(self, sha: str) -> bool:
        with self._lock:
            return sha in self._results

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def get(self, sha: str):
        with self._lock:
            return self._results.get(sha, self._MISSING)

    def put(self, sha: str, number: Optional[int]) -> None:
        with self._lock:
            self._results[sha] = number

    @classmethod
    def is_missing(cls, value) -> bool:
        return value is cls._MISSING


class CodeHostSearch:
    """Look a commit up on the code host, remembering every answer.

    Args:
        client: Object with ``search_prs_by_commit(sha) -> List[int]``
        cache: Search cache shared for the whole run
    """

    def __init__(self, client, cache: Optional[SearchCache] = None):
        self.client = client
        self.cache = cache if cache is not None else SearchCache()
        self.logger = logging.getLogger(__name__)

    def __call__(self, commit: CommitRecord, merge_map: Mapping[str, int]) -> Optional[PRReference]:
        cached = self.cache.get(commit.sha)
        if not SearchCache.is_missing(cached):
            return PRReference(cached, PRSource.SEARCH) if cached else None

        number = None
        try:
            numbers = self.client.search_prs_by_commit(commit.sha)
            numbers = [n for n in numbers if n > 0]
            if numbers:
                number = numbers[0]
        except Exception as e:
            self.logger.warning(f"PR search failed for {commit.short_sha}: {e}")

        self.cache.put(commit.sha, number)
        if number is None:
            self.logger.debug(f"No PR found on code host for {commit.short_sha}")
            return None
        return PRReference(number, PRSource.SEARCH)


DEFAULT_STRATEGIES: List[Strategy] = [pr_from_subject, pr_from_merge_map]


class PRResolver:
    """Apply the strategy chain to commits.

    ``search`` is left out entirely when no credential is available, so no
    network call can happen in that case.
    """

    def __init__(self, strategies: Optional[Sequence[Strategy]] = None,
                 search: Optional[Strategy] = None):
        self.strategies = list(strategies if strategies is not None else DEFAULT_STRATEGIES)
        self.search = search

    @classmethod
    def for_client(cls, client=None, has_token: bool = False,
                   cache: Optional[SearchCache] = None) -> "PRResolver":
        search = CodeHostSearch(client, cache) if client is not None and has_token else None
        return cls(search=search)

    def resolve_offline(self, commit: CommitRecord, merge_map: Mapping[str, int]) -> Optional[PRReference]:
        for strategy in self.strategies:
            ref = strategy(commit, merge_map)
            if ref is not None:
                return ref
        return None

    def resolve(self, commit: CommitRecord, merge_map: Mapping[str, int]) -> Optional[PRReference]:
        ref = self.resolve_offline(commit, merge_map)
        if ref is None and self.search is not None:
            ref = self.search(commit, merge_map)
        return ref


def fan_out(func: Callable, items: Sequence, max_workers: int = DEFAULT_WORKER_COUNT,
            timeout: Optional[float] = None, label: str = "Lookup") -> Dict:
    """Call ``func`` for every item on a bounded thread pool.

    Items whose call raises or has not finished when ``timeout`` expires
    are left out of the result. Calls still running at that point are not
    interrupted; the pool is shut down without waiting for them.

    Returns:
        Dictionary of item to result
    """
    logger = logging.getLogger(__name__)

    results: Dict = {}
    if not items:
        return results

    executor = ThreadPoolExecutor(max_workers=min(max_workers, len(items)))
    try:
        future_to_item = {executor.submit(func, item): item for item in items}
        done, not_done = wait(future_to_item, timeout=timeout)
        if not_done:
            logger.warning(f"{label} timed out, {len(not_done)} of {len(items)} left unfinished")

        for future in done:
            item = future_to_item[future]
            try:
                results[item] = future.result()
            except Exception as e:
                logger.warning(f"{label} failed for {item}: {e}")
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    return results


def resolve_all(commits: Sequence[CommitRecord], resolver: PRResolver,
                merge_map: Mapping[str, int],
                max_workers: int = DEFAULT_WORKER_COUNT,
                timeout: Optional[float] = None) -> Dict[str, Optional[PRReference]]:
    """Resolve PR references for every commit using concurrent searches.

    Offline strategies run inline; only commits they miss are searched, at
    most ``max_workers`` at a time. When ``timeout`` expires, commits whose
    search has not finished resolve to None.

    Args:
        commits: Commits to resolve
        resolver: Resolver with its strategy chain
        merge_map: Result of build_merge_map over the whole range
        max_workers: Upper bound on concurrent code host searches
        timeout: Optional deadline in seconds for the search phase

    Returns:
        Dictionary of commit sha to PR reference (or None)
    """
    logger = logging.getLogger(__name__)

    results: Dict[str, Optional[PRReference]] = {}
    pending: Dict[str, CommitRecord] = {}
    for commit in commits:
        ref = resolver.resolve_offline(commit, merge_map)
        results[commit.sha] = ref
        if ref is None and resolver.search is not None:
            pending[commit.sha] = commit

    if not pending:
        return results

    logger.debug(f"Searching code host for {len(pending)} commits")
    found = fan_out(lambda sha: resolver.search(pending[sha], merge_map), list(pending),
                    max_workers=max_workers, timeout=timeout, label="PR search")
    results.update(found)
    return results
