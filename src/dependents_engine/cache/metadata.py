"""Read-through cache of the project index and per-package metadata.

A stored, parseable document is always trusted; there is no expiry.
Stale data goes away only through ``clear()``. On a miss the injected
fetch callable is awaited and its result written back whole.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from dependents_engine.cache.store import INDEX_KEY, CacheMiss, CacheStore
from dependents_engine.log import get_logger
from dependents_engine.models import ProjectRecord, ProjectRef
from dependents_engine.registry.errors import AuthenticationFailed, PackageNotFound

log = get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")

ListProjects = Callable[[], Awaitable[list[ProjectRef]]]
FetchInfo = Callable[[str], Awaitable[ProjectRecord]]
PostProcess = Callable[[ProjectRef], Awaitable[ProjectRef]]

DEFAULT_CONCURRENCY = 8


async def gather_bounded(
    func: Callable[[T], Awaitable[R]],
    items: Iterable[T],
    limit: int = DEFAULT_CONCURRENCY,
) -> list[R]:
    """Await ``func(item)`` for every item, at most *limit* at a time.

    Results keep the order of *items*. The first exception propagates
    once raised; branches already finished keep their side effects.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    return list(await asyncio.gather(*(run(item) for item in items)))


class MetadataCache:
    """Registry metadata backed by a CacheStore.

    Args:
        store: Where documents live.
        list_projects: Fetches the full project index.
        fetch_info: Fetches one package's record by name.
        post_process: Applied to each listed project before the index
            is stored (e.g. redirect resolution).
        concurrency: Cap on simultaneous fetches.
    """

    def __init__(
        self,
        store: CacheStore,
        *,
        list_projects: ListProjects,
        fetch_info: FetchInfo,
        post_process: PostProcess | None = None,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        self.store = store
        self._list_projects = list_projects
        self._fetch_info = fetch_info
        self._post_process = post_process
        self.concurrency = concurrency

    def _read_index(self) -> list[ProjectRef]:
        data = self.store.get(INDEX_KEY)
        if not isinstance(data, list):
            raise CacheMiss(INDEX_KEY)
        try:
            return [ProjectRef.from_dict(entry) for entry in data]
        except (KeyError, TypeError, AttributeError) as e:
            raise CacheMiss(INDEX_KEY) from e

    def _read_record(self, name: str) -> ProjectRecord:
        data = self.store.get(name)
        if not isinstance(data, dict):
            raise CacheMiss(name)
        try:
            return ProjectRecord.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CacheMiss(name) from e

    def _write_index(self, refs: list[ProjectRef]) -> None:
        self.store.put(INDEX_KEY, [ref.to_dict() for ref in refs])

    async def load_index(self) -> list[ProjectRef]:
        """Return the project index, fetching and storing it on a miss."""
        try:
            refs = self._read_index()
            log.debug("Loaded project list from cache - %d projects", len(refs))
            return refs
        except CacheMiss:
            log.info("Failed to load project list from cache, fetching from registry...")

        refs = await self._list_projects()
        if self._post_process is not None:
            refs = await gather_bounded(self._post_process, refs, self.concurrency)
        self._write_index(refs)
        log.info("Fetched project list - found %d projects", len(refs))
        return refs

    async def _load(self, ref: ProjectRef) -> tuple[ProjectRecord | None, bool]:
        """Return (record or None, whether *ref* stays in the index)."""
        try:
            record = self._read_record(ref.name)
            log.debug("Loaded %s@%s", ref.name, record.latest.version or "*")
            return record, True
        except CacheMiss:
            log.info("Fetching %s info...", ref.name)

        try:
            record = await self._fetch_info(ref.name)
        except PackageNotFound as e:
            log.warning("Failed to fetch %s info: %s does not exist", ref.name, e.source or ref.url)
            return None, False
        except AuthenticationFailed as e:
            log.warning(
                "Failed to fetch %s info: authentication failed for %s",
                ref.name, e.source or ref.url,
            )
            # Credentials may work next time; keep it to retry.
            return None, True

        # The index URL wins over whatever the registry reported.
        record.url = ref.url
        self.store.put(ref.name, record.to_dict())
        log.info("Fetched %s@%s", ref.name, record.latest.version or "*")
        return record, True

    async def load_project_info(self, ref: ProjectRef) -> ProjectRecord | None:
        """Return the record for *ref*, or None if it cannot be fetched.

        Not-found and authentication failures are logged and absorbed;
        any other RegistryError propagates.
        """
        record, _ = await self._load(ref)
        return record

    async def load_projects(self) -> list[ProjectRecord]:
        """Load every indexed project, skipping the unfetchable ones.

        The index is rewritten afterwards without the packages that came
        back not-found, so those are not retried on later runs. Packages
        refused for authentication stay indexed and are fetched again.
        """
        refs = await self.load_index()
        results = await gather_bounded(self._load, refs, self.concurrency)
        self._write_index([ref for ref, (_, keep) in zip(refs, results) if keep])
        return [record for record, _ in results if record is not None]

    def clear(self) -> None:
        """Remove every cached document."""
        self.store.clear()
