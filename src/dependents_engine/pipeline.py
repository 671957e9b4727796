"""Wire settings, gateway and cache into a loaded dependency graph."""

from __future__ import annotations

from dependents_engine.cache.metadata import MetadataCache
from dependents_engine.cache.store import DirectoryStore
from dependents_engine.config import Settings
from dependents_engine.graph.builder import DependencyGraph, build_graph
from dependents_engine.models import ProjectRecord
from dependents_engine.registry.gateway import BowerRegistry, RegistryGateway, create_client


def metadata_cache(settings: Settings, gateway: RegistryGateway) -> MetadataCache:
    return MetadataCache(
        DirectoryStore(settings.cache_dir),
        list_projects=gateway.list_all_projects,
        fetch_info=gateway.fetch_package_info,
        post_process=gateway.resolve_redirect,
        concurrency=settings.concurrency,
    )


async def load_projects(settings: Settings) -> list[ProjectRecord]:
    """Load every project through the cache, fetching what is missing."""
    async with create_client(settings) as client:
        gateway = BowerRegistry.from_settings(client, settings)
        return await metadata_cache(settings, gateway).load_projects()


async def load_graph(settings: Settings) -> DependencyGraph:
    return build_graph(await load_projects(settings))


def clear_cache(settings: Settings) -> None:
    DirectoryStore(settings.cache_dir).clear()
