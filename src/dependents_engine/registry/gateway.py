"""Registry gateway: project listing and per-package metadata over HTTP.

The Bower registry only maps package names to repository URLs, so a
package's manifest is read from its GitHub repository: the highest
version tag is taken as the latest release and its ``bower.json``
supplies the dependency map.
"""

from __future__ import annotations

import re
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from dependents_engine import __version__
from dependents_engine.config import Settings
from dependents_engine.log import get_logger
from dependents_engine.models import ProjectRecord, ProjectRef
from dependents_engine.registry.errors import (
    AuthenticationFailed,
    PackageNotFound,
    RegistryError,
)
from dependents_engine.registry.urls import (
    GITHUB_WEB,
    repo_slug,
    to_canonical_url,
)

log = get_logger(__name__)

_VERSION_TAG = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?$")

# Upper bound on tag pages read per repository (100 tags each).
MAX_TAG_PAGES = 20


class RegistryGateway(Protocol):
    async def list_all_projects(self) -> list[ProjectRef]: ...

    async def fetch_package_info(self, name: str) -> ProjectRecord: ...

    async def resolve_redirect(self, ref: ProjectRef) -> ProjectRef: ...


def version_key(tag: str) -> tuple[int, int, int] | None:
    """Sort key for a release tag like ``v1.2.3``; None if not a version."""
    m = _VERSION_TAG.match(tag)
    if not m:
        return None
    return tuple(int(part or 0) for part in m.groups())  # type: ignore[return-value]


def sort_version_tags(tags: list[str]) -> list[str]:
    """Version-like tags, newest first. Other tags are dropped."""
    versioned = [(key, tag) for tag in tags if (key := version_key(tag)) is not None]
    versioned.sort(key=lambda pair: pair[0], reverse=True)
    return [tag for _, tag in versioned]


def is_rate_limited(response: httpx.Response) -> bool:
    """True for GitHub's rate-limit answers (429, or 403 with no requests left)."""
    if response.status_code == 429:
        return True
    return response.status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0"


def raise_for_status(response: httpx.Response, *, name: str | None, source: str) -> None:
    """Translate a non-2xx status into the registry failure kinds.

    Rate limiting is a plain RegistryError so that a cold run stops
    instead of treating every remaining package as unreadable.
    """
    status = response.status_code
    if 200 <= status < 300:
        return
    url = str(response.request.url)
    if is_rate_limited(response):
        reset = response.headers.get("X-RateLimit-Reset", "?")
        raise RegistryError(
            f"{url} is rate limited (HTTP {status}, reset at {reset}); set GITHUB_TOKEN",
            name=name, source=source,
        )
    if status == 404:
        raise PackageNotFound(f"{url} returned 404", name=name, source=source)
    if status in (401, 403):
        raise AuthenticationFailed(f"{url} returned HTTP {status}", name=name, source=source)
    raise RegistryError(f"{url} returned HTTP {status}", name=name, source=source)


def create_client(settings: Settings) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.timeout,
        follow_redirects=True,
        headers={"User-Agent": f"dependents-engine/{__version__}"},
    )


class BowerRegistry:
    """RegistryGateway backed by the Bower registry and GitHub."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        registry_url: str,
        github_api_url: str,
        raw_url: str,
        keyword: str,
        token: str | None = None,
    ) -> None:
        self._client = client
        self._registry_url = registry_url.rstrip("/")
        self._github_api_url = github_api_url.rstrip("/")
        self._raw_url = raw_url.rstrip("/")
        self._keyword = keyword
        self._github_headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._github_headers["Authorization"] = f"Bearer {token}"

    @classmethod
    def from_settings(cls, client: httpx.AsyncClient, settings: Settings) -> BowerRegistry:
        return cls(
            client,
            registry_url=settings.registry_url,
            github_api_url=settings.github_api_url,
            raw_url=settings.raw_url,
            keyword=settings.keyword,
            token=settings.token,
        )

    async def _get(
        self,
        url: str,
        *,
        name: str | None = None,
        source: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        source = source or url
        try:
            response = await self._client.get(url, headers=headers)
        except httpx.HTTPError as e:
            raise RegistryError(f"GET {url} failed: {e}", name=name, source=source) from e
        raise_for_status(response, name=name, source=source)
        return response

    @staticmethod
    def _json(response: httpx.Response, *, name: str | None, source: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(
                f"{response.request.url} did not return JSON", name=name, source=source,
            ) from e

    async def _get_json(
        self,
        url: str,
        *,
        name: str | None = None,
        source: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        response = await self._get(url, name=name, source=source, headers=headers)
        return self._json(response, name=name, source=source or url)

    async def _list_tags(self, owner: str, repo: str, *, name: str, source: str) -> list[str]:
        """Every tag name of a repository, following ``Link: rel="next"`` pages."""
        url: str | None = f"{self._github_api_url}/repos/{owner}/{repo}/tags?per_page=100"
        names: list[str] = []
        pages = 0
        while url and pages < MAX_TAG_PAGES:
            response = await self._get(url, name=name, source=source, headers=self._github_headers)
            data = self._json(response, name=name, source=source)
            if not isinstance(data, list):
                raise RegistryError(f"{url} did not return a list of tags", name=name, source=source)
            names.extend(t["name"] for t in data if isinstance(t, dict) and "name" in t)
            url = response.links.get("next", {}).get("url")
            pages += 1
        return names

    async def list_all_projects(self) -> list[ProjectRef]:
        url = f"{self._registry_url}/packages/search/{quote(self._keyword, safe='')}"
        data = await self._get_json(url)
        if not isinstance(data, list):
            raise RegistryError(f"{url} did not return a list", source=url)
        return [ProjectRef.from_dict(entry) for entry in data if isinstance(entry, dict)]

    async def resolve_redirect(self, ref: ProjectRef) -> ProjectRef:
        """Rewrite a GitHub repository URL to its canonical git:// form.

        Renamed or transferred repositories are followed to their
        current location. URLs on other hosts are returned unchanged.
        """
        slug = repo_slug(ref.url)
        if slug is None:
            return ref
        page = f"{GITHUB_WEB}/{slug[0]}/{slug[1]}"
        try:
            response = await self._client.head(page, follow_redirects=True)
        except httpx.HTTPError as e:
            raise RegistryError(f"HEAD {page} failed: {e}", name=ref.name, source=page) from e

        final = slug
        # Gone repositories are reported when their info is fetched.
        if response.status_code != 404:
            raise_for_status(response, name=ref.name, source=page)
            final = repo_slug(str(response.url)) or slug
        if final != slug:
            log.debug("%s moved: %s/%s -> %s/%s", ref.name, *slug, *final)

        canonical = to_canonical_url(*final)
        if canonical == ref.url:
            return ref
        return ProjectRef(ref.name, canonical)

    async def fetch_package_info(self, name: str) -> ProjectRecord:
        entry = await self._get_json(f"{self._registry_url}/packages/{quote(name, safe='')}", name=name)
        if not isinstance(entry, dict) or not entry.get("url"):
            raise RegistryError(f"Registry entry for {name} has no url", name=name, source=self._registry_url)
        url = entry["url"]

        slug = repo_slug(url)
        if slug is None:
            raise PackageNotFound(f"{url} is not a GitHub repository", name=name, source=url)
        owner, repo = slug
        repo_page = f"{GITHUB_WEB}/{owner}/{repo}"

        versions = sort_version_tags(await self._list_tags(owner, repo, name=name, source=repo_page))
        ref = versions[0] if versions else "HEAD"

        manifest = await self._get_json(
            f"{self._raw_url}/{owner}/{repo}/{quote(ref, safe='')}/bower.json",
            name=name,
            source=repo_page,
        )
        if not isinstance(manifest, dict):
            raise RegistryError(f"bower.json of {name} is not an object", name=name, source=repo_page)

        latest = dict(manifest)
        if versions:
            latest["version"] = versions[0].lstrip("v")
        else:
            latest.pop("version", None)
        return ProjectRecord.from_dict({
            "name": name,
            "url": url,
            "versions": [v.lstrip("v") for v in versions],
            "latest": latest,
        })
