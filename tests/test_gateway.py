"""Tests for the Bower/GitHub registry gateway."""

import asyncio

import httpx
import pytest
import respx

from dependents_engine.config import Settings
from dependents_engine.models import ProjectRef
from dependents_engine.registry.errors import (
    AuthenticationFailed,
    PackageNotFound,
    RegistryError,
)
from dependents_engine.registry.gateway import (
    BowerRegistry,
    create_client,
    sort_version_tags,
    version_key,
)

REGISTRY = "https://registry.test"
API = "https://api.test"
RAW = "https://raw.test"
TAGS_URL = f"{API}/repos/alice/purescript-b/tags?per_page=100"


def _call(method, *args):
    async def run():
        async with create_client(Settings()) as client:
            gateway = BowerRegistry(
                client,
                registry_url=REGISTRY,
                github_api_url=API,
                raw_url=RAW,
                keyword="purescript",
                token="tkn",
            )
            return await getattr(gateway, method)(*args)

    return asyncio.run(run())


def _mock_registry_entry(url="git://github.com/alice/purescript-b.git"):
    return respx.get(f"{REGISTRY}/packages/purescript-b").mock(
        return_value=httpx.Response(200, json={"name": "purescript-b", "url": url}),
    )


class TestVersionTags:
    def test_version_key(self):
        assert version_key("v1.2.3") == (1, 2, 3)
        assert version_key("2.0") == (2, 0, 0)
        assert version_key("nightly") is None
        assert version_key("v1.0.0-rc1") is None

    def test_sort_newest_first(self):
        tags = ["v1.0.0", "v1.10.0", "latest", "v1.2.0"]
        assert sort_version_tags(tags) == ["v1.10.0", "v1.2.0", "v1.0.0"]


class TestListAllProjects:
    @respx.mock
    def test_search_by_keyword(self):
        respx.get(f"{REGISTRY}/packages/search/purescript").mock(
            return_value=httpx.Response(200, json=[
                {"name": "purescript-a", "url": "git://github.com/alice/purescript-a.git"},
                {"name": "purescript-b", "url": "git://github.com/bob/purescript-b.git"},
            ]),
        )
        refs = _call("list_all_projects")
        assert refs == [
            ProjectRef("purescript-a", "git://github.com/alice/purescript-a.git"),
            ProjectRef("purescript-b", "git://github.com/bob/purescript-b.git"),
        ]

    @respx.mock
    def test_non_list_response(self):
        respx.get(f"{REGISTRY}/packages/search/purescript").mock(
            return_value=httpx.Response(200, json={"error": "nope"}),
        )
        with pytest.raises(RegistryError):
            _call("list_all_projects")

    @respx.mock
    def test_server_error(self):
        respx.get(f"{REGISTRY}/packages/search/purescript").mock(
            return_value=httpx.Response(503),
        )
        with pytest.raises(RegistryError):
            _call("list_all_projects")


class TestFetchPackageInfo:
    @respx.mock
    def test_latest_tag_manifest(self):
        _mock_registry_entry()
        tags = respx.get(TAGS_URL).mock(
            return_value=httpx.Response(200, json=[
                {"name": "v1.0.0"}, {"name": "v1.10.0"}, {"name": "v1.2.0"}, {"name": "nightly"},
            ]),
        )
        respx.get(f"{RAW}/alice/purescript-b/v1.10.0/bower.json").mock(
            return_value=httpx.Response(200, json={
                "name": "purescript-b",
                "license": "MIT",
                "dependencies": {"purescript-a": "^1.0.0"},
            }),
        )

        record = _call("fetch_package_info", "purescript-b")
        assert record.name == "purescript-b"
        assert record.url == "git://github.com/alice/purescript-b.git"
        assert record.latest.version == "1.10.0"
        assert record.latest.dependencies == {"purescript-a": "^1.0.0"}
        assert record.latest.extra["license"] == "MIT"
        assert record.extra["versions"] == ["1.10.0", "1.2.0", "1.0.0"]
        assert tags.calls.last.request.headers["Authorization"] == "Bearer tkn"

    @respx.mock
    def test_untagged_repository_reads_head(self):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(200, json=[]))
        respx.get(f"{RAW}/alice/purescript-b/HEAD/bower.json").mock(
            return_value=httpx.Response(200, json={"name": "purescript-b", "version": "0.0.1"}),
        )
        record = _call("fetch_package_info", "purescript-b")
        assert record.latest.version is None
        assert record.latest.dependencies is None

    @respx.mock
    def test_unregistered_package(self):
        respx.get(f"{REGISTRY}/packages/purescript-b").mock(return_value=httpx.Response(404))
        with pytest.raises(PackageNotFound):
            _call("fetch_package_info", "purescript-b")

    @respx.mock
    def test_missing_repository(self):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(404))
        with pytest.raises(PackageNotFound) as exc_info:
            _call("fetch_package_info", "purescript-b")
        assert exc_info.value.source == "https://github.com/alice/purescript-b"
        assert exc_info.value.name == "purescript-b"

    @respx.mock
    def test_missing_manifest(self):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(200, json=[{"name": "v1.0.0"}]))
        respx.get(f"{RAW}/alice/purescript-b/v1.0.0/bower.json").mock(return_value=httpx.Response(404))
        with pytest.raises(PackageNotFound):
            _call("fetch_package_info", "purescript-b")

    @pytest.mark.parametrize("status", [401, 403])
    @respx.mock
    def test_auth_failure(self, status):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(status))
        with pytest.raises(AuthenticationFailed):
            _call("fetch_package_info", "purescript-b")

    @pytest.mark.parametrize("status,headers", [
        (403, {"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}),
        (429, {}),
    ])
    @respx.mock
    def test_rate_limit_is_fatal(self, status, headers):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(status, headers=headers))
        with pytest.raises(RegistryError) as exc_info:
            _call("fetch_package_info", "purescript-b")
        assert type(exc_info.value) is RegistryError
        assert "rate limited" in str(exc_info.value)

    @respx.mock
    def test_moved_tags_endpoint_followed(self):
        moved = f"{API}/repositories/42/tags?per_page=100"
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(
            return_value=httpx.Response(301, headers={"Location": moved}),
        )
        respx.get(moved).mock(return_value=httpx.Response(200, json=[{"name": "v2.0.0"}]))
        respx.get(f"{RAW}/alice/purescript-b/v2.0.0/bower.json").mock(
            return_value=httpx.Response(200, json={"name": "purescript-b", "dependencies": {}}),
        )
        record = _call("fetch_package_info", "purescript-b")
        assert record.latest.version == "2.0.0"
        assert record.latest.dependencies == {}

    @pytest.mark.parametrize("status", [300, 304])
    @respx.mock
    def test_unfollowed_redirect_is_error(self, status):
        respx.get(f"{REGISTRY}/packages/purescript-b").mock(return_value=httpx.Response(status))
        with pytest.raises(RegistryError) as exc_info:
            _call("fetch_package_info", "purescript-b")
        assert type(exc_info.value) is RegistryError

    @respx.mock
    def test_tags_spread_over_pages(self):
        second = f"{API}/repositories/42/tags?per_page=100&page=2"
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(
            return_value=httpx.Response(
                200,
                json=[{"name": "v1.0.0"}, {"name": "v1.1.0"}],
                headers={"Link": f'<{second}>; rel="next", <{second}>; rel="last"'},
            ),
        )
        respx.get(second).mock(return_value=httpx.Response(200, json=[{"name": "v1.9.0"}]))
        respx.get(f"{RAW}/alice/purescript-b/v1.9.0/bower.json").mock(
            return_value=httpx.Response(200, json={"name": "purescript-b"}),
        )
        record = _call("fetch_package_info", "purescript-b")
        assert record.latest.version == "1.9.0"
        assert record.extra["versions"] == ["1.9.0", "1.1.0", "1.0.0"]

    @respx.mock
    def test_non_list_tags_response(self):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(200, json={"message": "odd"}))
        with pytest.raises(RegistryError):
            _call("fetch_package_info", "purescript-b")

    @respx.mock
    def test_server_error_is_plain_registry_error(self):
        _mock_registry_entry()
        respx.get(TAGS_URL).mock(return_value=httpx.Response(500))
        with pytest.raises(RegistryError) as exc_info:
            _call("fetch_package_info", "purescript-b")
        assert type(exc_info.value) is RegistryError

    @respx.mock
    def test_transport_error(self):
        respx.get(f"{REGISTRY}/packages/purescript-b").mock(side_effect=httpx.ConnectError("boom"))
        with pytest.raises(RegistryError):
            _call("fetch_package_info", "purescript-b")

    @respx.mock
    def test_non_github_repository(self):
        _mock_registry_entry(url="https://gitlab.com/alice/purescript-b.git")
        with pytest.raises(PackageNotFound):
            _call("fetch_package_info", "purescript-b")


class TestResolveRedirect:
    @respx.mock
    def test_moved_repository(self):
        respx.head("https://github.com/alice/old").mock(
            return_value=httpx.Response(301, headers={"Location": "https://github.com/bob/new"}),
        )
        respx.head("https://github.com/bob/new").mock(return_value=httpx.Response(200))
        ref = _call("resolve_redirect", ProjectRef("purescript-old", "git://github.com/alice/old.git"))
        assert ref == ProjectRef("purescript-old", "git://github.com/bob/new.git")

    @respx.mock
    def test_unmoved_repository(self):
        respx.head("https://github.com/alice/a").mock(return_value=httpx.Response(200))
        original = ProjectRef("purescript-a", "git://github.com/alice/a.git")
        assert _call("resolve_redirect", original) == original

    @pytest.mark.parametrize("url", [
        "https://github.com/alice/a",
        "https://github.com/alice/a.git",
        "ssh://git@github.com/alice/a.git",
    ])
    @respx.mock
    def test_other_github_forms_canonicalized(self, url):
        respx.head("https://github.com/alice/a").mock(return_value=httpx.Response(200))
        ref = _call("resolve_redirect", ProjectRef("purescript-a", url))
        assert ref == ProjectRef("purescript-a", "git://github.com/alice/a.git")

    @respx.mock
    def test_gone_repository_left_alone(self):
        respx.head("https://github.com/alice/a").mock(return_value=httpx.Response(404))
        original = ProjectRef("purescript-a", "git://github.com/alice/a.git")
        assert _call("resolve_redirect", original) == original

    @respx.mock
    def test_server_error_is_fatal(self):
        respx.head("https://github.com/alice/a").mock(return_value=httpx.Response(502))
        with pytest.raises(RegistryError):
            _call("resolve_redirect", ProjectRef("purescript-a", "git://github.com/alice/a.git"))

    @respx.mock
    def test_non_canonical_not_requested(self):
        original = ProjectRef("purescript-a", "https://gitlab.com/alice/a.git")
        assert _call("resolve_redirect", original) == original


class TestCreateClient:
    def test_timeout_and_user_agent(self):
        async def run():
            async with create_client(Settings(timeout=5.0)) as client:
                return client.timeout.read, client.headers["User-Agent"]

        read_timeout, agent = asyncio.run(run())
        assert read_timeout == 5.0
        assert agent.startswith("dependents-engine/")
