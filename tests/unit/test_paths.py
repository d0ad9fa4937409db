from types import SimpleNamespace

from restify.config import refresh_settings_cache
from restify.repositories import Repository
from restify.utils.paths import is_restify, path
from tests.fixtures.blog import Post


def _request(p: str):
    return SimpleNamespace(url=SimpleNamespace(path=p))


class VersionedPostRepository(Repository):
    model = Post
    route_prefix = "/api/v1/"


def test_path_defaults():
    assert path() == "/restify-api"
    assert path("posts") == "/restify-api/posts"
    assert path("posts", {"page": "2"}) == "/restify-api/posts?page=2"
    assert path(query={"a": "b c"}) == "/restify-api?a=b+c"
    assert path("posts", {}) == "/restify-api/posts"


def test_path_uses_configured_base(monkeypatch):
    monkeypatch.setenv("RESTIFY_BASE", "/api/admin")
    refresh_settings_cache()
    assert path("users") == "/api/admin/users"


def test_is_restify_matches_base_and_children():
    assert is_restify(_request("/restify-api"))
    assert is_restify(_request("/restify-api/posts/1"))
    assert not is_restify(_request("/health"))
    assert not is_restify(_request("/"))
    assert is_restify("/restify-api/users")


def test_is_restify_keeps_fallback_prefix_with_custom_base(monkeypatch):
    monkeypatch.setenv("RESTIFY_BASE", "/admin-api")
    refresh_settings_cache()
    assert is_restify(_request("/admin-api/posts"))
    assert is_restify(_request("/restify-api/posts"))
    assert not is_restify(_request("/other/posts"))


def test_is_restify_matches_repository_prefixes():
    assert not is_restify(_request("/api/v1/posts"))
    assert is_restify(_request("/api/v1/posts"), [VersionedPostRepository])
    assert not is_restify(_request("/api/v2/posts"), [VersionedPostRepository])
