from types import SimpleNamespace

from restify.registry import RepositoryRegistry
from restify.repositories import ActionLogRepository, Repository
from tests.fixtures.blog import Comment, CommentRepository, Post, PostRepository, User, UserRepository


def _request(email=None):
    user = {"name": "tester", "email": email} if email else None
    return SimpleNamespace(state=SimpleNamespace(user=user))


class ArticleRepository(Repository):
    model = Post
    uri = "articles"


class ZebraRepository(Repository):
    model = Comment
    label_name = "Aardvarks"


def test_globally_searchable_excludes_unauthorized_and_opted_out():
    registry = RepositoryRegistry([PostRepository, UserRepository, CommentRepository, ActionLogRepository])

    guest = registry.globally_searchable_repositories(_request())
    assert guest == [PostRepository]

    admin = registry.globally_searchable_repositories(_request("root@admin.test"))
    assert admin == [PostRepository, UserRepository]


def test_globally_searchable_sorted_by_label():
    registry = RepositoryRegistry([PostRepository, ZebraRepository, ArticleRepository])
    result = registry.globally_searchable_repositories(_request())
    assert [r.label() for r in result] == ["Aardvarks", "Articles", "Posts"]


def test_sort_repositories_with_uses_label():
    key = RepositoryRegistry.sort_repositories_with()
    assert key(UserRepository) == "Users"
    assert key(ZebraRepository) == "Aardvarks"


def test_filter_never_includes_denied_repository():
    class DeniedRepository(Repository):
        model = User

        @classmethod
        def authorized_to_use_repository(cls, request) -> bool:
            return False

    registry = RepositoryRegistry([DeniedRepository, PostRepository])
    assert DeniedRepository not in registry.globally_searchable_repositories(_request("root@admin.test"))
