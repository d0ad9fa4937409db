import pytest
from sqlalchemy import Column, Integer
from sqlalchemy.orm import declarative_base

from restify.exceptions import RepositoryNotFound
from restify.registry import RepositoryRegistry
from restify.repositories import ActionLogRepository, Repository
from tests.fixtures.blog import Comment, Post, PostRepository, User, UserRepository


class FirstVersionedRepository(Repository):
    model = Post
    route_prefix = "api/v1"


class SecondVersionedRepository(Repository):
    model = User
    route_prefix = "api/v1"


def test_repository_for_key():
    registry = RepositoryRegistry([PostRepository, UserRepository])
    assert registry.repository_for_key("posts") is PostRepository
    assert registry.repository_for_key("users") is UserRepository
    assert registry.repository_for_key("comments") is None
    assert registry.repository_for_key("Posts") is None


def test_repository_for_key_first_registered_wins_on_duplicate_keys():
    class OtherPostRepository(Repository):
        model = Post
        uri = "posts"

    registry = RepositoryRegistry([OtherPostRepository, PostRepository])
    assert registry.repository_for_key("posts") is OtherPostRepository


def test_repository_for_prefix_is_contains_based_and_order_dependent():
    registry = RepositoryRegistry([FirstVersionedRepository, SecondVersionedRepository])
    assert registry.repository_for_prefix("api/v1/extra") is FirstVersionedRepository
    assert registry.repository_for_prefix("/api/v1/extra") is FirstVersionedRepository

    reversed_registry = RepositoryRegistry([SecondVersionedRepository, FirstVersionedRepository])
    assert reversed_registry.repository_for_prefix("api/v1/extra") is SecondVersionedRepository


def test_repository_for_prefix_falls_back_to_uri_key_route():
    registry = RepositoryRegistry([PostRepository])
    assert registry.repository_for_prefix("/restify-api/posts") is PostRepository
    assert registry.repository_for_prefix("/restify-api/users") is None


def test_repository_for_model_accepts_instances_classes_and_names():
    registry = RepositoryRegistry([PostRepository, UserRepository])
    assert registry.repository_for_model(Post(title="x")) is PostRepository
    assert registry.repository_for_model(User) is UserRepository
    assert registry.repository_for_model("User") is UserRepository
    assert registry.repository_for_model(Comment()) is None


def test_repository_for_table():
    registry = RepositoryRegistry([PostRepository, UserRepository, ActionLogRepository])
    assert registry.repository_for_table("users") is UserRepository
    assert registry.repository_for_table("action_logs") is ActionLogRepository
    assert registry.repository_for_table("comments") is None


def test_resolve_repository_binds_fresh_model():
    registry = RepositoryRegistry([PostRepository, UserRepository])
    first = registry.resolve_repository("posts")
    second = registry.resolve_repository("posts")
    assert isinstance(first, PostRepository)
    assert isinstance(first.resource, Post)
    assert first.resource.id is None
    assert first is not second
    assert first.resource is not second.resource


def test_resolve_repository_raises_for_unknown_key():
    registry = RepositoryRegistry([PostRepository, UserRepository])
    with pytest.raises(RepositoryNotFound) as exc_info:
        registry.resolve_repository("comments")
    assert exc_info.value.key == "comments"
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Repository comments not found."


def test_resolve_repository_returns_mock_when_set():
    registry = RepositoryRegistry([PostRepository])
    mock = PostRepository(Post(id=42, title="mocked"))
    PostRepository.set_mock(mock)
    assert registry.resolve_repository("posts") is mock
    PostRepository.clear_mock()
    assert registry.resolve_repository("posts") is not mock


ArchiveBase = declarative_base()
def _archived_post_model():
    # Same class name as the blog model, different module path.
    class Post(ArchiveBase):
        __tablename__ = "posts"
        id = Column(Integer, primary_key=True)

    return Post


ArchivedPost = _archived_post_model()


class ArchivedPostRepository(Repository):
    model = ArchivedPost


def test_repository_for_model_tells_apart_models_with_the_same_name():
    registry = RepositoryRegistry([ArchivedPostRepository, PostRepository])
    assert registry.repository_for_model(Post) is PostRepository
    assert registry.repository_for_model(Post(title="x")) is PostRepository
    assert registry.repository_for_model(ArchivedPost()) is ArchivedPostRepository
    assert registry.repository_for_model("tests.fixtures.blog.Post") is PostRepository
    assert registry.repository_for_model(f"{ArchivedPost.__module__}.{ArchivedPost.__qualname__}") is ArchivedPostRepository
    # A bare name is ambiguous and resolves to the first registered match.
    assert registry.repository_for_model("Post") is ArchivedPostRepository
