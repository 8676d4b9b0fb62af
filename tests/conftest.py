"""Shared fixtures: a small blog domain and its resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from jsonapi_resources import JSONAPIResource, RequestContext
from jsonapi_resources.config import get_settings


@dataclass(eq=False)
class Author:
    id: Any
    name: str
    posts: list = field(default_factory=list)


@dataclass(eq=False)
class Comment:
    id: Any
    body: str
    author: Author | None = None


@dataclass(eq=False)
class Post:
    id: Any
    title: str
    author: Author | None = None
    comments: list = field(default_factory=list)


class AuthorResource(JSONAPIResource):
    class Meta:
        type_ = "authors"
        fields = ["name"]
        relationships = {"posts": "PostResource"}


class CommentResource(JSONAPIResource):
    class Meta:
        type_ = "comments"
        fields = ["body"]
        relationships = {"author": AuthorResource}


class PostResource(JSONAPIResource):
    class Meta:
        type_ = "posts"
        fields = ["title"]
        relationships = {"author": AuthorResource, "comments": CommentResource}


@pytest.fixture(autouse=True)
def _reset_global_state():
    get_settings.cache_clear()
    JSONAPIResource.resolve_server_implementation_using(None)
    yield
    get_settings.cache_clear()
    JSONAPIResource.resolve_server_implementation_using(None)


@pytest.fixture
def make_context():
    def make(include: tuple[str, ...] = (), fields: dict[str, list[str]] | None = None) -> RequestContext:
        return RequestContext(include=list(include), fields=fields or {})

    return make


@pytest.fixture
def blog():
    """Two posts sharing an author; comments written by both authors."""
    jane = Author(id=1, name="Jane")
    john = Author(id=2, name="John")
    first = Post(id=10, title="First", author=jane)
    second = Post(id=11, title="Second", author=jane)
    first.comments = [Comment(id=100, body="Nice", author=john), Comment(id=101, body="Thanks", author=jane)]
    second.comments = [Comment(id=102, body="Again", author=john)]
    jane.posts = [first, second]
    return {"jane": jane, "john": john, "posts": [first, second]}
