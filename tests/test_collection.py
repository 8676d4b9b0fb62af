import pytest

from jsonapi_resources import JSONAPIResourceCollection, ResourceIdentityError
from jsonapi_resources.resources import collection as collection_module
from jsonapi_resources.resources.response import JSONAPIResponse

from .conftest import Author, AuthorResource, Comment, Post, PostResource


def identifiers(resources, ctx):
    return [resource.to_unique_resource_identifier(ctx) for resource in resources]


def test_duplicate_identities_keep_the_first_occurrence(make_context):
    ctx = make_context(include=("author",))
    posts = [
        Post(id=1, title="A", author=Author(id=7, name="Jane")),
        Post(id=2, title="B", author=Author(id=7, name="Impostor")),
    ]

    document = PostResource.collection(posts).to_document(ctx)

    assert document["included"] == [{"type": "authors", "id": "7", "attributes": {"name": "Jane"}}]


def test_included_order_follows_member_order(make_context):
    ctx = make_context(include=("author", "comments"))
    posts = [
        Post(id=1, title="A", author=Author(id=1, name="Jane"), comments=[Comment(id=10, body="x")]),
        Post(id=2, title="B", author=Author(id=2, name="John"), comments=[Comment(id=11, body="y")]),
    ]

    members = PostResource.collection(posts).top_level_members(ctx)

    assert identifiers(members["included"], ctx) == [
        "type:authors id:1",
        "type:comments id:10",
        "type:authors id:2",
        "type:comments id:11",
    ]


def test_included_resources_are_gathered_transitively(blog, make_context):
    ctx = make_context(include=("comments.author",))

    members = PostResource.collection(blog["posts"]).top_level_members(ctx)

    assert identifiers(members["included"], ctx) == [
        "type:comments id:100",
        "type:authors id:2",
        "type:comments id:101",
        "type:authors id:1",
        "type:comments id:102",
    ]


def test_three_levels_deep(blog, make_context):
    ctx = make_context(include=("author.posts.comments",))

    members = PostResource.collection(blog["posts"][:1]).top_level_members(ctx)

    assert identifiers(members["included"], ctx) == [
        "type:authors id:1",
        "type:posts id:10",
        "type:comments id:100",
        "type:comments id:101",
        "type:posts id:11",
        "type:comments id:102",
    ]


def test_per_member_included_is_not_flattened(blog, make_context):
    ctx = make_context(include=("author",))

    included = PostResource.collection(blog["posts"]).included(ctx)

    assert [identifiers(member, ctx) for member in included] == [
        ["type:authors id:1"],
        ["type:authors id:1"],
    ]


def test_empty_collection(make_context):
    ctx = make_context(include=("author",))
    collection = JSONAPIResourceCollection()

    assert collection.top_level_members(ctx)["included"] == []
    assert collection.to_document(ctx) == {"data": [], "included": [], "jsonapi": {"version": "1.0"}}


def test_map_rewrites_members_in_place(blog):
    collection = PostResource.collection(blog["posts"])
    original = list(collection)

    result = collection.map(lambda resource: AuthorResource(resource.instance.author))

    assert result is collection
    assert len(collection) == len(original)
    assert [resource.instance for resource in collection] == [blog["jane"], blog["jane"]]


def test_with_include_prefix_reaches_every_member(blog):
    collection = PostResource.collection(blog["posts"])

    assert collection.with_include_prefix("author.posts") is collection
    assert [resource.include_prefix for resource in collection] == ["author.posts.", "author.posts."]


def test_relationship_callbacks_do_not_touch_the_document(blog, make_context):
    collection = PostResource.collection(blog["posts"]).with_relationship_link(
        lambda link: link.with_meta({"touched": True})
    )

    document = collection.to_document(make_context())

    assert "meta" not in document
    assert all("meta" not in resource for resource in document["data"])


def test_to_resource_link_deduplicates_members(make_context):
    ctx = make_context()
    jane = Author(id=1, name="Jane")
    collection = AuthorResource.collection([jane, Author(id=2, name="John"), Author(id=1, name="Copy")])

    assert collection.to_resource_link(ctx).to_dict() == {
        "data": [{"type": "authors", "id": "1"}, {"type": "authors", "id": "2"}]
    }


def test_relationship_callbacks_run_in_registration_order(blog, make_context):
    ctx = make_context()
    collection = (
        AuthorResource.collection([blog["jane"], blog["john"]])
        .with_relationship_link(lambda link: link.with_meta({"markers": ["first"]}))
        .with_relationship_link(lambda link: link.with_meta({"markers": [*link.meta["markers"], "second"]}))
        .with_relationship_link(lambda link: link.with_links({"related": "/authors"}))
    )

    link = collection.resolve_relationship_link(ctx)

    assert link.meta == {"markers": ["first", "second"]}
    assert link.to_dict() == {
        "data": [{"type": "authors", "id": "1"}, {"type": "authors", "id": "2"}],
        "links": {"related": "/authors"},
        "meta": {"markers": ["first", "second"]},
    }


def test_relationship_document_without_callbacks_has_no_links(blog, make_context):
    document = AuthorResource.collection([blog["john"]]).to_relationship_document(make_context())

    assert document == {"data": [{"type": "authors", "id": "2"}], "jsonapi": {"version": "1.0"}}


def test_collection_used_as_relationship_applies_its_callbacks(blog, make_context):
    class PagedPostResource(PostResource):
        def get_relationships(self, ctx):
            return {
                "comments": lambda: PostResource.collection([]).with_relationship_link(
                    lambda link: link.with_links({"next": "/comments?page[offset]=10"})
                )
            }

    ctx = make_context(include=("comments",))

    resource_object = PagedPostResource(blog["posts"][0]).to_resource_object(ctx)

    assert resource_object["relationships"]["comments"] == {
        "data": [],
        "links": {"next": "/comments?page[offset]=10"},
    }


def test_pagination_information_drops_absent_links():
    collection = JSONAPIResourceCollection()
    default = {
        "links": {"first": None, "prev": None, "next": "url", "self": "url2"},
        "meta": {"total": 3},
    }

    information = collection.pagination_information({}, default)

    assert information == {"links": {"next": "url", "self": "url2"}, "meta": {"total": 3}}
    assert list(information["links"]) == ["next", "self"]
    assert default["links"]["first"] is None


def test_flush_is_idempotent(blog, make_context):
    ctx = make_context(include=("comments.author",))
    collection = PostResource.collection(blog["posts"])
    collection.to_document(ctx)

    collection.flush()
    assert len(ctx.cache) == 0
    collection.flush()
    assert len(ctx.cache) == 0


def test_flush_without_cached_state_does_not_raise(blog):
    PostResource.collection(blog["posts"]).flush()


def test_each_object_is_serialized_once_per_response(blog, make_context):
    calls = []

    class CountingAuthorResource(AuthorResource):
        def get_attributes(self, ctx):
            calls.append(self.instance.id)
            return super().get_attributes(ctx)

    class CountingPostResource(PostResource):
        class Meta(PostResource.Meta):
            relationships = {"author": CountingAuthorResource}

    ctx = make_context(include=("author",))
    collection = CountingPostResource.collection(blog["posts"])

    data = collection.to_resource_objects(ctx)
    members = collection.top_level_members(ctx)
    first = members["included"][0].to_resource_object(ctx)
    second = CountingAuthorResource(blog["jane"]).to_resource_object(ctx)

    assert first is second
    assert calls == [1]
    assert data[0]["relationships"]["author"] == data[1]["relationships"]["author"]


def test_to_response_flushes_after_rendering(blog, make_context, monkeypatch):
    events = []

    class RecordingResponse(JSONAPIResponse):
        def render(self, content):
            events.append(("render", len(ctx.cache)))
            return super().render(content)

    monkeypatch.setattr(collection_module, "JSONAPIResponse", RecordingResponse)
    ctx = make_context(include=("author",))
    collection = PostResource.collection(blog["posts"])
    original_flush = collection.flush

    def recording_flush():
        events.append(("flush", len(ctx.cache)))
        original_flush()

    monkeypatch.setattr(collection, "flush", recording_flush)

    response = collection.to_response(ctx)

    assert [name for name, _ in events] == ["render", "flush"]
    assert events[0][1] > 0
    assert events[1][1] > 0
    assert len(ctx.cache) == 0
    assert response.headers["content-type"] == "application/vnd.api+json"


def test_failures_propagate_and_still_flush(make_context):
    ctx = make_context(include=("author",))
    posts = [
        Post(id=1, title="A", author=Author(id=1, name="Jane")),
        Post(id=2, title="B", author=Author(id=None, name="Nobody")),
    ]
    collection = PostResource.collection(posts)

    with pytest.raises(ResourceIdentityError):
        collection.to_response(ctx)

    assert len(ctx.cache) == 0


def test_to_resource_link_fails_on_missing_identity(make_context):
    collection = AuthorResource.collection([Author(id=1, name="Jane"), Author(id=None, name="Nobody")])

    with pytest.raises(ResourceIdentityError):
        collection.to_resource_link(make_context())
