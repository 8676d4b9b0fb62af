import pytest
from pydantic import ValidationError

from jsonapi_resources.schemas import (
    JSONAPIDocument,
    RelationshipCollectionLink,
    RelationshipLink,
    ResourceIdentifier,
    ServerImplementation,
)


def test_to_one_link_always_renders_data():
    assert RelationshipLink().to_dict() == {"data": None}
    assert RelationshipLink(data=ResourceIdentifier(type="authors", id="1")).to_dict() == {
        "data": {"type": "authors", "id": "1"}
    }


def test_collection_link_renders_identifiers_in_order():
    link = RelationshipCollectionLink(
        data=[ResourceIdentifier(type="comments", id="2"), ResourceIdentifier(type="comments", id="1")]
    )

    assert link.to_dict() == {
        "data": [{"type": "comments", "id": "2"}, {"type": "comments", "id": "1"}]
    }


def test_with_links_and_meta_return_new_links():
    link = RelationshipCollectionLink()
    linked = link.with_links({"self": "/a"}).with_links({"related": "/b"}).with_meta({"count": 0})

    assert link.links is None
    assert linked.to_dict() == {
        "data": [],
        "links": {"self": "/a", "related": "/b"},
        "meta": {"count": 0},
    }
    assert list(linked.links) == ["self", "related"]


def test_links_are_frozen():
    link = RelationshipLink()

    with pytest.raises(ValidationError):
        link.links = {"self": "/a"}


def test_server_implementation_defaults_to_version_one():
    assert ServerImplementation().to_dict() == {"version": "1.0"}
    assert ServerImplementation(version="1.1", meta={"x": 1}).to_dict() == {"version": "1.1", "meta": {"x": 1}}


def test_document_model_accepts_rendered_documents():
    document = JSONAPIDocument.model_validate(
        {
            "data": [{"type": "posts", "id": "1"}],
            "included": [{"type": "authors", "id": "1", "attributes": {"name": "Jane"}}],
            "jsonapi": {"version": "1.0"},
        }
    )

    assert document.included[0].attributes == {"name": "Jane"}
