from plugins.page_collections.documents import Collection, Document, normalize_membership


class TestDocument:
    def test_lookup_nested_values(self):
        doc = Document(metadata={"nav": {"weight": 2, "tags": ["a", "b"]}})

        assert doc.lookup("nav.weight") == 2
        assert doc.lookup("nav.tags.1") == "b"
        assert doc.lookup("nav.tags.5") is None
        assert doc.lookup("nav.missing") is None
        assert doc.lookup("") is None

    def test_lookup_prefers_metadata_over_attributes(self):
        doc = Document(path="a.md", url="a/", metadata={"url": "https://example.com"})

        assert doc.lookup("path") == "a.md"
        assert doc.lookup("url") == "https://example.com"

    def test_collection_property(self):
        doc = Document(metadata={"collection": "posts"})
        assert doc.collection == ["posts"]

        doc.collection = ("posts", "news")
        assert doc.metadata["collection"] == ["posts", "news"]

    def test_repr_does_not_follow_links(self):
        a, b = Document(path="a.md"), Document(path="b.md")
        a.next, b.previous = b, a

        assert "b.md" not in repr(a)

    def test_identity_equality(self):
        assert Document(path="a.md") != Document(path="a.md")


def test_normalize_membership():
    assert normalize_membership(None) == []
    assert normalize_membership("posts") == ["posts"]
    assert normalize_membership(["b", "a", "b", " ", None]) == ["b", "a"]


def test_collection_is_a_list():
    doc = Document()
    coll = Collection("posts", [doc], metadata={"title": "Posts"})

    assert coll == [doc]
    assert coll.name == "posts"
    assert coll.metadata == {"title": "Posts"}
    assert repr(coll) == "Collection(name='posts', size=1)"
