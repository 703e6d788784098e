"""Unit tests for index construction and corpus loading."""

import orjson
from prometheus_client import REGISTRY
import pytest

from site_search.search.analyzers import StandardAnalyzer
from site_search.search.indexer import build_search_index, document_text, load_posts, post_from_mapping
from site_search.search.models import PostRecord


@pytest.mark.unit
class TestBuildSearchIndex:
    """Postings, lengths and accelerators."""

    def test_document_text_includes_all_fields(self):
        post = PostRecord.create(title="T", link="/t", description="D", tags=["a", "b"], content="C")
        assert document_text(post) == "T D a b C"

    def test_postings_and_lengths(self, guide_index):
        assert guide_index.total_docs == 3
        assert guide_index.inverted["go"] == {0: 2}
        assert guide_index.inverted["program"] == {0: 1, 1: 1}
        assert guide_index.doc_lens == {0: 4, 1: 4, 2: 3}
        assert guide_index.avg_doc_len == pytest.approx(11 / 3)

    def test_frequencies_sum_to_document_length(self, blog_index):
        per_doc: dict[int, int] = {}
        for postings in blog_index.inverted.values():
            for post_id, freq in postings.items():
                assert 0 <= post_id < blog_index.total_docs
                assert freq > 0
                per_doc[post_id] = per_doc.get(post_id, 0) + freq

        assert per_doc == dict(blog_index.doc_lens)

    def test_stopwords_are_not_indexed(self, blog_index):
        assert "the" not in blog_index.inverted
        assert "with" not in blog_index.inverted

    def test_stem_map_records_surface_forms(self, blog_index):
        assert "running" in blog_index.stem_map["run"]
        assert "run" in blog_index.stem_map["run"]

    def test_trigram_index_covers_vocabulary(self, blog_index):
        assert "network" in blog_index.trigram_index["net"]
        indexed_terms = {term for terms in blog_index.trigram_index.values() for term in terms}
        assert indexed_terms == set(blog_index.inverted)

    def test_trigrams_can_be_skipped(self, guide_posts):
        assert build_search_index(guide_posts, with_trigrams=False).trigram_index == {}

    def test_custom_analyzer(self, guide_posts):
        index = build_search_index(guide_posts, StandardAnalyzer(use_stemming=False))
        assert "programming" in index.inverted
        assert "program" not in index.inverted

    def test_empty_corpus(self):
        index = build_search_index([])

        assert index.total_docs == 0
        assert index.avg_doc_len == 0.0
        assert index.inverted == {}

    def test_updates_size_gauges(self, guide_posts):
        index = build_search_index(guide_posts)

        assert REGISTRY.get_sample_value("index_document_count") == 3
        assert REGISTRY.get_sample_value("index_term_count") == index.vocabulary_size


@pytest.mark.unit
class TestPostFromMapping:
    def test_full_entry(self):
        post = post_from_mapping(
            {"title": "Hello", "link": "/hello/", "tags": ["Go", "Web"], "content": "body", "version": "v1"}
        )

        assert post.normalized_title == "hello"
        assert post.normalized_tags == ("go", "web")
        assert post.version == "v1"
        assert post.description == ""

    def test_comma_separated_tags(self):
        post = post_from_mapping({"title": "T", "link": "/t", "tags": "go, web ,"})
        assert post.tags == ("go", "web")

    def test_missing_fields_default_to_empty(self):
        post = post_from_mapping({})
        assert (post.title, post.link, post.tags, post.content) == ("", "", (), "")

    def test_rejects_non_mapping(self):
        with pytest.raises(ValueError, match="JSON objects"):
            post_from_mapping(["not", "a", "post"])

    @pytest.mark.parametrize("tags", [5, {"go": True}, 1.5])
    def test_rejects_unsupported_tag_types(self, tags):
        with pytest.raises(ValueError, match="tags must be"):
            post_from_mapping({"title": "T", "link": "/t", "tags": tags})

    def test_null_fields_become_empty(self):
        post = post_from_mapping({"title": None, "link": "/t", "description": None, "version": None, "tags": None})

        assert post.title == ""
        assert post.description == ""
        assert post.version == ""
        assert post.tags == ()

    def test_numeric_fields_are_stringified(self):
        assert post_from_mapping({"title": "T", "version": 2}).version == "2"


@pytest.mark.unit
class TestLoadPosts:
    """Both corpus encodings load the same records."""

    ENTRIES = [
        {"title": "First", "link": "/1/", "tags": ["a"]},
        {"title": "Second", "link": "/2/", "content": "text"},
    ]

    def test_json_array(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_bytes(orjson.dumps(self.ENTRIES))

        posts = load_posts(path)

        assert [post.title for post in posts] == ["First", "Second"]

    def test_json_lines(self, tmp_path):
        path = tmp_path / "posts.jsonl"
        path.write_bytes(b"\n".join(orjson.dumps(entry) for entry in self.ENTRIES) + b"\n\n")

        posts = load_posts(path)

        assert [post.link for post in posts] == ["/1/", "/2/"]

    def test_bad_tags_in_corpus(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_bytes(orjson.dumps([{"title": "T", "tags": 5}]))

        with pytest.raises(ValueError, match="tags must be"):
            load_posts(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_bytes(b"[{")

        with pytest.raises(orjson.JSONDecodeError):
            load_posts(path)
