"""Shared test fixtures and configuration."""

import os

import pytest

from site_search.config import get_settings
from site_search.search.indexer import build_search_index
from site_search.search.models import PostRecord


@pytest.fixture(autouse=True)
def isolated_settings_env(monkeypatch):
    """Keep SITE_SEARCH_* variables from the developer shell out of tests."""

    for key in list(os.environ):
        if key.upper().startswith("SITE_SEARCH_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def guide_posts() -> list[PostRecord]:
    return [
        PostRecord.create(title="Go Guide", link="/v1/go/", tags=["go", "programming"], version="v1"),
        PostRecord.create(title="Rust Guide", link="/v1/rust/", tags=["rust", "programming"], version="v1"),
        PostRecord.create(title="Python Intro", link="/v2/python/", tags=["python"], version="v2"),
    ]


@pytest.fixture
def guide_index(guide_posts):
    return build_search_index(guide_posts)


@pytest.fixture
def blog_posts() -> list[PostRecord]:
    return [
        PostRecord.create(
            title="Configuring the Build",
            link="/posts/configuration/",
            description="How the build configuration file works",
            tags=["Config", "Build"],
            content="The configuration file controls every build. Running the builder with a custom "
            "configuration lets you change output paths, themes and search settings.",
        ),
        PostRecord.create(
            title="Deep Learning Basics",
            link="/posts/deep-learning/",
            description="Neural networks from scratch",
            tags=["ml"],
            content="Neural networks learn representations. This post walks through training a small network.",
            version="v2",
        ),
        PostRecord.create(
            title="Neural Nets in Practice",
            link="/posts/neural-nets/",
            description="Applied notes",
            tags=["ml", "practice"],
            content="An intro to deep learning for practitioners who run experiments every day.",
            version="v1",
        ),
        PostRecord.create(
            title="Writing Fast Search",
            link="/posts/search/",
            description="Inverted indexes and ranking",
            tags=["search"],
            content="The quick brown fox jumps over the lazy dog while the index ranks documents with BM25.",
        ),
    ]


@pytest.fixture
def blog_index(blog_posts):
    return build_search_index(blog_posts)
