"""
Unit Tests for Content Loader
=============================

Front matter parsing, validation and site inventory loading.
"""

from datetime import date
from pathlib import Path

import pytest

from ogcards.core.content.loader import (
    ContentError,
    ContentLoader,
    FrontMatterValidator,
    as_list,
    split_front_matter,
)
from ogcards.models.schemas import ArchiveType

from tests.utils.helpers import write_document


class TestFrontMatter:
    """Test front matter splitting."""

    def test_split(self):
        data, body = split_front_matter("---\ntitle: Hi\n---\nBody\n")
        assert data == {"title": "Hi"}
        assert body == "Body\n"

    def test_no_front_matter(self):
        assert split_front_matter("<p>plain</p>") == ({}, "<p>plain</p>")

    def test_empty_front_matter(self):
        assert split_front_matter("---\n\n---\n") == ({}, "")

    def test_non_mapping_rejected(self):
        with pytest.raises(ContentError, match="mapping"):
            split_front_matter("---\n- a\n- b\n---\n")

    def test_as_list(self):
        assert as_list(None) == []
        assert as_list("ruby rails") == ["ruby", "rails"]
        assert as_list(["Ruby on Rails"]) == ["Ruby on Rails"]


class TestFrontMatterValidator:
    """Test Cerberus validation of front matter."""

    @pytest.fixture
    def validator(self):
        return FrontMatterValidator()

    def test_valid(self, validator):
        assert validator.validate({"title": "Hi", "tags": ["a"], "custom": 1}) == []

    def test_empty_og_image(self, validator):
        errors = validator.validate({"og_image": ""})
        assert errors and errors[0].startswith("og_image")

    def test_bad_slug(self, validator):
        assert validator.validate({"slug": "Not A Slug"})

    def test_tags_wrong_type(self, validator):
        assert validator.validate({"tags": 3})


class TestContentLoader:
    """Test loading the fixture site."""

    def test_posts_newest_first(self, loaded_site):
        assert [p.slug for p in loaded_site.posts] == ["custom-image", "hello-world"]
        hello = loaded_site.posts[1]
        assert hello.type == "posts"
        assert hello.is_post
        assert hello.published == date(2023, 5, 1)
        assert hello.title == "Hello World"
        assert hello.output_path == "blog/hello-world.html"

    def test_pages(self, loaded_site):
        pages = {p.basename: p for p in loaded_site.pages}
        assert set(pages) == {"about", "contact", "guide"}
        assert pages["about"].dir == "/"
        assert pages["guide"].dir == "/docs/"
        assert pages["guide"].output_path == "docs/guide.html"
        assert pages["contact"].ext == ".html"
        assert pages["about"].type is None

    def test_archives(self, loaded_site):
        archives = {(a.type, a.slug): a for a in loaded_site.archives}
        assert set(archives) == {
            (ArchiveType.TAGS, "opinion"),
            (ArchiveType.CATEGORIES, "ruby-on-rails"),
        }
        opinion = archives[(ArchiveType.TAGS, "opinion")]
        assert opinion.posts == ["custom-image", "hello-world"]
        assert opinion.output_path == "tags/opinion.html"
        assert archives[(ArchiveType.CATEGORIES, "ruby-on-rails")].title == "Ruby on Rails"

    def test_site_identity(self, loaded_site, test_settings, site_source: Path):
        assert loaded_site.owner == "Jane Doe"
        assert loaded_site.url == "https://example.com"
        assert loaded_site.destination == site_source / "_site"
        assert not loaded_site.production

    def test_excluded_paths(self, test_settings, site_source: Path):
        write_document(site_source / "README.md", {"title": "Readme"})
        write_document(site_source / "node_modules" / "pkg" / "doc.md", {"title": "Dep"})
        write_document(site_source / "_drafts" / "draft.md", {"title": "Draft"})
        write_document(site_source / "_site" / "old.md", {"title": "Old"})
        (site_source / "static.html").write_text("<p>static</p>", encoding="utf-8")

        site = ContentLoader(test_settings).load()
        assert {p.basename for p in site.pages} == {"about", "contact", "guide"}

    def test_post_without_date_prefix_skipped(self, test_settings, site_source: Path):
        write_document(site_source / "_posts" / "undated.md", {"title": "Undated"})
        site = ContentLoader(test_settings).load()
        assert len(site.posts) == 2

    def test_invalid_front_matter(self, test_settings, site_source: Path):
        write_document(site_source / "broken.md", {"title": "Broken", "og_image": ""})
        with pytest.raises(ContentError, match="Invalid front matter"):
            ContentLoader(test_settings).load()

    def test_malformed_yaml(self, test_settings, site_source: Path):
        (site_source / "bad.md").write_text("---\ntitle: [unclosed\n---\n", encoding="utf-8")
        with pytest.raises(ContentError, match="Cannot read"):
            ContentLoader(test_settings).load()

    def test_missing_source(self, make_settings, tmp_path: Path):
        with pytest.raises(ContentError, match="does not exist"):
            ContentLoader(make_settings(source_path=tmp_path / "missing")).load()
