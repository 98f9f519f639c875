"""
Unit Tests for Heading Anchorer
===============================
"""

from unittest.mock import patch

import pytest
from bs4 import ParserRejectedMarkup

from ogcards.core.transforms.base import TransformerPipeline
from ogcards.core.transforms.heading_anchor import HeadingAnchorer
from ogcards.core.transforms.image_link import ImageLinker

from tests.utils.helpers import soup


class TestHeadingAnchorer:
    """Test heading self-links."""

    @pytest.fixture
    def anchorer(self):
        return HeadingAnchorer()

    def test_anchor_inserted_first(self, anchorer):
        html = '<main><h2 id="headline-1">Headline 1</h2></main>'
        heading = soup(anchorer.transform(html)).select_one("h2")

        anchor = heading.contents[0]
        assert anchor.name == "a"
        assert anchor["href"] == "#headline-1"
        assert anchor["aria-label"] == "Headline 1"
        assert heading.get_text().endswith("Headline 1")

    def test_every_level(self, anchorer):
        html = "<main>" + "".join(f'<h{n} id="h{n}">H{n}</h{n}>' for n in range(1, 7)) + "</main>"
        result = soup(anchorer.transform(html))
        assert len(result.select("a.heading-anchor")) == 6

    def test_heading_without_id_untouched(self, anchorer):
        html = "<main><h2>No id</h2></main>"
        assert anchorer.transform(html) == html

    def test_heading_outside_main_untouched(self, anchorer):
        html = '<aside><h2 id="side">Side</h2></aside><main></main>'
        assert anchorer.transform(html) == html

    def test_idempotent(self, anchorer):
        once = anchorer.transform('<main><h3 id="x">X</h3></main>')
        assert anchorer.transform(once) == once
        assert len(soup(once).select("h3 a")) == 1


class TestTransformerPipeline:
    """Test ordered application of transforms."""

    def test_both_transforms_applied(self):
        pipeline = TransformerPipeline([ImageLinker(), HeadingAnchorer()])
        html = '<main><h2 id="pics">Pics</h2><img src="p.png"></main>'
        result = soup(pipeline(html))
        assert result.select_one("h2 a")["href"] == "#pics"
        assert result.select_one("main > a")["href"] == "p.png"

    def test_pipeline_idempotent(self):
        pipeline = TransformerPipeline([ImageLinker(), HeadingAnchorer()])
        once = pipeline('<main><h2 id="pics">Pics</h2><img src="p.png"></main>')
        assert pipeline(once) == once

    def test_empty_pipeline(self):
        assert TransformerPipeline([])("<p>x</p>") == "<p>x</p>"


class TestUnparseableInput:
    """Test pass-through when the HTML parser rejects a document."""

    HTML = '<main><h2 id="x">X</h2><img src="a.png"></main>'

    @pytest.fixture(autouse=True)
    def rejecting_parser(self):
        with patch(
            "ogcards.core.transforms.base.BeautifulSoup",
            side_effect=ParserRejectedMarkup("rejected"),
        ) as parser:
            yield parser

    @pytest.mark.parametrize("transformer_class", [ImageLinker, HeadingAnchorer])
    def test_transform_returns_input(self, transformer_class, rejecting_parser):
        assert transformer_class().transform(self.HTML) == self.HTML
        rejecting_parser.assert_called_once()

    def test_pipeline_passes_through(self):
        pipeline = TransformerPipeline([ImageLinker(), HeadingAnchorer()])
        assert pipeline(self.HTML) == self.HTML
