"""
HTML Transformer Base
=====================

Interface for post-render rewrites and the pipeline that applies them.
Each transform is a stateless, single-pass rewrite of one document's HTML.
A transform that changes nothing returns its input verbatim, so applying it
twice gives the same output as applying it once.
"""

from typing import Any, List, Optional, Sequence
from abc import ABC, abstractmethod

from bs4 import BeautifulSoup

from ogcards.config.logging import get_logger

logger = get_logger(__name__)

PARSER = "html.parser"


class HtmlTransformer(ABC):
    """Abstract base class for post-render HTML transforms."""

    name = "transformer"

    def __init__(self) -> None:
        self.logger: Any = logger.bind(transformer=self.name)  # structlog.BoundLoggerBase

    def transform(self, html: str) -> str:
        """
        Rewrite rendered HTML.

        Args:
            html: Rendered document HTML

        Returns:
            Rewritten HTML, or the input unchanged when nothing applies or
            the input cannot be parsed
        """
        soup = self.parse(html)
        if soup is None:
            return html

        changed = self.apply(soup)
        if not changed:
            return html

        self.logger.debug("HTML rewritten", changes=changed)
        return str(soup)

    def parse(self, html: str) -> Optional[BeautifulSoup]:
        try:
            return BeautifulSoup(html, PARSER)
        except Exception as e:  # pylint: disable=broad-except
            self.logger.warning("Unparseable HTML passed through", error=str(e))
            return None

    @abstractmethod
    def apply(self, soup: BeautifulSoup) -> int:
        """Rewrite the parsed document in place and return the number of changes."""
        pass


class TransformerPipeline:
    """Apply transformers in a fixed order."""

    def __init__(self, transformers: Sequence[HtmlTransformer]) -> None:
        self.transformers: List[HtmlTransformer] = list(transformers)

    def __call__(self, html: str) -> str:
        for transformer in self.transformers:
            html = transformer.transform(html)
        return html

