"""
HTML Generator
==============

Render site documents and preview pages to HTML with Jinja2 layouts.
Markdown bodies are converted with Python-Markdown before the layout runs.
"""

from typing import Any, Dict, Optional, Union
from abc import ABC, abstractmethod
from pathlib import Path

import jinja2
import markdown
from markupsafe import Markup

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.errors import OgcardsError
from ogcards.models.schemas import ArchiveDocument, ArchiveType, PreviewPage, Site, SourceDocument

logger = get_logger(__name__)

MARKDOWN_EXTENSIONS = (".md", ".markdown")

Renderable = Union[SourceDocument, ArchiveDocument, PreviewPage]


class RenderError(OgcardsError):
    """Exception raised when a document cannot be rendered."""

    pass


class BaseRenderer(ABC):
    """Abstract render capability: one document in, one HTML string out."""

    @abstractmethod
    async def render(self, document: Renderable) -> str:
        """Render a document to HTML."""
        pass


class Jinja2SiteRenderer(BaseRenderer):
    """Jinja2-based renderer with site-local layout overrides."""

    def __init__(self, site: Site, settings: Optional[Settings] = None) -> None:
        self.site = site
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(renderer="jinja2")  # structlog.BoundLoggerBase
        self._markdown = markdown.Markdown(extensions=["toc", "fenced_code", "tables"])
        self._setup_jinja2_environment()

    def _setup_jinja2_environment(self) -> None:
        """Setup Jinja2 template environment."""
        loaders: list[jinja2.BaseLoader] = []
        site_layouts = self.site.source / "_layouts"
        if site_layouts.is_dir():
            loaders.append(jinja2.FileSystemLoader(str(site_layouts)))
        loaders.append(jinja2.FileSystemLoader(str(Path(__file__).parent / "templates")))

        self.env = jinja2.Environment(
            loader=jinja2.ChoiceLoader(loaders),
            autoescape=jinja2.select_autoescape(["html", "xml"]),
            enable_async=True,
        )
        self.env.filters["absolute_url"] = self.absolute_url

    def absolute_url(self, path: str) -> str:
        """Join a site-relative path onto the site URL."""
        if not path or path.startswith(("http://", "https://")):
            return path
        return f"{self.site.url}/{path.lstrip('/')}"

    async def render(self, document: Renderable) -> str:
        """
        Render a document with its layout.

        Args:
            document: Source document, archive or preview page

        Returns:
            Rendered HTML string

        Raises:
            RenderError: If the layout is missing or fails to render
        """
        layout = document.layout
        try:
            template = self.env.get_template(f"{layout}.html")
            context = self._prepare_context(document)
            html = await template.render_async(**context)
        except jinja2.TemplateError as e:
            error_msg = f"Rendering {document.url} with layout {layout!r} failed: {e}"
            self.logger.error("HTML rendering failed", error=error_msg)
            raise RenderError(error_msg) from e

        self.logger.debug("Document rendered", url=document.url, layout=layout, html_length=len(html))
        return html

    def convert_content(self, document: SourceDocument) -> str:
        """Convert a document body to HTML."""
        if document.ext in MARKDOWN_EXTENSIONS:
            self._markdown.reset()
            return self._markdown.convert(document.content)
        return document.content

    def _prepare_context(self, document: Renderable) -> Dict[str, Any]:
        """
        Prepare template rendering context.

        Args:
            document: Document being rendered

        Returns:
            Template context dictionary
        """
        if isinstance(document, PreviewPage):
            return {
                "site": self.site,
                "page": document.data,
                "preview": document,
                "styles": Markup(document.styles),
                "selector_id": self.settings.preview_selector.lstrip("#"),
            }

        metadata = document.metadata
        context: Dict[str, Any] = {
            "site": self.site,
            "page": {**metadata, "title": self._title(document), "url": document.url},
            "document": document,
            "description": self._description(document),
            "og_image": self.absolute_url(metadata.get("og_image", "")),
            "canonical_url": metadata.get("canonical_url") or self.absolute_url(document.url),
            "stylesheet": "/" + stylesheet_output_path(self.settings),
        }
        if isinstance(document, ArchiveDocument):
            context["posts"] = self.site.archive_posts(document)
            context["content"] = ""
        else:
            context["content"] = Markup(self.convert_content(document))
        return context

    def _title(self, document: Union[SourceDocument, ArchiveDocument]) -> str:
        if isinstance(document, ArchiveDocument):
            return f"Latest {document.title} posts from {self.site.owner}"
        return document.title

    def _description(self, document: Union[SourceDocument, ArchiveDocument]) -> str:
        if isinstance(document, ArchiveDocument):
            if document.type is ArchiveType.TAGS:
                return f"Latest blog posts tagged as {document.title}"
            return f"Latest blog posts categorized in {document.title}"
        metadata = document.metadata
        return (
            metadata.get("description")
            or metadata.get("excerpt")
            or document.title
            or self.site.description
        )


def stylesheet_output_path(settings: Settings) -> str:
    """Site-relative path of the compiled stylesheet."""
    return settings.stylesheet_path.with_suffix(".css").as_posix()
