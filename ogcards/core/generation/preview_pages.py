"""
Preview Page Synthesizer
========================

Derive one synthetic preview page per post, static page and archive, and
record the resulting image path on the source document as ``og_image``.

Generation is two-phase: every preview page is derived first, then all
metadata patches are applied. It runs before the site is rendered, because
templates read ``og_image`` while producing meta tags.
"""

from typing import Any, List, Optional, Tuple
from pathlib import Path, PurePosixPath

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.errors import OgcardsError
from ogcards.core.styles.compiler import StyleCompiler
from ogcards.models.schemas import (
    ArchiveDocument,
    ClassifiedDocument,
    Document,
    DocumentKind,
    PreviewPage,
    Site,
    SourceDocument,
)

logger = get_logger(__name__)


class PreviewPageError(OgcardsError):
    """Exception raised when preview pages cannot be derived consistently."""

    pass


def classify_document(
    document: Document, page_extensions: Optional[List[str]] = None
) -> Optional[DocumentKind]:
    """
    Classify a document for preview generation.

    Archives are recognized by type, posts by their collection tag and static
    pages by extension. Anything else returns None.
    """
    if page_extensions is None:
        page_extensions = get_settings().preview_page_extensions

    if isinstance(document, ArchiveDocument):
        return DocumentKind.ARCHIVE
    if document.is_post:
        return DocumentKind.POST
    if document.type is None and document.ext in page_extensions:
        return DocumentKind.PAGE
    return None


class PreviewPageSynthesizer:
    """Generate preview pages for a site."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        style_compiler: Optional[StyleCompiler] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.style_compiler = style_compiler or StyleCompiler(self.settings)
        self.last_styles = ""
        self.logger: Any = logger.bind(component="preview_pages")  # structlog.BoundLoggerBase

    def generate(self, site: Site) -> List[PreviewPage]:
        """
        Generate preview pages and write ``og_image`` into document metadata.

        Args:
            site: Content inventory

        Returns:
            Preview pages in document order, one per eligible document

        Raises:
            StyleCompilationError: If the shared stylesheet is missing or invalid
            PreviewPageError: If two documents map to the same image path
        """
        styles = self.build_styles()
        self.last_styles = styles
        classified = self.classify(site.documents())
        pages = [self.derive(entry, site, styles) for entry in classified]
        self._check_unique(pages)

        for entry, page in zip(classified, pages):
            self.apply_og_image(entry.document, page)

        if site.production:
            self.logger.info("Production build, preview pages not added to the site", count=len(pages))
        else:
            site.synthetic_pages.extend(pages)

        self.logger.info(
            "Preview pages generated",
            count=len(pages),
            custom_images=sum(1 for page in pages if page.custom_image),
        )
        return pages

    def build_styles(self) -> str:
        return self.style_compiler.compile_file(self.settings.resolve(self.settings.stylesheet_path))

    def classify(self, documents: List[Document]) -> List[ClassifiedDocument]:
        classified: List[ClassifiedDocument] = []
        for document in documents:
            kind = classify_document(document, self.settings.preview_page_extensions)
            if kind is None:
                self.logger.debug("Document excluded from preview generation", url=document.url)
                continue
            classified.append(ClassifiedDocument(kind=kind, document=document))
        return classified

    def derive(self, entry: ClassifiedDocument, site: Site, styles: str) -> PreviewPage:
        """Derive the preview page for one classified document."""
        document = entry.document
        if entry.kind is DocumentKind.POST:
            title, directory, basename, image_path = self._post_fields(document)
        elif entry.kind is DocumentKind.PAGE:
            title, directory, basename, image_path = self._page_fields(document)
        else:
            title, directory, basename, image_path = self._archive_fields(document, site)

        return PreviewPage(
            source_document=document,
            kind=entry.kind,
            title=title,
            dir=directory,
            basename=basename,
            image_path=image_path,
            layout=self.settings.preview_layout,
            styles=styles,
            custom_image="og_image" in document.metadata,
        )

    def apply_og_image(self, document: Document, page: PreviewPage) -> None:
        """Write the image path into the source document unless it defines its own."""
        if page.custom_image:
            self.logger.debug("Keeping custom og_image", url=document.url)
            return
        document.metadata["og_image"] = page.og_image(self.settings.og_image_prefix)

    def _post_fields(self, document: SourceDocument) -> Tuple[str, str, str, str]:
        root = self.settings.preview_directory
        return document.title, f"{root}/blog", document.slug, f"blog/{document.slug}"

    def _page_fields(self, document: SourceDocument) -> Tuple[str, str, str, str]:
        root = self.settings.preview_directory
        page_dir = document.dir.strip("/")
        directory = str(PurePosixPath(root) / page_dir) if page_dir else root
        image_path = f"{page_dir}/{document.basename}" if page_dir else document.basename
        return document.title, directory, document.basename, image_path

    def _archive_fields(self, document: ArchiveDocument, site: Site) -> Tuple[str, str, str, str]:
        root = self.settings.preview_directory
        archive_type = document.type.value
        owner = site.owner or self.settings.site_owner
        title = f"Latest {document.title} posts from {owner}"
        return title, f"{root}/{archive_type}", document.slug, f"{archive_type}/{document.slug}"

    def _check_unique(self, pages: List[PreviewPage]) -> None:
        seen: dict[str, PreviewPage] = {}
        for page in pages:
            other = seen.get(page.image_path)
            if other is not None:
                raise PreviewPageError(
                    f"Image path {page.image_path!r} is shared by "
                    f"{other.source_document.url} and {page.source_document.url}"
                )
            seen[page.image_path] = page


def image_destination(page: PreviewPage, settings: Optional[Settings] = None) -> Path:
    """Capture destination of a preview page under the configured image root."""
    settings = settings or get_settings()
    return page.image_file(settings.resolve(settings.image_root))
