"""
Pydantic Models and Schemas
===========================

Core data models for site documents, preview pages and the build report.
Documents are mutable (the preview page synthesizer writes ``og_image`` into
their metadata); capture requests are frozen values.
"""

from typing import Optional, List, Dict, Any, NamedTuple, Union
from datetime import date
from enum import Enum
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict, Field

from ogcards.utils.text import titleize


# Enums
class DocumentKind(str, Enum):
    """Closed set of documents that receive a preview page."""
    POST = "post"
    PAGE = "page"
    ARCHIVE = "archive"


class ArchiveType(str, Enum):
    """Archive groupings."""
    TAGS = "tags"
    CATEGORIES = "categories"


# Documents
class SourceDocument(BaseModel):
    """An authored post or static page."""
    slug: str = Field(..., description="Stable identifier")
    title: str = Field(default="", description="Document title")
    dir: str = Field(default="/", description="URL directory, e.g. '/' or '/about/'")
    basename: str = Field(..., description="Source file name without extension")
    ext: str = Field(default=".md", description="Source file extension")
    type: Optional[str] = Field(default=None, description="Collection tag, 'posts' for posts")
    published: Optional[date] = Field(default=None, description="Post date")
    content: str = Field(default="", description="Raw document body")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Front matter")
    source_path: Optional[Path] = None

    @property
    def is_post(self) -> bool:
        return self.type == "posts"

    @property
    def layout(self) -> str:
        return self.metadata.get("layout") or ("post" if self.is_post else "default")

    @property
    def output_path(self) -> str:
        """Output file relative to the site destination."""
        if self.is_post:
            return f"blog/{self.slug}.html"
        directory = self.dir.strip("/")
        name = f"{self.basename}.html"
        return f"{directory}/{name}" if directory else name

    @property
    def url(self) -> str:
        return "/" + self.output_path


class ArchiveDocument(BaseModel):
    """Virtual document listing the posts under one tag or category."""
    type: ArchiveType
    label: str = Field(..., description="Authored tag or category name")
    slug: str
    posts: List[str] = Field(default_factory=list, description="Slugs of member posts")
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @property
    def title(self) -> str:
        """Tag label for display; lowercase labels are title-cased."""
        if self.label != self.label.lower():
            return self.label
        return titleize(self.label)

    @property
    def dir(self) -> str:
        return f"/{self.type.value}/{self.slug}/"

    @property
    def layout(self) -> str:
        return "archive"

    @property
    def output_path(self) -> str:
        return f"{self.type.value}/{self.slug}.html"

    @property
    def url(self) -> str:
        return "/" + self.output_path


Document = Union[SourceDocument, ArchiveDocument]


class ClassifiedDocument(NamedTuple):
    """A document tagged with the preview kind it was classified as."""
    kind: DocumentKind
    document: Document


class PreviewPage(BaseModel):
    """Synthetic page rendered solely to be captured as a preview image."""
    source_document: Document = Field(..., description="Back-reference, not ownership")
    kind: DocumentKind
    title: str
    dir: str
    basename: str
    ext: str = ".html"
    image_path: str = Field(..., description="Logical image path without prefix or extension")
    layout: str = "open-graph"
    styles: str = ""
    custom_image: bool = False
    file_url: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.basename}{self.ext}"

    @property
    def output_path(self) -> str:
        return str(PurePosixPath(self.dir) / self.name)

    @property
    def url(self) -> str:
        return "/" + self.output_path

    @property
    def data(self) -> Dict[str, Any]:
        """Front matter the layout is rendered with."""
        return {
            "layout": self.layout,
            "title": self.title,
            "styles": self.styles,
            "sitemap": False,
        }

    def og_image(self, prefix: str) -> str:
        return f"{prefix}/{self.image_path}.png"

    def image_file(self, image_root: Path) -> Path:
        """Capture destination under the image root."""
        return image_root / f"{self.image_path}.png"

    def resolve_file_url(self, render_root: Path) -> str:
        """Record the absolute file URL of the rendered page."""
        self.file_url = (render_root.resolve() / self.output_path).as_uri()
        return self.file_url


class CaptureRequest(BaseModel):
    """One screenshot to take: page URL, DOM region and output file."""
    model_config = ConfigDict(frozen=True)

    page_url: str
    selector: str
    destination: Path


class Site(BaseModel):
    """Content inventory for one build."""
    title: str = ""
    owner: str = ""
    url: str = ""
    description: str = ""
    production: bool = False
    source: Path = Path(".")
    destination: Path = Path("_site")
    pages: List[SourceDocument] = Field(default_factory=list)
    posts: List[SourceDocument] = Field(default_factory=list)
    archives: List[ArchiveDocument] = Field(default_factory=list)
    synthetic_pages: List[PreviewPage] = Field(default_factory=list)

    def documents(self) -> List[Document]:
        """Static pages, posts and archives, in that order."""
        return [*self.pages, *self.posts, *self.archives]

    def archive_posts(self, archive: ArchiveDocument) -> List[SourceDocument]:
        by_slug = {post.slug: post for post in self.posts}
        return [by_slug[slug] for slug in archive.posts if slug in by_slug]


class CaptureFailure(BaseModel):
    """A capture that raised during a continue-on-error batch."""
    page_url: str
    destination: Path
    error: str


class BuildReport(BaseModel):
    """Summary of one build."""
    rendered: int = 0
    preview_pages: int = 0
    captured: List[Path] = Field(default_factory=list)
    cached: List[Path] = Field(default_factory=list)
    custom_images: List[str] = Field(default_factory=list)
    failures: List[CaptureFailure] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures
