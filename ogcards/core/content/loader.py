"""
Content Loader
==============

Read posts and static pages from the site source directory.
Front matter is YAML between ``---`` fences and is validated with Cerberus.
Tag and category archives are derived from the posts.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple
from datetime import date
from pathlib import Path
import re

import yaml  # type: ignore[import-untyped]
from cerberus import Validator  # type: ignore[import-untyped]

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.errors import OgcardsError
from ogcards.models.schemas import ArchiveDocument, ArchiveType, Site, SourceDocument
from ogcards.utils.text import slugify

logger = get_logger(__name__)

FRONT_MATTER_PATTERN = re.compile(r"\A---\s*\n(.*?)\n---\s*(?:\n|\Z)", re.DOTALL)
POST_FILENAME_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+)$")
CONTENT_EXTENSIONS = {".md", ".markdown", ".html"}


class ContentError(OgcardsError):
    """Exception raised when a content file cannot be loaded."""

    pass


class FrontMatterValidator:
    """Front matter validation using Cerberus schemas."""

    def __init__(self) -> None:
        self.logger: Any = logger.bind(component="front_matter")  # structlog.BoundLoggerBase
        self._setup_schema()

    def _setup_schema(self) -> None:
        """Setup validation schema."""
        string_or_list = {
            "type": ["string", "list"],
            "nullable": True,
            "schema": {"type": "string"},
        }
        self.schema: Dict[str, Any] = {
            "title": {"type": "string", "nullable": True},
            "slug": {"type": "string", "regex": r"^[a-z0-9][a-z0-9_-]*$"},
            "layout": {"type": "string"},
            "description": {"type": "string", "nullable": True},
            "excerpt": {"type": "string", "nullable": True},
            "og_image": {"type": "string", "empty": False},
            "canonical_url": {"type": "string"},
            "date": {"type": ["date", "datetime", "string"]},
            "tags": string_or_list,
            "categories": string_or_list,
            "sitemap": {"type": "boolean"},
        }

    def validate(self, data: Dict[str, Any]) -> List[str]:
        """Return a list of error messages; empty when the front matter is valid."""
        validator = Validator(self.schema, allow_unknown=True)
        if validator.validate(data):
            return []
        return [f"{field}: {message}" for field, message in sorted(validator.errors.items())]


def split_front_matter(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a document into its YAML front matter and body."""
    match = FRONT_MATTER_PATTERN.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    if not isinstance(data, dict):
        raise ContentError("Front matter must be a mapping")
    return data, text[match.end():]


def as_list(value: Any) -> List[str]:
    """Normalize a tags/categories value: list, or a space separated string."""
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(item) for item in value]


class ContentLoader:
    """Load a site's posts, pages and archives."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self.validator = FrontMatterValidator()
        self.logger: Any = logger.bind(component="content_loader")  # structlog.BoundLoggerBase

    def load(self) -> Site:
        """
        Load the content inventory.

        Returns:
            Site with pages, posts and archives

        Raises:
            ContentError: If a file has invalid front matter
        """
        source = self.settings.source_path
        if not source.is_dir():
            raise ContentError(f"Source directory does not exist: {source}")

        posts = sorted(self._load_posts(source), key=lambda post: (post.published or date.min, post.slug))
        posts.reverse()
        pages = list(self._load_pages(source))
        archives = self.build_archives(posts)

        self.logger.info(
            "Content loaded", posts=len(posts), pages=len(pages), archives=len(archives)
        )
        return Site(
            title=self.settings.site_title,
            owner=self.settings.site_owner,
            url=self.settings.site_url,
            description=self.settings.site_description,
            production=self.settings.is_production,
            source=source,
            destination=self.settings.resolve(self.settings.destination_path),
            pages=pages,
            posts=posts,
            archives=archives,
        )

    def read_document(self, path: Path) -> Tuple[Dict[str, Any], str]:
        """Read and validate a content file."""
        try:
            text = path.read_text(encoding="utf-8")
            data, body = split_front_matter(text)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ContentError(f"Cannot read {path}: {e}") from e

        errors = self.validator.validate(data)
        if errors:
            self.logger.error("Invalid front matter", path=str(path), errors=errors)
            raise ContentError(f"Invalid front matter in {path}: {'; '.join(errors)}")
        return data, body

    def _load_posts(self, source: Path) -> Iterator[SourceDocument]:
        posts_dir = source / "_posts"
        if not posts_dir.is_dir():
            return
        for path in sorted(posts_dir.rglob("*")):
            if not path.is_file() or path.suffix not in CONTENT_EXTENSIONS:
                continue
            match = POST_FILENAME_PATTERN.match(path.stem)
            if not match:
                self.logger.warning("Skipping post without a date prefix", path=str(path))
                continue
            data, body = self.read_document(path)
            year, month, day, name = match.groups()
            slug = data.get("slug") or slugify(name)
            yield SourceDocument(
                slug=slug,
                title=data.get("title") or name.replace("-", " ").capitalize(),
                dir="/blog/",
                basename=path.stem,
                ext=path.suffix,
                type="posts",
                published=date(int(year), int(month), int(day)),
                content=body,
                metadata=data,
                source_path=path,
            )

    def _load_pages(self, source: Path) -> Iterator[SourceDocument]:
        for path in sorted(source.rglob("*")):
            if not path.is_file() or path.suffix not in CONTENT_EXTENSIONS:
                continue
            relative = path.relative_to(source)
            if self._is_excluded(relative):
                continue
            data, body = self.read_document(path)
            if not data and path.suffix == ".html":
                # Plain HTML without front matter is a static file, not a page
                continue
            parent = relative.parent.as_posix()
            directory = "/" if parent == "." else f"/{parent}/"
            yield SourceDocument(
                slug=data.get("slug") or slugify(path.stem),
                title=data.get("title") or "",
                dir=directory,
                basename=path.stem,
                ext=path.suffix,
                content=body,
                metadata=data,
                source_path=path,
            )

    def _is_excluded(self, relative: Path) -> bool:
        parts = relative.parts
        if any(part.startswith(("_", ".")) for part in parts):
            return True
        if parts[0] in {"node_modules", "vendor"}:
            return True
        for configured in (
            self.settings.destination_path,
            self.settings.image_root,
            self.settings.preview_staging_path,
        ):
            if not configured.is_absolute() and relative.is_relative_to(configured):
                return True
        return relative.name.upper().startswith("README")

    def build_archives(self, posts: List[SourceDocument]) -> List[ArchiveDocument]:
        """Derive one archive per distinct tag and category, in first-seen order."""
        archives: Dict[Tuple[ArchiveType, str], ArchiveDocument] = {}
        for post in posts:
            for archive_type, key in ((ArchiveType.TAGS, "tags"), (ArchiveType.CATEGORIES, "categories")):
                for label in as_list(post.metadata.get(key)):
                    slug = slugify(label)
                    archive = archives.get((archive_type, slug))
                    if archive is None:
                        archive = ArchiveDocument(type=archive_type, label=label, slug=slug)
                        archives[(archive_type, slug)] = archive
                    archive.posts.append(post.slug)
        return list(archives.values())
