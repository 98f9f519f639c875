"""
Build Orchestrator
==================

Drive one build of the site:

1. load content
2. generate preview pages (writes ``og_image`` before anything renders)
3. render every document, applying post-render transforms
4. write the compiled stylesheet and static files
5. capture missing preview images with one browser session
6. copy the image root into the site output

Stages share an explicit ``BuildContext`` rather than global state.
"""

from typing import Any, Callable, List, Optional
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, field
from pathlib import Path
import shutil

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.content.loader import (
    CONTENT_EXTENSIONS,
    FRONT_MATTER_PATTERN,
    ContentError,
    ContentLoader,
)
from ogcards.core.errors import ConfigurationError, OgcardsError
from ogcards.core.generation.preview_pages import PreviewPageSynthesizer, image_destination
from ogcards.core.rendering.html_generator import (
    BaseRenderer,
    Jinja2SiteRenderer,
    stylesheet_output_path,
)
from ogcards.core.rendering.screenshot import (
    BrowserSession,
    CaptureError,
    ScreenshotCapturer,
    open_browser_session,
)
from ogcards.core.transforms.base import TransformerPipeline
from ogcards.core.transforms.heading_anchor import HeadingAnchorer
from ogcards.core.transforms.image_link import ImageLinker
from ogcards.models.schemas import (
    BuildReport,
    CaptureFailure,
    CaptureRequest,
    PreviewPage,
    Site,
)

logger = get_logger(__name__)

OG_IMAGE_OUTPUT_DIR = Path("assets/images/open-graph")

SessionFactory = Callable[[Settings], AbstractAsyncContextManager[BrowserSession]]


class CaptureBatchError(OgcardsError):
    """Exception raised after a continue-on-error batch had failures."""

    def __init__(self, failures: List[CaptureFailure]) -> None:
        self.failures = failures
        summary = ", ".join(failure.page_url for failure in failures)
        super().__init__(f"{len(failures)} preview capture(s) failed: {summary}")


def default_pipeline() -> TransformerPipeline:
    """Images first, headings second."""
    return TransformerPipeline([ImageLinker(), HeadingAnchorer()])


@dataclass
class BuildContext:
    """State handed from one build stage to the next."""

    settings: Settings
    site: Site
    preview_pages: List[PreviewPage] = field(default_factory=list)
    report: BuildReport = field(default_factory=BuildReport)
    stylesheet: str = ""

    @property
    def destination(self) -> Path:
        return self.site.destination

    @property
    def image_root(self) -> Path:
        return self.settings.resolve(self.settings.image_root)

    @property
    def preview_root(self) -> Path:
        """Render root of preview pages: the site output, or a staging directory in production."""
        if self.site.production:
            return self.settings.resolve(self.settings.preview_staging_path)
        return self.destination


class BuildOrchestrator:
    """Run the build stages in order."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        synthesizer: Optional[PreviewPageSynthesizer] = None,
        capturer: Optional[ScreenshotCapturer] = None,
        pipeline: Optional[TransformerPipeline] = None,
        session_factory: Optional[SessionFactory] = None,
        renderer_factory: Optional[Callable[[Site, Settings], BaseRenderer]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.synthesizer = synthesizer or PreviewPageSynthesizer(self.settings)
        self.capturer = capturer or ScreenshotCapturer(self.settings)
        self.pipeline = pipeline or default_pipeline()
        self.session_factory = session_factory or open_browser_session
        self.renderer_factory = renderer_factory or Jinja2SiteRenderer
        self.logger: Any = logger.bind(component="build")  # structlog.BoundLoggerBase

    async def build(self, site: Optional[Site] = None) -> BuildReport:
        """
        Build the site.

        Args:
            site: Preloaded content; loaded from the source directory when omitted

        Returns:
            BuildReport for the build

        Raises:
            ConfigurationError: If the destination is the source directory
            OgcardsError: On the first fatal error of any stage
        """
        if site is None:
            site = ContentLoader(self.settings).load()
        if site.destination.resolve() == site.source.resolve():
            raise ConfigurationError(f"Destination must differ from the source directory: {site.source}")

        context = BuildContext(settings=self.settings, site=site)
        self.logger.info(
            "Build started",
            source=str(site.source),
            destination=str(site.destination),
            production=site.production,
        )

        self.generate(context)
        await self.render(context)
        self.write_assets(context)
        await self.capture(context)
        self.finalize(context)

        self.logger.info(
            "Build finished",
            rendered=context.report.rendered,
            preview_pages=context.report.preview_pages,
            captured=len(context.report.captured),
            cached=len(context.report.cached),
        )
        return context.report

    def generate(self, context: BuildContext) -> None:
        context.preview_pages = self.synthesizer.generate(context.site)
        context.stylesheet = self.synthesizer.last_styles
        context.report.preview_pages = len(context.preview_pages)

    async def render(self, context: BuildContext) -> None:
        """Render documents into the destination and preview pages into their render root."""
        renderer = self.renderer_factory(context.site, self.settings)

        for document in context.site.documents():
            html = await renderer.render(document)
            html = self.pipeline(html)
            self._write(context.destination / document.output_path, html)
            context.report.rendered += 1

        preview_root = context.preview_root
        for page in context.preview_pages:
            html = await renderer.render(page)
            self._write(preview_root / page.output_path, html)
            page.resolve_file_url(preview_root)
            context.report.rendered += 1

    def write_assets(self, context: BuildContext) -> None:
        """Write the compiled stylesheet and copy static files."""
        self._write(context.destination / stylesheet_output_path(self.settings), context.stylesheet)
        for path in self._static_files(context):
            target = context.destination / path.relative_to(context.site.source)
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)

    def capture_requests(self, context: BuildContext) -> List[CaptureRequest]:
        """Requests for preview pages without a custom or existing image."""
        requests: List[CaptureRequest] = []
        for page in context.preview_pages:
            if page.custom_image:
                context.report.custom_images.append(page.source_document.url)
                continue
            destination = image_destination(page, self.settings)
            if destination.exists():
                context.report.cached.append(destination)
                continue
            if page.file_url is None:
                raise CaptureError(f"Preview page {page.output_path} was not rendered")
            requests.append(
                CaptureRequest(
                    page_url=page.file_url,
                    selector=self.settings.preview_selector,
                    destination=destination,
                )
            )
        return requests

    async def capture(self, context: BuildContext) -> None:
        """
        Capture every missing preview image with one browser session.

        The first failure aborts the batch unless ``capture_continue_on_error``
        is set, in which case failures are collected and raised together
        after the batch.
        """
        requests = self.capture_requests(context)
        if not requests:
            self.logger.info("No preview images to capture", cached=len(context.report.cached))
            return

        async with self.session_factory(self.settings) as session:
            for request in requests:
                request.destination.parent.mkdir(parents=True, exist_ok=True)
                try:
                    await self.capturer.capture_request(session, request)
                except CaptureError as e:
                    if not self.settings.capture_continue_on_error:
                        raise
                    self.logger.error("Capture failed", url=request.page_url, error=str(e))
                    context.report.failures.append(
                        CaptureFailure(
                            page_url=request.page_url,
                            destination=request.destination,
                            error=str(e),
                        )
                    )
                    continue
                context.report.captured.append(request.destination)

        if context.report.failures:
            raise CaptureBatchError(context.report.failures)

    def finalize(self, context: BuildContext) -> None:
        """Replace the site's preview image directory with the image root."""
        image_root = context.image_root
        target = context.destination / OG_IMAGE_OUTPUT_DIR
        if image_root.resolve() == target.resolve():
            return
        if target.exists():
            shutil.rmtree(target)
        if image_root.is_dir():
            shutil.copytree(image_root, target)
            self.logger.info("Preview images copied", source=str(image_root), target=str(target))

    def _is_plain_html(self, path: Path) -> bool:
        """HTML without front matter is copied verbatim."""
        if path.suffix != ".html":
            return False
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentError(f"Cannot read {path}: {e}") from e
        return FRONT_MATTER_PATTERN.match(text) is None

    def _write(self, path: Path, content: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")

    def _static_files(self, context: BuildContext) -> List[Path]:
        source = context.site.source.resolve()
        excluded_roots = [
            context.destination.resolve(),
            context.image_root.resolve(),
            self.settings.resolve(self.settings.preview_staging_path).resolve(),
        ]
        stylesheet = self.settings.resolve(self.settings.stylesheet_path).resolve()

        files: List[Path] = []
        for path in sorted(source.rglob("*")):
            if not path.is_file() or path.suffix == ".scss":
                continue
            relative = path.relative_to(source)
            if any(part.startswith(("_", ".")) for part in relative.parts):
                continue
            if relative.parts[0] in {"node_modules", "vendor"} or path == stylesheet:
                continue
            if any(path.is_relative_to(root) for root in excluded_roots):
                continue
            # Only read content files that survived the exclusions
            if path.suffix in CONTENT_EXTENSIONS and not self._is_plain_html(path):
                continue
            files.append(context.site.source / relative)
        return files
