"""
Style Compiler
==============

Compile the site's SCSS stylesheet to CSS with libsass.
The compiled text is shared by every preview page of a build.
"""

from typing import Any, List, Optional
from pathlib import Path
import re

import sass  # type: ignore[import-untyped]

from ogcards.config.logging import get_logger
from ogcards.config.settings import Settings, get_settings
from ogcards.core.errors import OgcardsError

logger = get_logger(__name__)

FRONT_MATTER_FENCE = re.compile(r"^---\s*$", re.MULTILINE)


class StyleCompilationError(OgcardsError):
    """Exception raised when the stylesheet cannot be read or compiled."""

    pass


class StyleCompiler:
    """libsass-backed SCSS compiler."""

    def __init__(
        self, settings: Optional[Settings] = None, output_style: Optional[str] = None
    ) -> None:
        self.settings = settings or get_settings()
        self.output_style = output_style or self.settings.sass_output_style
        self.logger: Any = logger.bind(component="style_compiler")  # structlog.BoundLoggerBase

    def compile(self, source: str, include_paths: Optional[List[Path]] = None) -> str:
        """
        Compile SCSS source text.

        Args:
            source: SCSS source
            include_paths: Directories searched by ``@import``

        Returns:
            Compiled CSS text

        Raises:
            StyleCompilationError: If libsass rejects the source
        """
        try:
            return sass.compile(
                string=source,
                output_style=self.output_style,
                include_paths=[str(path) for path in include_paths or []],
            )
        except sass.CompileError as e:
            self.logger.error("Stylesheet compilation failed", error=str(e))
            raise StyleCompilationError(f"Stylesheet compilation failed: {e}") from e

    def compile_file(self, path: Path) -> str:
        """
        Read and compile a stylesheet file.

        Jekyll-style ``---`` front matter fences are removed before compiling.
        The stylesheet's directory, and a ``node_modules`` directory beside it
        or in the site root when present, are added to the include path.
        """
        try:
            source = path.read_text(encoding="utf-8")
        except OSError as e:
            self.logger.error("Stylesheet not readable", path=str(path), error=str(e))
            raise StyleCompilationError(f"Stylesheet not readable: {path}") from e

        source = FRONT_MATTER_FENCE.sub("", source)
        include_paths = [path.parent]
        for candidate in (path.parent / "node_modules", self.settings.source_path / "node_modules"):
            if candidate.is_dir():
                include_paths.append(candidate)

        css = self.compile(source, include_paths)
        self.logger.info("Stylesheet compiled", path=str(path), css_length=len(css))
        return css
