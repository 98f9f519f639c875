"""
Unit Tests for Style Compiler
=============================

SCSS compilation with libsass.
"""

from pathlib import Path

import pytest

from ogcards.core.styles.compiler import StyleCompilationError, StyleCompiler


class TestStyleCompiler:
    """Test SCSS compilation."""

    @pytest.fixture
    def compiler(self, test_settings):
        return StyleCompiler(test_settings)

    def test_compile_string(self, compiler):
        css = compiler.compile("$c: #fff; a { b { color: $c; } }")
        assert "a b" in css
        assert "#fff" in css

    def test_output_style_override(self, test_settings):
        css = StyleCompiler(test_settings, output_style="expanded").compile("a { color: red; }")
        assert "a {\n" in css

    def test_compile_error(self, compiler):
        with pytest.raises(StyleCompilationError, match="Stylesheet compilation failed"):
            compiler.compile("a { color: $undefined; }")

    def test_compile_file_strips_front_matter(self, compiler, site_source: Path):
        css = compiler.compile_file(site_source / "assets" / "css" / "main.scss")
        assert "---" not in css
        assert ".open-graph-card h1" in css
        assert "#dc3545" in css

    def test_compile_file_resolves_partials(self, compiler, tmp_path: Path):
        (tmp_path / "_colors.scss").write_text("$accent: #123456;\n", encoding="utf-8")
        main = tmp_path / "main.scss"
        main.write_text('@import "colors";\np { color: $accent; }\n', encoding="utf-8")
        assert "#123456" in compiler.compile_file(main)

    def test_missing_file(self, compiler, tmp_path: Path):
        with pytest.raises(StyleCompilationError, match="not readable"):
            compiler.compile_file(tmp_path / "missing.scss")
