"""
Renderer tests

Tests output destinations, the attribution footer and configuration checks.
"""

import pytest
from pathlib import Path

from runmd.config import AppSettings
from runmd.lib.errors import ConfigurationError
from runmd.lib.renderer import Renderer, options_validate


SOURCE = "# Demo\n\n```python --run\nprint('hi')\n```\n"


@pytest.fixture
def settings():
    return AppSettings(branding_link="[runmd](https://example.invalid/runmd)")


@pytest.fixture
def document(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    path = src / "guide.md"
    path.write_text(SOURCE, encoding="utf-8")
    return path


class TestOutputFileValidation:
    """Test the .md extension requirement"""

    def test_output_without_md_extension(self, document, tmp_path):
        """Non-.md output is rejected before anything is written"""
        output = tmp_path / "guide.txt"
        with pytest.raises(ConfigurationError, match="must have .md extension"):
            Renderer(str(document), str(output))
        assert not output.exists()

    def test_stdout_needs_no_output_file(self, document):
        """No output file means stdout"""
        renderer = Renderer(str(document))
        assert renderer.output_file is None
        assert renderer.path_to is None


class TestRenderToFile:
    """Test rendering into an output file"""

    def test_render_writes_output(self, document, tmp_path, settings):
        """Rendered text with footer lands in the output file"""
        out_dir = tmp_path / "out"
        out_dir.mkdir()
        output = out_dir / "guide.md"

        renderer = Renderer(str(document), str(output), settings)
        result = renderer.render()

        text = output.read_text(encoding="utf-8")
        assert text.split("\n") == [
            "# Demo",
            "",
            "```python",
            "print('hi')",
            "```",
            "",
            "⇒ hi",
            "",
            "----",
            f"Page rendered from [{document}](../src/guide.md) by [runmd](https://example.invalid/runmd)",
        ]
        assert result["output"] == str(output.resolve())
        assert result["block_count"] == 1
        assert result["line_count"] == 10

    def test_render_lame(self, document, tmp_path, settings):
        """lame suppresses the footer"""
        output = tmp_path / "guide.md"

        Renderer(str(document), str(output), settings).render(lame=True)

        text = output.read_text(encoding="utf-8")
        assert "Page rendered" not in text
        assert text.endswith("⇒ hi\n")

    def test_render_overwrites(self, document, tmp_path, settings):
        """Existing output is replaced as a whole"""
        output = tmp_path / "guide.md"
        output.write_text("stale content that is much longer than the new output " * 20)

        Renderer(str(document), str(output), settings).render(lame=True)
        assert "stale" not in output.read_text(encoding="utf-8")

    def test_block_error_leaves_output_untouched(self, tmp_path, settings):
        """A failing block aborts before the output is written"""
        source = tmp_path / "bad.md"
        source.write_text("```python --run\nraise RuntimeError('fail')\n```\n")
        output = tmp_path / "bad-out.md"

        with pytest.raises(RuntimeError, match="fail"):
            Renderer(str(source), str(output), settings).render()
        assert not output.exists()

    def test_missing_input(self, tmp_path):
        """Unreadable input propagates as OSError"""
        with pytest.raises(OSError):
            Renderer(str(tmp_path / "missing.md")).render()


class TestRenderToStdout:
    """Test rendering to standard output"""

    def test_stdout_footer(self, document, settings, capsys):
        """Stdout footer does not link the input"""
        Renderer(str(document), settings=settings).render()

        out = capsys.readouterr().out
        assert out.endswith("----\nPage rendered by [runmd](https://example.invalid/runmd)")
        assert "⇒ hi" in out

    def test_stdout_lame(self, document, settings, capsys):
        """lame output to stdout is just the rendered document"""
        result = Renderer(str(document), settings=settings).render(lame=True)

        out = capsys.readouterr().out
        assert out == "# Demo\n\n```python\nprint('hi')\n```\n\n⇒ hi\n"
        assert result["output"] == "<stdout>"


class TestTextRender:
    """Test in-memory rendering"""

    def test_text_render_without_blocks(self, document, settings):
        """Block-free text renders unchanged"""
        renderer = Renderer(str(document), settings=settings)
        text = "no blocks here\n```js\nx\n```"
        assert renderer.text_render(text) == text

    def test_text_render_with_footer(self, document, settings):
        """Footer is appended when not lame"""
        renderer = Renderer(str(document), settings=settings)
        assert renderer.text_render("body", lame=False).split("\n") == [
            "body",
            "----",
            "Page rendered by [runmd](https://example.invalid/runmd)",
        ]


class TestOptionsValidate:
    """Test the input/output/watch combination check"""

    def test_single_input(self):
        """Exactly one input file is returned"""
        assert options_validate(["doc.md"], None, False) == "doc.md"

    @pytest.mark.parametrize("input_files", [[], ["a.md", "b.md"]])
    def test_input_count(self, input_files):
        """Zero or several input files are a configuration error"""
        with pytest.raises(ConfigurationError, match="exactly one input file"):
            options_validate(input_files, "out.md", False)

    def test_watch_requires_output(self):
        """Watching stdout is a configuration error"""
        with pytest.raises(ConfigurationError, match="--watch option requires --output"):
            options_validate(["doc.md"], None, True)

    def test_watch_with_output(self):
        """Watching into an output file is accepted"""
        assert options_validate(["doc.md"], "out.md", True) == "doc.md"
