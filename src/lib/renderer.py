"""
Renderer: document in, rendered markdown out

Binds an input document to an output destination (a .md file or stdout),
runs the assembler, appends the attribution footer and writes the result
in one piece.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import AppSettings, appsettings
from .assembler import Assembler
from .errors import ConfigurationError
from .log import LOG


class Renderer:
    """
    Renders one input document to one destination

    Attributes:
        input_name: Input file as given by the user (named in the footer)
        input_file: Absolute path of the input document
        output_file: Absolute path of the output file, None for stdout
        path_to: Input path relative to the output file's directory
    """

    def __init__(
        self,
        input_file: str,
        output_file: Optional[str] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        """
        Initialize renderer

        Args:
            input_file: Markdown document to render
            output_file: Destination .md file; stdout when None
            settings: Application settings (defaults to the appsettings singleton)

        Raises:
            ConfigurationError: output_file does not have the .md extension
        """
        self.settings = settings or appsettings
        self.input_name = str(input_file)
        self.input_file = Path(input_file).resolve()
        self.output_file: Optional[Path] = None
        self.path_to: Optional[str] = None
        self.block_count = 0

        if output_file:
            if not str(output_file).endswith('.md'):
                raise ConfigurationError(f"Output file {output_file} must have .md extension")
            self.output_file = Path(output_file).resolve()
            self.path_to = Path(os.path.relpath(self.input_file, self.output_file.parent)).as_posix()

    def footer_build(self) -> List[str]:
        """Attribution footer lines"""
        link = self.settings.branding_link
        if self.path_to:
            attribution = f"Page rendered from [{self.input_name}]({self.path_to}) by {link}"
        else:
            attribution = f"Page rendered by {link}"
        return [self.settings.footer_rule, attribution]

    def text_render(self, source: str, lame: bool = True) -> str:
        """
        Render document text without touching the filesystem

        Args:
            source: Markdown text
            lame: Omit the attribution footer

        Returns:
            Rendered markdown text
        """
        return '\n'.join(self.lines_render(source, lame))

    def lines_render(self, source: str, lame: bool = False) -> List[str]:
        """Assemble source and append the footer unless lame"""
        assembler = Assembler(source, self.input_file, self.settings)
        lines = list(assembler.assemble())
        self.block_count = assembler.state.block_count
        if not lame:
            lines.extend(self.footer_build())
        return lines

    def render(self, lame: bool = False) -> Dict[str, Any]:
        """
        Read the input, render it and write the result

        Args:
            lame: Omit the attribution footer

        Returns:
            dict with render results (output, line_count, block_count)

        Raises:
            OSError: Input unreadable or output unwritable
            Exception: Whatever executed block code raises
        """
        source = self.input_file.read_text(encoding='utf-8')
        LOG(f"Read {len(source)} characters from {self.input_file}", level=2)

        lines = self.lines_render(source, lame)
        text = '\n'.join(lines)

        if self.output_file:
            self.output_file.write_text(text, encoding='utf-8')
            LOG(f"Wrote {self.output_file}", level=2)
        else:
            sys.stdout.write(text)
            sys.stdout.flush()

        return {
            'output': str(self.output_file) if self.output_file else '<stdout>',
            'line_count': len(lines),
            'block_count': self.block_count,
        }


def options_validate(input_files: List[str], output: Optional[str], watch: bool) -> str:
    """
    Check an input/output/watch combination before rendering

    Args:
        input_files: Input files given by the user
        output: Output file, None for stdout
        watch: Watch mode requested

    Returns:
        The single input file

    Raises:
        ConfigurationError: Not exactly one input file, or watch without output
    """
    if len(input_files) != 1:
        raise ConfigurationError("Must specify exactly one input file")
    if watch and not output:
        raise ConfigurationError("--watch option requires --output=[output_file] option")
    return input_files[0]
