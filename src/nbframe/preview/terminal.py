"""Terminal preview of notebooks using Rich.

Layout::

    ───────┬──────────────────────────
           │ File: demo.ipynb  Kernel: Python 3
    ───────┼──────────────────────────
      MD   │ # Title
    ───────┼──────────────────────────
     Code  │ x = 1
           ├╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌╌
      [1]  │ output
    ───────┴──────────────────────────
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from rich.console import Console
from rich.style import Style
from rich.text import Text

from nbframe import ImageDecodeError, UnsupportedOutputMimeError
from nbframe.config import NbframeConfig, get_config
from nbframe.models import (
    Cell,
    CodeCell,
    DisplayDataOutput,
    ErrorOutput,
    Notebook,
    StreamOutput,
)
from nbframe.rendering.formatter import ContentFormatter
from nbframe.rendering.graphics import select_backend
from nbframe.rendering.images import ImagePlacer
from nbframe.rendering.reflow import MarkdownReflow

logger = logging.getLogger("nbframe.preview")

LABEL_WIDTH = 7
# Image left edge: label column, the │ glyph, then one space.
IMAGE_ORIGIN_COLUMN = LABEL_WIDTH + 2
MIN_CONTENT_WIDTH = 2


@dataclass(frozen=True)
class TerminalGeometry:
    """Terminal size captured once at the start of a render.

    Attributes:
        width: Terminal columns
        height: Terminal rows
    """

    width: int
    height: int

    @classmethod
    def capture(
        cls,
        console: Console,
        width: Optional[int] = None,
        height: Optional[int] = None,
    ) -> "TerminalGeometry":
        """Read the console size, applying any overrides."""
        size = console.size
        return cls(width=width or size.width, height=height or size.height)

    @property
    def content_width(self) -> int:
        """Columns right of the label column and its separator glyph."""
        return max(MIN_CONTENT_WIDTH, self.width - LABEL_WIDTH - 1)

    @property
    def text_width(self) -> int:
        """Columns available to text after the one space gutter."""
        return self.content_width - 1


class CursorToken:
    """Write access to the terminal stream, held by one writer at a time.

    The layout engine holds it while it prints rows. It yields it to the
    image placer, which may only reserve blank framed rows and write raw
    escape sequences until the layout engine takes it back.
    """

    def __init__(self, console: Console, reserve_row: Callable[[], None]):
        self._console = console
        self._reserve_row = reserve_row
        self.yielded = False

    def reserve(self, rows: int) -> None:
        """Print `rows` empty framed rows to draw over."""
        self._require()
        for _ in range(rows):
            self._reserve_row()

    def write(self, data: str) -> None:
        """Write raw escape sequences to the terminal."""
        self._require()
        self._console.file.write(data)
        self._console.file.flush()

    def _require(self) -> None:
        if not self.yielded:
            raise RuntimeError("Cursor is held by the layout engine")


class _OnceLabel:
    """A label shown on the first row it is taken for, blank afterwards."""

    def __init__(self, text: str):
        self._text = text

    def take(self) -> str:
        text, self._text = self._text, ""
        return text


class NotebookPreview:
    """Render a notebook as a boxed two-column view."""

    def __init__(
        self,
        console: Optional[Console] = None,
        config: Optional[NbframeConfig] = None,
        geometry: Optional[TerminalGeometry] = None,
        placer: Optional[ImagePlacer] = None,
    ):
        """Initialize terminal preview.

        Args:
            console: Rich console to use (creates new if None)
            config: Configuration (global config if None)
            geometry: Fixed terminal geometry (captured from console if None)
            placer: Image placer (built from the configured protocol if None)
        """
        self.console = console or Console()
        self.config = config or get_config()
        self.geometry = geometry or TerminalGeometry.capture(
            self.console, self.config.width, self.config.height
        )
        self.formatter = ContentFormatter()
        self.reflow = MarkdownReflow(self.console, code_theme=self.config.code_theme)
        self.placer = placer or ImagePlacer(select_backend(self.config.image_protocol))

        self._border = Style.parse(self.config.border_style)
        self._cursor = CursorToken(self.console, self._reserve_row)

    def show(self, notebook: Notebook, file_name: Path | str, kernel_display_name: Optional[str] = None) -> None:
        """Render the whole notebook.

        Args:
            notebook: Notebook to render
            file_name: Path shown in the header
            kernel_display_name: Kernel shown in the header
                (defaults to the notebook's kernelspec display name)
        """
        kernel = kernel_display_name or notebook.metadata.kernel_display_name
        language = notebook.metadata.kernel_language
        logger.debug(
            "Rendering %d cells at %dx%d",
            len(notebook.cells), self.geometry.width, self.geometry.height,
        )

        self._separator("┬")
        header = Text(" File: ")
        header.append(Path(file_name).name, style="bold")
        header.append("  Kernel: ")
        header.append(kernel, style="bold")
        self._row("", header, gutter=False)

        for cell in notebook.cells:
            self._separator("┼")
            self._show_cell(cell, language)

        self._separator("┴")

    def _show_cell(self, cell: Cell, language: str) -> None:
        label = _OnceLabel(cell.label)
        source = self.formatter.format(cell, language)

        for line in self.reflow.reflow(source, self.geometry.text_width):
            self._row(label.take(), line.to_text())

        # Empty cells still get their label
        if label.take():
            self._row(cell.label, Text())

        if isinstance(cell, CodeCell):
            self._show_outputs(cell)

    def _show_outputs(self, cell: CodeCell) -> None:
        badge = _OnceLabel(cell.badge)

        for output in cell.outputs:
            self._sub_separator()

            if isinstance(output, StreamOutput):
                self._show_lines(output.lines(), badge)
            elif isinstance(output, ErrorOutput):
                self._show_lines("\n".join(output.traceback).splitlines(), badge)
            elif isinstance(output, DisplayDataOutput):
                for mime, value in output.entries():
                    self._show_mime(mime, value, badge)

    def _show_lines(self, lines: list[str], badge: _OnceLabel) -> None:
        width = self.geometry.text_width
        for line in lines:
            text = Text.from_ansi(line)
            text.expand_tabs(self.console.tab_size)
            if text.cell_len <= width:
                self._row(badge.take(), text)
                continue
            for piece in text.wrap(self.console, width, overflow="fold"):
                self._row(badge.take(), piece)

    def _show_mime(self, mime: str, value: Any, badge: _OnceLabel) -> None:
        try:
            renderer = self._renderer_for(mime)
            renderer(mime, value, badge)
        except UnsupportedOutputMimeError as e:
            logger.warning("Skipping output: %s", e)
            self._marker(badge.take(), f"Unsupported data output ({mime})")
        except ImageDecodeError as e:
            logger.warning("Skipping %s output: %s", mime, e)
            self._marker(badge.take(), f"Unsupported or corrupt image ({mime})")

    def _renderer_for(self, mime: str) -> Callable[[str, Any, _OnceLabel], None]:
        if mime.startswith("image/"):
            return self._show_image
        if mime == "text/plain":
            return self._show_plain
        raise UnsupportedOutputMimeError(mime)

    def _show_plain(self, mime: str, value: Any, badge: _OnceLabel) -> None:
        text = value if isinstance(value, str) else "".join(value)
        content = Text(text.replace("\n", "\\n"), style="italic")
        content.expand_tabs(self.console.tab_size)
        content.truncate(self.geometry.text_width, overflow="ellipsis")
        self._row(badge.take(), content)

    def _show_image(self, mime: str, value: Any, badge: _OnceLabel) -> None:
        max_width = max(1, self.geometry.content_width - self.config.image_margin)
        max_height = max(1, self.geometry.height // 2)

        with self._yield_cursor() as cursor:
            result = self.placer.place(value, max_width, max_height, IMAGE_ORIGIN_COLUMN, cursor)

        if result.protocol == "none":
            width, height = result.source_size
            self._row(badge.take(), Text(f"[{mime} {width}x{height}]", style="dim"))

    def _marker(self, label: str, message: str) -> None:
        self._row(label, Text(message, style="bright_yellow"))

    # Frame

    @contextmanager
    def _yield_cursor(self) -> Iterator[CursorToken]:
        """Hand the terminal to the image placer, then take it back."""
        self._cursor.yielded = True
        try:
            yield self._cursor
        finally:
            self._cursor.yielded = False

    def _separator(self, junction: str) -> None:
        line = "─" * LABEL_WIDTH + junction + "─" * self.geometry.content_width
        self._print(Text(line, style=self._border))

    def _sub_separator(self) -> None:
        row = Text(" " * LABEL_WIDTH)
        row.append("├" + "╌" * self.geometry.content_width, style=self._border)
        self._print(row)

    def _row(self, label: str, content: Text, gutter: bool = True) -> None:
        row = Text(f"{label:^{LABEL_WIDTH}}")
        row.append("│", style=self._border)
        if gutter:
            row.append(" ")
        row.append_text(content)
        self._print(row)

    def _reserve_row(self) -> None:
        row = Text(" " * LABEL_WIDTH)
        row.append("│", style=self._border)
        self._write(row)

    def _print(self, row: Text) -> None:
        if self._cursor.yielded:
            raise RuntimeError("Text row emitted while an image is being placed")
        self._write(row)

    def _write(self, row: Text) -> None:
        self.console.print(row, no_wrap=True, overflow="crop", crop=True, soft_wrap=False)
