"""Markdown reflow to a fixed column width using Rich."""

from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.segment import Segment
from rich.text import Span, Text


@dataclass(frozen=True)
class StyledLine:
    """One wrapped display line.

    Attributes:
        segments: Styled runs of text making up the line
    """

    segments: tuple[Segment, ...]

    @property
    def plain(self) -> str:
        """Visible text without styling."""
        return "".join(segment.text for segment in self.segments if not segment.control)

    @property
    def cell_length(self) -> int:
        """Width of the line in terminal columns."""
        return Segment.get_line_length(list(self.segments))

    @property
    def spans(self) -> list[Span]:
        """Style spans over `plain`."""
        return self.to_text().spans

    def to_text(self) -> Text:
        """Convert to a Rich Text for composition with other cells."""
        text = Text(end="")
        for segment in self.segments:
            if not segment.control:
                text.append(segment.text, segment.style)
        return text


class MarkdownReflow:
    """Render markdown into width-bounded styled lines.

    Fenced code keeps its whitespace; code lines wider than the target
    width are hard-wrapped, as Rich's Syntax does for markdown code blocks.
    """

    def __init__(self, console: Optional[Console] = None, code_theme: str = "monokai"):
        """Initialize the reflow engine.

        Args:
            console: Console whose color system and options are used
            code_theme: Pygments theme for fenced code
        """
        self.console = console or Console()
        self.code_theme = code_theme

    def reflow(self, text: str, width: int) -> Iterator[StyledLine]:
        """Lazily produce wrapped lines for a markdown block.

        Args:
            text: Markdown text
            width: Maximum visible columns per line

        Yields:
            StyledLine: Lines no wider than `width`

        Raises:
            ValueError: If width is less than 1
        """
        if width < 1:
            raise ValueError(f"Reflow width must be at least 1, got {width}")

        markdown = Markdown(text, code_theme=self.code_theme, hyperlinks=False)
        options = self.console.options.update_width(width)
        segments = self.console.render(markdown, options)

        for line in Segment.split_and_crop_lines(
            segments, width, pad=False, include_new_lines=False
        ):
            yield StyledLine(tuple(line))
