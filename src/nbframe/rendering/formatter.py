"""Cell source formatting ahead of markdown reflow."""

from nbframe.models import Cell, CodeCell

FENCE = "```"


class ContentFormatter:
    """Turn a cell's source lines into a markdown text block.

    Code cells are wrapped in a fenced block tagged with the notebook's
    kernel language; markdown and raw cells pass through unchanged.
    """

    def format(self, cell: Cell, language: str) -> str:
        """Format a cell for reflow.

        Args:
            cell: Cell to format
            language: Language tag for the code fence

        Returns:
            str: Markdown text
        """
        if isinstance(cell, CodeCell):
            source = self.join_source(cell.source)
            return f"{FENCE}{language}\n{source}\n{FENCE}\n"

        return "".join(cell.source)

    def join_source(self, lines: list[str]) -> str:
        """Concatenate code source lines in order.

        Jupyter stores every line but the last with its newline. Lines
        stored without one still get a line break, so no two lines merge.

        Args:
            lines: Source lines

        Returns:
            str: Source text
        """
        parts = []
        for i, line in enumerate(lines):
            parts.append(line)
            if i < len(lines) - 1 and not line.endswith(("\n", "\r")):
                parts.append("\n")
        return "".join(parts)
