"""Terminal graphics protocols for inline images.

Backend priority when auto-detecting:
    1. Kitty graphics protocol (kitty, ghostty)
    2. iTerm2 inline image protocol (iTerm2, WezTerm, mintty)
    3. Unicode half-block cells with truecolor SGR (everywhere else)

Every backend draws into a box of `columns` x `rows` terminal cells that
the caller has already reserved; none of them may scroll the terminal.
"""

import base64
import os
from dataclasses import dataclass
from io import BytesIO
from typing import Mapping, Optional, Protocol

from PIL import Image

ESC = "\x1b"
RESET = f"{ESC}[0m"
# Kitty payloads are sent in chunks of at most 4096 base64 bytes.
KITTY_CHUNK = 4096
ALPHA_THRESHOLD = 128


@dataclass
class FittedImage:
    """A decoded image and the cell box it is drawn into.

    Attributes:
        image: Decoded image in RGBA mode, original resolution
        data: Original encoded bytes
        pixel_size: Size after fit-within resize, one pixel per column
            and two pixels per row
        columns: Width of the cell box
        rows: Height of the cell box
    """

    image: Image.Image
    data: bytes
    pixel_size: tuple[int, int]
    columns: int
    rows: int


class GraphicsBackend(Protocol):
    """Protocol for terminal graphics backends."""

    @property
    def name(self) -> str:
        """Backend identifier."""
        ...

    def encode(self, fitted: FittedImage) -> list[str]:
        """Encode an image as one escape string per terminal row.

        Protocols that draw the whole box at once return a single string.
        """
        ...


class HalfBlockBackend:
    """Render pixels as Unicode half-blocks (▀ ▄) with 24-bit colors.

    Each cell carries two vertical pixels: the upper one as foreground of
    ▀ and the lower one as background. Transparent pixels leave the cell
    untouched so the terminal background shows through.
    """

    @property
    def name(self) -> str:
        return "halfblock"

    def encode(self, fitted: FittedImage) -> list[str]:
        img = fitted.image.resize(fitted.pixel_size, Image.Resampling.LANCZOS)
        width, height = img.size
        pixels = img.load()

        rows = []
        for y in range(0, height, 2):
            cells = []
            for x in range(width):
                top = pixels[x, y]
                bottom = pixels[x, y + 1] if y + 1 < height else (0, 0, 0, 0)
                cells.append(self._cell(top, bottom))
            rows.append("".join(cells) + RESET)
        return rows

    def _cell(self, top: tuple, bottom: tuple) -> str:
        top_visible = top[3] >= ALPHA_THRESHOLD
        bottom_visible = bottom[3] >= ALPHA_THRESHOLD

        if top_visible and bottom_visible:
            return f"{ESC}[38;2;{top[0]};{top[1]};{top[2]}m{ESC}[48;2;{bottom[0]};{bottom[1]};{bottom[2]}m▀"
        if top_visible:
            return f"{RESET}{ESC}[38;2;{top[0]};{top[1]};{top[2]}m▀"
        if bottom_visible:
            return f"{RESET}{ESC}[38;2;{bottom[0]};{bottom[1]};{bottom[2]}m▄"
        # Skip the cell
        return f"{RESET}{ESC}[1C"


class KittyBackend:
    """Kitty graphics protocol backend.

    Protocol: https://sw.kovidgoyal.net/kitty/graphics-protocol/
    The image is transmitted as PNG and scaled by the terminal into the
    cell box; `C=1` keeps the cursor where it is.
    """

    @property
    def name(self) -> str:
        return "kitty"

    def encode(self, fitted: FittedImage) -> list[str]:
        buf = BytesIO()
        fitted.image.save(buf, format="PNG")
        encoded = base64.standard_b64encode(buf.getvalue()).decode("ascii")

        chunks = [encoded[i : i + KITTY_CHUNK] for i in range(0, len(encoded), KITTY_CHUNK)]
        parts = []
        for i, chunk in enumerate(chunks):
            more = 1 if i < len(chunks) - 1 else 0
            if i == 0:
                control = f"a=T,f=100,q=2,C=1,c={fitted.columns},r={fitted.rows},m={more}"
            else:
                control = f"m={more}"
            parts.append(f"{ESC}_G{control};{chunk}{ESC}\\")
        return ["".join(parts)]


class ITermBackend:
    """iTerm2 inline image protocol backend.

    Protocol: https://iterm2.com/documentation-images.html
    Supported by iTerm2, WezTerm and mintty. The original bytes are sent
    as-is; the terminal decodes them.
    """

    @property
    def name(self) -> str:
        return "iterm"

    def encode(self, fitted: FittedImage) -> list[str]:
        encoded = base64.standard_b64encode(fitted.data).decode("ascii")
        args = (
            f"inline=1"
            f";size={len(fitted.data)}"
            f";width={fitted.columns}"
            f";height={fitted.rows}"
            f";preserveAspectRatio=1"
        )
        return [f"{ESC}]1337;File={args}:{encoded}\x07"]


def detect_protocol(environ: Optional[Mapping[str, str]] = None) -> str:
    """Detect the best graphics protocol from the environment.

    Multiplexers (tmux, screen) strip graphics escape sequences, so they
    always get half-blocks.

    Args:
        environ: Environment to inspect (defaults to os.environ)

    Returns:
        str: "kitty", "iterm" or "halfblock"
    """
    env = os.environ if environ is None else environ
    term = env.get("TERM", "").lower()
    term_program = env.get("TERM_PROGRAM", "").lower()

    if env.get("TMUX") or env.get("STY") or "screen" in term:
        return "halfblock"

    if term_program in ("kitty", "ghostty") or term == "xterm-kitty":
        return "kitty"

    if term_program in ("iterm.app", "wezterm", "mintty"):
        return "iterm"

    return "halfblock"


def select_backend(protocol: str, environ: Optional[Mapping[str, str]] = None) -> Optional[GraphicsBackend]:
    """Create the backend for a configured protocol.

    Args:
        protocol: "auto", "halfblock", "kitty", "iterm" or "none"
        environ: Environment used when auto-detecting

    Returns:
        The backend, or None when images are disabled
    """
    if protocol == "none":
        return None
    if protocol == "auto":
        protocol = detect_protocol(environ)

    if protocol == "kitty":
        return KittyBackend()
    if protocol == "iterm":
        return ITermBackend()
    if protocol == "halfblock":
        return HalfBlockBackend()
    raise ValueError(f"Unknown image protocol: {protocol!r}")
