"""Decode, resize and place embedded images inside the content column."""

import base64
import binascii
import logging
import math
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING, Optional

from PIL import Image, UnidentifiedImageError

from nbframe import ImageDecodeError
from nbframe.rendering.graphics import ESC, FittedImage, GraphicsBackend

if TYPE_CHECKING:
    from nbframe.preview.terminal import CursorToken

logger = logging.getLogger("nbframe.images")

SAVE_CURSOR = f"{ESC}7"
RESTORE_CURSOR = f"{ESC}8"


@dataclass(frozen=True)
class RenderResult:
    """Outcome of placing an image.

    Attributes:
        protocol: Backend that drew the image ("none" if nothing was drawn)
        columns: Width of the drawn box in terminal columns
        rows: Height of the drawn box in terminal rows
        source_size: Original image size in pixels
    """

    protocol: str
    columns: int
    rows: int
    source_size: tuple[int, int]


def fit_within(size: tuple[int, int], max_columns: int, max_rows: int) -> tuple[tuple[int, int], int, int]:
    """Scale an image size down to fit a cell box, preserving aspect ratio.

    One column holds one pixel and one row holds two pixels. Images that
    already fit are left at their native size.

    Args:
        size: Image size in pixels
        max_columns: Maximum box width
        max_rows: Maximum box height

    Returns:
        tuple: (pixel size, columns, rows)
    """
    width, height = size
    max_columns = max(1, max_columns)
    max_pixel_rows = 2 * max(1, max_rows)

    scale = min(1.0, max_columns / width, max_pixel_rows / height)
    new_width = max(1, min(max_columns, round(width * scale)))
    new_height = max(1, min(max_pixel_rows, round(height * scale)))

    return (new_width, new_height), new_width, math.ceil(new_height / 2)


class ImagePlacer:
    """Draw base64 images at a fixed offset inside the content column."""

    def __init__(self, backend: Optional[GraphicsBackend]):
        """Initialize the placer.

        Args:
            backend: Graphics backend, or None to only measure images
        """
        self.backend = backend

    @property
    def protocol(self) -> str:
        return self.backend.name if self.backend else "none"

    def decode(self, payload: str | list[str]) -> bytes:
        """Decode a base64 payload, ignoring trailing whitespace.

        Raises:
            ImageDecodeError: If the payload is not valid base64
        """
        if isinstance(payload, list):
            payload = "".join(payload)
        try:
            return base64.b64decode(payload.rstrip())
        except (binascii.Error, ValueError) as e:
            raise ImageDecodeError(f"Invalid base64 image payload: {e}") from e

    def load(self, data: bytes) -> Image.Image:
        """Decode raster bytes into an RGBA image.

        Raises:
            ImageDecodeError: If the bytes are corrupt or the codec is unsupported
        """
        try:
            with Image.open(BytesIO(data)) as img:
                img.load()
                return img.convert("RGBA")
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Unsupported or corrupt image: {e}") from e

    def place(
        self,
        payload: str | list[str],
        max_width: int,
        max_height: int,
        origin_column: int,
        cursor: "CursorToken",
    ) -> RenderResult:
        """Decode, fit and draw an image.

        Rows for the image are reserved through the cursor token first;
        the image is then drawn over them, top-aligned, starting at
        `origin_column`, and the cursor is restored to the line after the
        reserved rows.

        Args:
            payload: Base64 image data
            max_width: Maximum width in columns
            max_height: Maximum height in rows
            origin_column: Zero-based column of the image's left edge
            cursor: Write access yielded by the layout engine

        Returns:
            RenderResult: What was drawn

        Raises:
            ImageDecodeError: If the payload cannot be decoded
        """
        data = self.decode(payload)
        image = self.load(data)
        pixel_size, columns, rows = fit_within(image.size, max_width, max_height)
        logger.debug(
            "Image %dx%d fitted to %dx%d cells (%s)",
            image.width, image.height, columns, rows, self.protocol,
        )

        if self.backend is None:
            return RenderResult("none", columns, rows, image.size)

        fitted = FittedImage(image=image, data=data, pixel_size=pixel_size, columns=columns, rows=rows)
        encoded = self.backend.encode(fitted)

        cursor.reserve(rows)
        sequence = [SAVE_CURSOR, f"{ESC}[{rows}A"]
        for i, row in enumerate(encoded):
            if i:
                sequence.append(f"{ESC}[1B")
            sequence.append(f"{ESC}[{origin_column + 1}G")
            sequence.append(row)
        sequence.append(RESTORE_CURSOR)
        cursor.write("".join(sequence))

        return RenderResult(self.backend.name, columns, rows, image.size)
