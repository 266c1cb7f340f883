"""Tests for image decoding and placement."""

import base64

import pytest
from PIL import Image

from nbframe import ImageDecodeError
from nbframe.rendering.graphics import HalfBlockBackend
from nbframe.rendering.images import RESTORE_CURSOR, SAVE_CURSOR, ImagePlacer, fit_within


class RecordingCursor:
    """Stand-in for the layout's cursor token."""

    def __init__(self):
        self.reserved = 0
        self.writes = []

    def reserve(self, rows):
        self.reserved += rows

    def write(self, data):
        self.writes.append(data)


class TestFitWithin:
    """Tests for fit_within."""

    def test_large_image_is_bounded(self):
        (w, h), columns, rows = fit_within((400, 200), 60, 12)

        assert columns <= 60
        assert rows <= 12
        assert (w, h) == (48, 24)
        assert (columns, rows) == (48, 12)

    def test_wide_image_is_bounded_by_width(self):
        (w, h), columns, rows = fit_within((1000, 100), 50, 20)

        assert columns == 50
        assert h == 5
        assert rows == 3

    def test_small_image_is_not_upscaled(self):
        assert fit_within((4, 4), 60, 12) == ((4, 4), 4, 2)

    @pytest.mark.parametrize("size", [(640, 480), (300, 900), (1920, 1080), (7, 3)])
    def test_aspect_ratio_preserved(self, size):
        (w, h), columns, rows = fit_within(size, 70, 12)

        assert columns <= 70
        assert rows <= 12
        assert abs(w / h - size[0] / size[1]) <= max(1 / h, 1 / w) * (size[0] / size[1] + 1)

    def test_degenerate_limits(self):
        (w, h), columns, rows = fit_within((100, 100), 0, 0)

        assert columns == 1
        assert rows == 1


class TestImagePlacer:
    """Tests for ImagePlacer class."""

    def test_decode_trims_trailing_whitespace(self, png_factory):
        data = png_factory()
        payload = base64.b64encode(data).decode("ascii") + "\n \n"

        assert ImagePlacer(None).decode(payload) == data

    def test_decode_joins_fragments(self, png_factory):
        encoded = base64.b64encode(png_factory()).decode("ascii")

        assert ImagePlacer(None).decode([encoded[:10], encoded[10:]]) == png_factory()

    def test_decode_invalid_base64(self):
        with pytest.raises(ImageDecodeError):
            ImagePlacer(None).decode("abc")

    def test_load_corrupt_bytes(self):
        with pytest.raises(ImageDecodeError, match="corrupt"):
            ImagePlacer(None).load(b"\x89PNG definitely not a png")

    def test_load_converts_to_rgba(self, png_factory):
        image = ImagePlacer(None).load(png_factory(3, 5))

        assert image.mode == "RGBA"
        assert image.size == (3, 5)

    def test_place_draws_inside_reserved_rows(self, png_b64_factory):
        placer = ImagePlacer(HalfBlockBackend())
        cursor = RecordingCursor()

        result = placer.place(png_b64_factory(400, 200), 60, 12, 9, cursor)

        assert result.protocol == "halfblock"
        assert result.source_size == (400, 200)
        assert result.columns <= 60
        assert result.rows <= 12
        assert cursor.reserved == result.rows

        (sequence,) = cursor.writes
        assert sequence.startswith(SAVE_CURSOR + f"\x1b[{result.rows}A")
        assert sequence.endswith(RESTORE_CURSOR)
        assert sequence.count("\x1b[10G") == result.rows

    def test_place_without_backend(self, png_b64_factory):
        cursor = RecordingCursor()

        result = ImagePlacer(None).place(png_b64_factory(), 60, 12, 9, cursor)

        assert result.protocol == "none"
        assert result.source_size == (4, 4)
        assert cursor.reserved == 0
        assert cursor.writes == []

    def test_place_corrupt_image_writes_nothing(self):
        cursor = RecordingCursor()
        payload = base64.b64encode(b"garbage").decode("ascii")

        with pytest.raises(ImageDecodeError):
            ImagePlacer(HalfBlockBackend()).place(payload, 60, 12, 9, cursor)

        assert cursor.reserved == 0
        assert cursor.writes == []

    def test_place_non_raster_format(self):
        svg = base64.b64encode(b"<svg xmlns='http://www.w3.org/2000/svg'/>").decode("ascii")

        with pytest.raises(ImageDecodeError):
            ImagePlacer(HalfBlockBackend()).place(svg, 60, 12, 9, RecordingCursor())

    def test_place_jpeg(self, tmp_path):
        path = tmp_path / "photo.jpg"
        Image.new("RGB", (20, 10), color=(0, 128, 255)).save(path, format="JPEG")
        payload = base64.b64encode(path.read_bytes()).decode("ascii")

        result = ImagePlacer(HalfBlockBackend()).place(payload, 60, 12, 9, RecordingCursor())

        assert (result.columns, result.rows) == (20, 5)
