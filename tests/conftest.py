"""Pytest configuration and fixtures."""

import base64
import io
import json
from io import BytesIO

import pytest
from PIL import Image
from rich.console import Console

from nbframe.config import NbframeConfig, reset_config
from nbframe.preview.terminal import NotebookPreview, TerminalGeometry


@pytest.fixture(autouse=True)
def reset_config_after_test():
    """Reset global config after each test."""
    yield
    reset_config()


def make_png(width=4, height=4, color=(255, 0, 0, 255)) -> bytes:
    """Create a small PNG image."""
    img = Image.new("RGBA", (width, height), color=color)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def png_base64(width=4, height=4, color=(255, 0, 0, 255)) -> str:
    """Base64 PNG with the trailing newline Jupyter writes."""
    return base64.b64encode(make_png(width, height, color)).decode("ascii") + "\n"


@pytest.fixture
def sample_notebook_data():
    """Sample nbformat 4.5 notebook covering every cell and output kind."""
    return {
        "cells": [
            {
                "cell_type": "markdown",
                "id": "intro",
                "metadata": {},
                "source": ["# Analysis\n", "\n", "Some **bold** text."],
            },
            {
                "cell_type": "code",
                "id": "assign",
                "execution_count": 1,
                "metadata": {},
                "source": ["x = 1\n", "y = 2"],
                "outputs": [
                    {"output_type": "stream", "name": "stdout", "text": ["line1\n", "line2"]},
                ],
            },
            {
                "cell_type": "code",
                "id": "plot",
                "execution_count": None,
                "metadata": {},
                "source": ["plot()"],
                "outputs": [
                    {
                        "output_type": "display_data",
                        "metadata": {},
                        "data": {
                            "image/png": png_base64(),
                            "text/plain": ["<Figure size 4x4>"],
                        },
                    },
                    {
                        "output_type": "display_data",
                        "metadata": {},
                        "data": {
                            "text/plain": ["a\n", "b"],
                            "application/json": {"key": "value"},
                        },
                    },
                ],
            },
            {
                "cell_type": "raw",
                "id": "raw",
                "metadata": {},
                "source": ["raw text"],
            },
        ],
        "metadata": {
            "kernelspec": {
                "display_name": "Python 3",
                "language": "python",
                "name": "python3",
            },
            "language_info": {"name": "python", "version": "3.11.4"},
        },
        "nbformat": 4,
        "nbformat_minor": 5,
    }


@pytest.fixture
def notebook_file(tmp_path, sample_notebook_data):
    """Sample notebook written to disk."""
    path = tmp_path / "sample.ipynb"
    path.write_text(json.dumps(sample_notebook_data), encoding="utf-8")
    return path


@pytest.fixture
def console():
    """Non-terminal console with a fixed size writing to memory."""
    return Console(file=io.StringIO(), width=80, height=24, color_system=None, legacy_windows=False)


@pytest.fixture
def make_preview(console):
    """Build a preview over the in-memory console."""

    def _make(image_protocol="halfblock", width=80, height=24, **kwargs):
        config = NbframeConfig(image_protocol=image_protocol, **kwargs)
        return NotebookPreview(
            console=console,
            config=config,
            geometry=TerminalGeometry(width=width, height=height),
        )

    return _make


@pytest.fixture
def png_factory():
    """Factory for raw PNG bytes."""
    return make_png


@pytest.fixture
def png_b64_factory():
    """Factory for base64 PNG payloads."""
    return png_base64
