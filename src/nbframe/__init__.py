"""nbframe - Render Jupyter notebooks in the terminal.

Cells, outputs and inline images laid out in a boxed two-column view.
"""

__version__ = "0.1.0"


class NbframeError(Exception):
    """Base exception for all nbframe errors."""

    pass


class MalformedDocumentError(NbframeError):
    """Raised when a notebook or kernel spec does not match its expected structure."""

    pass


class UnsupportedVersionError(NbframeError):
    """Raised when the notebook format version is not the supported one."""

    def __init__(self, found: tuple[int, int], supported: tuple[int, int]):
        self.found = found
        self.supported = supported
        super().__init__(
            f"Unsupported notebook format {found[0]}.{found[1]} "
            f"(only {supported[0]}.{supported[1]} is supported)"
        )


class FileAccessError(NbframeError):
    """Raised when a notebook or kernel spec file is missing or unreadable."""

    pass


class ImageDecodeError(NbframeError):
    """Raised when an embedded image payload cannot be decoded."""

    pass


class UnsupportedOutputMimeError(NbframeError):
    """Raised when a display output has no renderer for its MIME type."""

    def __init__(self, mime: str):
        self.mime = mime
        super().__init__(f"No renderer for MIME type {mime!r}")
