"""Jupyter notebook parsing functionality."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from nbframe import FileAccessError, MalformedDocumentError, UnsupportedVersionError
from nbframe.models import Notebook, NotebookVersion

logger = logging.getLogger("nbframe.parsing")

SUPPORTED_VERSION = NotebookVersion(4, 5)


def describe_validation_error(error: ValidationError) -> str:
    """Summarize a pydantic error as `path: message` entries.

    Args:
        error: Validation error raised by a model

    Returns:
        str: Human readable description of the violated expectations
    """
    problems = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"]) or "<root>"
        problems.append(f"{location}: {detail['msg']}")
    return "; ".join(problems)


class NotebookParser:
    """Strict parser for nbformat 4.5 notebooks.

    The whole document is validated before anything is rendered, so a
    parse failure never leaves partial output behind.
    """

    def __init__(self, supported_version: NotebookVersion = SUPPORTED_VERSION):
        self.supported_version = supported_version

    def parse(self, filepath: Path | str) -> Notebook:
        """Read and parse a notebook file.

        Args:
            filepath: Path to the .ipynb file

        Returns:
            Notebook: Parsed notebook

        Raises:
            FileAccessError: If the file is missing or unreadable
            UnsupportedVersionError: If the format version is not supported
            MalformedDocumentError: If the document structure is invalid
        """
        filepath = Path(filepath)

        try:
            data = filepath.read_bytes()
        except FileNotFoundError as e:
            raise FileAccessError(f"Notebook file not found: {filepath}") from e
        except OSError as e:
            raise FileAccessError(f"Failed to read notebook {filepath}: {e}") from e

        logger.debug("Read %d bytes from %s", len(data), filepath)
        return self.parse_bytes(data, source=str(filepath))

    def parse_bytes(self, data: bytes | str, source: str = "<notebook>") -> Notebook:
        """Parse notebook JSON.

        Args:
            data: UTF-8 encoded JSON document
            source: Name used in error messages

        Returns:
            Notebook: Parsed notebook

        Raises:
            UnsupportedVersionError: If the format version is not supported
            MalformedDocumentError: If the document structure is invalid
        """
        try:
            raw = json.loads(data)
        except UnicodeDecodeError as e:
            raise MalformedDocumentError(f"{source} is not valid UTF-8: {e}") from e
        except json.JSONDecodeError as e:
            raise MalformedDocumentError(f"{source} is not valid JSON: {e}") from e

        if not isinstance(raw, dict):
            raise MalformedDocumentError(f"{source}: top level must be a JSON object")

        self._check_version(raw, source)

        try:
            notebook = Notebook.model_validate(raw)
        except ValidationError as e:
            raise MalformedDocumentError(f"{source}: {describe_validation_error(e)}") from e

        logger.debug("Parsed %s: %d cells", source, len(notebook.cells))
        return notebook

    def _check_version(self, raw: dict, source: str) -> None:
        """Reject unsupported format versions before validating the body."""
        major = raw.get("nbformat")
        minor = raw.get("nbformat_minor")

        for key, value in (("nbformat", major), ("nbformat_minor", minor)):
            if value is None:
                raise MalformedDocumentError(f"{source}: {key}: Field required")
            if not isinstance(value, int) or isinstance(value, bool):
                raise MalformedDocumentError(f"{source}: {key}: must be an integer")

        found = NotebookVersion(major, minor)
        if found != self.supported_version:
            raise UnsupportedVersionError(tuple(found), tuple(self.supported_version))
