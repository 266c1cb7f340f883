"""Lookup of installed Jupyter kernel specs.

Kernel specs live in `<dir>/<kernel name>/kernel.json`. Directories are
searched user first, then system-wide, then site-local (`sys.prefix`).
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

from jupyter_core.paths import ENV_JUPYTER_PATH, SYSTEM_JUPYTER_PATH, jupyter_data_dir
from pydantic import ValidationError

from nbframe import FileAccessError, MalformedDocumentError
from nbframe.models import KernelSpec
from nbframe.parsing.notebook import describe_validation_error

logger = logging.getLogger("nbframe.kernels")

KERNEL_FILE = "kernel.json"


def default_kernel_dirs() -> list[Path]:
    """Kernel directories in priority order, without duplicates."""
    candidates = [Path(jupyter_data_dir())]
    candidates += [Path(p) for p in SYSTEM_JUPYTER_PATH]
    candidates += [Path(p) for p in ENV_JUPYTER_PATH]

    dirs: list[Path] = []
    for base in candidates:
        kernels = base / "kernels"
        if kernels not in dirs:
            dirs.append(kernels)
    return dirs


class KernelSpecLookup:
    """Resolve kernel names to their installed kernel specs."""

    def __init__(self, directories: Optional[Iterable[Path | str]] = None):
        """Initialize the lookup.

        Args:
            directories: Search directories in priority order
                (defaults to the Jupyter data paths)
        """
        if directories is None:
            self.directories = default_kernel_dirs()
        else:
            self.directories = [Path(d) for d in directories]

    def find(self, name: str) -> KernelSpec:
        """Find a kernel spec by name.

        Args:
            name: Kernel name (the directory name of the spec)

        Returns:
            KernelSpec: First matching spec in priority order

        Raises:
            FileAccessError: If no directory holds the kernel
            MalformedDocumentError: If the kernel.json is invalid
        """
        for directory in self.directories:
            spec_file = directory / name / KERNEL_FILE
            if spec_file.is_file():
                logger.debug("Kernel %r resolved to %s", name, spec_file)
                return self.load(spec_file)

        searched = ", ".join(str(d) for d in self.directories)
        raise FileAccessError(f"Kernel {name!r} not found (searched: {searched})")

    def load(self, spec_file: Path) -> KernelSpec:
        """Load a single kernel.json file.

        Args:
            spec_file: Path to kernel.json

        Returns:
            KernelSpec: Parsed kernel spec
        """
        try:
            raw = spec_file.read_text(encoding="utf-8")
        except OSError as e:
            raise FileAccessError(f"Failed to read kernel spec {spec_file}: {e}") from e

        try:
            return KernelSpec.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedDocumentError(
                f"{spec_file}: {describe_validation_error(e)}"
            ) from e

    def list_kernels(self) -> dict[Path, list[tuple[str, KernelSpec]]]:
        """List installed kernels for every search directory.

        Returns:
            dict: Directory to (kernel name, spec) pairs sorted by name;
                directories that do not exist map to an empty list
        """
        listing: dict[Path, list[tuple[str, KernelSpec]]] = {}

        for directory in self.directories:
            kernels: list[tuple[str, KernelSpec]] = []
            if directory.is_dir():
                for entry in sorted(directory.iterdir()):
                    spec_file = entry / KERNEL_FILE
                    if entry.is_dir() and spec_file.is_file():
                        kernels.append((entry.name, self.load(spec_file)))
            listing[directory] = kernels

        return listing
