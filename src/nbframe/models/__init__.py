"""Data models for nbframe."""

from nbframe.models.kernel import KernelSpec
from nbframe.models.notebook import (
    Cell,
    CodeCell,
    DisplayDataOutput,
    ErrorOutput,
    ExecuteResultOutput,
    KernelSpecRef,
    MarkdownCell,
    Notebook,
    NotebookMetadata,
    NotebookVersion,
    Output,
    RawCell,
    StreamOutput,
)

__all__ = [
    "Cell",
    "CodeCell",
    "MarkdownCell",
    "RawCell",
    "Output",
    "StreamOutput",
    "DisplayDataOutput",
    "ExecuteResultOutput",
    "ErrorOutput",
    "Notebook",
    "NotebookMetadata",
    "NotebookVersion",
    "KernelSpecRef",
    "KernelSpec",
]
