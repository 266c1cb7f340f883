"""Data models for the notebook document format (nbformat 4.5)."""

from typing import Annotated, Any, ClassVar, Literal, NamedTuple, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _as_fragments(value: Any) -> Any:
    """Accept Jupyter's single-string encoding of a multiline field."""
    if isinstance(value, str):
        return value.splitlines(keepends=True)
    return value


class NotebookVersion(NamedTuple):
    """Notebook format version as (major, minor)."""

    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


class KernelSpecRef(BaseModel):
    """Kernel declared in the notebook metadata.

    Attributes:
        display_name: Human readable kernel name
        name: Kernel name used for kernel spec lookup
        language: Kernel language, used as the code fence tag
    """

    display_name: str
    name: str
    language: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")


class NotebookMetadata(BaseModel):
    """Notebook level metadata.

    Attributes:
        kernel_spec: The `kernelspec` entry
        language_info: Opaque language information (only its name is consulted)
    """

    kernel_spec: KernelSpecRef = Field(alias="kernelspec")
    language_info: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @property
    def kernel_display_name(self) -> str:
        return self.kernel_spec.display_name

    @property
    def kernel_name(self) -> str:
        return self.kernel_spec.name

    @property
    def kernel_language(self) -> str:
        """Declared kernel language, falling back to `language_info.name`."""
        if self.kernel_spec.language:
            return self.kernel_spec.language
        name = self.language_info.get("name")
        return name if isinstance(name, str) else ""


# Outputs


class StreamOutput(BaseModel):
    """Text written to stdout/stderr while the cell executed.

    Attributes:
        name: Stream identifier (stdout or stderr)
        text: Text fragments; logical lines may span several fragments
    """

    output_type: Literal["stream"]
    name: str
    text: list[str]

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("text", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> Any:
        return _as_fragments(v)

    def lines(self) -> list[str]:
        """Concatenate the fragments, then split on line boundaries."""
        return "".join(self.text).splitlines()


class DisplayDataOutput(BaseModel):
    """Rich display output keyed by MIME type.

    Attributes:
        data: MIME type to value, in document order
    """

    output_type: Literal["display_data"]
    data: dict[str, Any]

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("data")
    @classmethod
    def validate_data(cls, v: dict[str, Any]) -> dict[str, Any]:
        """Text and image payloads must be a string or a list of strings."""
        for mime, value in v.items():
            if not (mime.startswith("text/") or mime.startswith("image/")):
                continue
            if isinstance(value, str):
                continue
            if isinstance(value, list) and all(isinstance(item, str) for item in value):
                continue
            raise ValueError(f"{mime} value must be a string or a list of strings")
        return v

    def entries(self) -> list[tuple[str, Any]]:
        """MIME entries in the order they appear in the document."""
        return list(self.data.items())


class ExecuteResultOutput(DisplayDataOutput):
    """Value of the last expression of a cell, rendered like display data."""

    output_type: Literal["execute_result"]  # type: ignore[assignment]
    execution_count: Optional[int] = None


class ErrorOutput(BaseModel):
    """Exception raised while the cell executed.

    Attributes:
        ename: Exception class name
        evalue: Exception message
        traceback: Formatted traceback lines (may contain ANSI colors)
    """

    output_type: Literal["error"]
    ename: str
    evalue: str
    traceback: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore")


Output = Annotated[
    Union[StreamOutput, DisplayDataOutput, ExecuteResultOutput, ErrorOutput],
    Field(discriminator="output_type"),
]


# Cells


class _BaseCell(BaseModel):
    id: str
    source: list[str]
    metadata: dict[str, Any] = Field(default_factory=dict)

    label: ClassVar[str] = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("source", mode="before")
    @classmethod
    def coerce_source(cls, v: Any) -> Any:
        return _as_fragments(v)


class CodeCell(_BaseCell):
    """Executable cell with its recorded outputs.

    Attributes:
        execution_count: Execution number, None if never executed
        outputs: Outputs in document order
    """

    cell_type: Literal["code"]
    execution_count: Optional[int] = None
    outputs: list[Output]

    label: ClassVar[str] = "Code"

    @property
    def badge(self) -> str:
        """Execution badge, `[N]` or `[*]` when never executed."""
        if self.execution_count is None:
            return "[*]"
        return f"[{self.execution_count}]"


class MarkdownCell(_BaseCell):
    """Markdown prose cell."""

    cell_type: Literal["markdown"]

    label: ClassVar[str] = "MD"


class RawCell(_BaseCell):
    """Raw text cell, passed through unformatted."""

    cell_type: Literal["raw"]

    label: ClassVar[str] = "Raw"


Cell = Annotated[Union[CodeCell, MarkdownCell, RawCell], Field(discriminator="cell_type")]


class Notebook(BaseModel):
    """Complete notebook document.

    Attributes:
        version: Format version from `nbformat` / `nbformat_minor`
        metadata: Notebook metadata
        cells: Cells in document order
    """

    version: NotebookVersion
    metadata: NotebookMetadata
    cells: list[Cell]

    model_config = ConfigDict(frozen=True, extra="ignore")

    @model_validator(mode="before")
    @classmethod
    def collect_version(cls, data: Any) -> Any:
        """Lift the flat `nbformat` / `nbformat_minor` keys into `version`."""
        if isinstance(data, dict) and "version" not in data:
            data = dict(data)
            data["version"] = (data.pop("nbformat", None), data.pop("nbformat_minor", None))
        return data
