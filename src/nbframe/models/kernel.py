"""Data model for installed kernel specs (kernel.json)."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class KernelSpec(BaseModel):
    """An installed kernel spec.

    Only looked up to show a display name; kernels are never launched.

    Attributes:
        argv: Command line used to launch the kernel
        display_name: Human readable kernel name
        language: Kernel language
        interrupt_mode: How the kernel expects to be interrupted
        env: Extra environment variables for the kernel process
        metadata: Free-form metadata (ignored)
    """

    argv: list[str]
    display_name: str
    language: str
    interrupt_mode: Literal["signal", "message"] = "signal"
    env: dict[str, str] = Field(default_factory=dict)
    metadata: Optional[Any] = None

    model_config = ConfigDict(frozen=True, extra="ignore")

    def __str__(self) -> str:
        return self.display_name
