"""Per-call truncation budget."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_OMISSION = "…"
DEFAULT_MAX_BYTES = 1024
DEFAULT_BOUNDARY_WINDOW = 16


class MeasureBy(str, Enum):
    SERIALIZED = "serialized"
    CONTENT = "content"


class TruncationBudget(BaseModel):
    """Options for a single truncation call; never persisted."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_bytes: int = DEFAULT_MAX_BYTES
    omission: str = DEFAULT_OMISSION
    measure_by: MeasureBy = MeasureBy.SERIALIZED
    word_boundary: str | None = None
    boundary_window: int = Field(default=DEFAULT_BOUNDARY_WINDOW, ge=0)

    @field_validator("max_bytes")
    @classmethod
    def _clamp_max_bytes(cls, value: int) -> int:
        return max(value, 0)

    @field_validator("word_boundary")
    @classmethod
    def _empty_boundary_is_none(cls, value: str | None) -> str | None:
        return value or None

    @property
    def omission_size(self) -> int:
        return len(self.omission.encode("utf-8"))

    @property
    def window(self) -> int:
        """Bytes a word-boundary retreat may give up."""

        return self.omission_size + self.boundary_window


__all__ = [
    "DEFAULT_BOUNDARY_WINDOW",
    "DEFAULT_MAX_BYTES",
    "DEFAULT_OMISSION",
    "MeasureBy",
    "TruncationBudget",
]
