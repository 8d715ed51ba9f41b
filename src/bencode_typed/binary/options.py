from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field


class DecodeOptions(BaseModel):
    """Decode policy. The defaults accept everything the lenient grammar accepts."""

    model_config = ConfigDict(frozen=True)

    # canonical form: no "-0", no leading zeros, dict keys strictly ascending
    strict: bool = False
    # signed integer width; None disables the range check
    int_bits: int | None = Field(64, ge=2)
    max_depth: int = Field(64, ge=1)


DEFAULT_OPTIONS = DecodeOptions()
