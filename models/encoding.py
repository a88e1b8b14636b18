from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

EncodingName = Literal["utf8", "utf16le", "utf16be"]


class TextEncoding(BaseModel):
    """How a byte buffer maps to text."""

    model_config = ConfigDict(frozen=True)

    name: EncodingName = "utf8"
    bom: bool = False


class DecodedText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    encoding: TextEncoding
    recovered_from_corrupt_bom: bool = False


UTF8_PLAIN = TextEncoding(name="utf8", bom=False)
