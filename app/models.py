from __future__ import annotations

from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .rules import MAX_DOCUMENT_LENGTH


class QuotesOptions(BaseModel):
    pass


class PunctuationOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # "triple": three hyphens become an em dash, two become an en dash
    em_dash_replacement: Literal["double", "triple"] = Field(
        default="double", alias="em-dash-replacement"
    )


class SpacesOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    en_dash_spacing: Literal["open", "closed"] = Field(
        default="open", alias="en-dash-spacing"
    )


class TypesetOptions(BaseModel):
    """
    Which stages run, and how.

    A stage set to None (or `false` in JSON) is skipped entirely.
    `true` enables it with its defaults.
    """

    quotes: Optional[QuotesOptions] = Field(default_factory=QuotesOptions)
    punctuation: Optional[PunctuationOptions] = Field(default_factory=PunctuationOptions)
    spaces: Optional[SpacesOptions] = Field(default_factory=SpacesOptions)

    @field_validator("quotes", "punctuation", "spaces", mode="before")
    @classmethod
    def _stage_toggle(cls, value: Any) -> Any:
        if value is False:
            return None
        if value is True:
            return {}
        return value


class TypesetRequest(BaseModel):
    html: str = Field(max_length=MAX_DOCUMENT_LENGTH)
    options: TypesetOptions = Field(default_factory=TypesetOptions)


class TextRequest(BaseModel):
    text: str = Field(max_length=MAX_DOCUMENT_LENGTH)
    options: TypesetOptions = Field(default_factory=TypesetOptions)


class TextResponse(BaseModel):
    text: str


class EncodingReport(BaseModel):
    detected: Optional[str] = Field(default=None, examples=[None])
    decode_used: str = "utf-8"
    decode_fallback: bool = False


class TypesetReport(BaseModel):
    text_nodes: int = 0
    changed: int = 0
    skipped: int = 0
    options: TypesetOptions = Field(default_factory=TypesetOptions)
    encoding: Optional[EncodingReport] = None


class TypesetResponse(BaseModel):
    html: str
    sha256: str
    report: TypesetReport

class HealthResponse(BaseModel):
    ok: bool = True
