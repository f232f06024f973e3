from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EncodedImage(BaseModel):
    """Image payload as base64 text plus its MIME type.

    Serialises as ``{"base64": ..., "mimeType": ...}`` which is the shape the
    HTTP API exchanges.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    data: str = Field(..., alias="base64", min_length=1)
    media_type: str = Field(..., alias="mimeType", min_length=1)

    @field_validator("data")
    @classmethod
    def check_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except binascii.Error as exc:
            raise ValueError("Image payload is not valid base64") from exc
        return value

    @classmethod
    def from_bytes(cls, raw: bytes, media_type: str) -> "EncodedImage":
        return cls(data=base64.b64encode(raw).decode("ascii"), media_type=media_type)

    @classmethod
    def from_data_url(cls, data_url: str) -> "EncodedImage":
        """Parse ``data:<mime>;base64,<payload>``."""

        header, sep, payload = data_url.partition(",")
        if not sep or not header.startswith("data:") or not header.endswith(";base64"):
            raise ValueError("Not a base64 data URL")
        media_type = header[len("data:") : -len(";base64")] or "application/octet-stream"
        return cls(data=payload, media_type=media_type)

    def to_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

    def raw_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as exc:
            raise ValueError("Image payload is not valid base64") from exc
