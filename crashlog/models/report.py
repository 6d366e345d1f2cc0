"""
Crash Report Model
==================
Pydantic models for the parsed crash log.
This is the contract between the parser and the payload formatter.

Report
    header          — ordered "Key: value" fields found before the first thread
    backtraces      — one Backtrace per thread, in encounter order
    binary_images   — image path basename → BinaryImage
    program_counter — crashed thread "pc" register (hex string), if dumped
    link_register   — crashed thread "lr" register (hex string), if dumped
    app_uuid        — build UUID of the image assumed to be the host app

Frame fields keep the payload's camelCase names as aliases so a frame can be
dumped straight into the wire format with ``to_payload()``.
"""
import posixpath
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_UUID_HEX = re.compile(r"^[0-9A-Fa-f]{32}$")
_UUID_HYPHEN_OFFSETS = (8, 13, 18, 23)


def canonicalize_uuid(raw: str) -> str:
    """
    Convert a 32-character hex build UUID into the uppercase 8-4-4-4-12 form.

    Already hyphenated input is accepted, so the function is idempotent.
    Raises ValueError for anything that is not 32 hex digits.
    """
    digits = raw.strip().replace("-", "")
    if not _UUID_HEX.match(digits):
        raise ValueError(f"not a 32-digit hex UUID: {raw!r}")

    result = digits.upper()
    for offset in _UUID_HYPHEN_OFFSETS:
        result = result[:offset] + "-" + result[offset:]
    return result


def image_key(binary_name: str) -> str:
    """Lookup key for a binary: the basename of its name or path."""
    return posixpath.basename(binary_name.strip())


class Frame(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    frame_address: str = Field(alias="frameAddress")
    macho_file: str = Field(alias="machoFile")
    method: str = ""
    macho_uuid: Optional[str] = Field(default=None, alias="machoUUID")
    macho_load_address: Optional[str] = Field(default=None, alias="machoLoadAddress")
    is_pc: Optional[bool] = Field(default=None, alias="isPC")
    is_lr: Optional[bool] = Field(default=None, alias="isLR")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class Backtrace(BaseModel):
    index: str
    name: Optional[str] = None
    crashed: bool = False
    stacktrace: list[Frame] = Field(default_factory=list)


class BinaryImage(BaseModel):
    addr: str
    name: str
    uuid: str
    path: str

    @field_validator("uuid")
    @classmethod
    def _canonical_uuid(cls, value: str) -> str:
        return canonicalize_uuid(value)


class Report(BaseModel):
    header: dict[str, str] = Field(default_factory=dict)
    backtraces: list[Backtrace] = Field(default_factory=list)
    binary_images: dict[str, BinaryImage] = Field(default_factory=dict)
    program_counter: Optional[str] = None
    link_register: Optional[str] = None
    app_uuid: Optional[str] = None
