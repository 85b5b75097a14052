"""Shared tool input models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ReadFileInput(BaseModel):
    """Read the contents of a file."""

    path: str = Field(..., description="The relative path to the file you want to read.")


class ListFilesInput(BaseModel):
    """List the entries of a directory."""

    path: str = Field(default=".", description="The relative path of the directory to list.")


class WriteFileInput(BaseModel):
    """Write content to a file."""

    path: str = Field(..., description="The relative path of the file to write.")
    content: str = Field(..., description="The exact text to write to the file.")
    overwrite: bool = Field(
        default=False,
        strict=True,
        description="Must be true to replace a file that already exists.",
    )
