from __future__ import annotations
from datetime import datetime
from pathlib import Path
from pydantic import BaseModel, Field

class StoredFile(BaseModel):
    identity: str = Field(..., description="Owner folder")
    name: str = Field(..., description="Stored filename")
    size: int = Field(..., description="Size in bytes")
    modified: datetime = Field(..., description="Last modification (UTC)")

class StagedFile(BaseModel):
    path: Path = Field(..., description="Absolute path inside .temp")
    filename: str = Field(..., description="Final filename (timestamp prefixed)")
    original_name: str = Field("", description="Name sent by the client")
    size: int = Field(0, description="Bytes written")

class IdentitySummary(BaseModel):
    identity: str = Field(..., description="Folder name")
    file_count: int = Field(..., description="Direct entries in the folder")
    modified: datetime = Field(..., description="Folder mtime (UTC)")
