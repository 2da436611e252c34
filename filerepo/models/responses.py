from __future__ import annotations
from typing import Optional
from pydantic import BaseModel, Field

class UploadResponse(BaseModel):
    identity: str
    filename: str = Field(..., description="Name to use with /download")
    original_name: str
    size: int
    size_human: str

class DeleteResponse(BaseModel):
    deleted: bool = Field(True)
    id: str
    identity: Optional[str] = None
    redirect: Optional[str] = Field(None, description="Listing to go back to")
