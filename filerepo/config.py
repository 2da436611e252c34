from __future__ import annotations
import os
from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

# Base storage
DEFAULT_ROOT_DIR: Path = Path("uploads")
DEFAULT_PORT = 3000
DEFAULT_MAX_UPLOAD_BYTES = 50 * 1024 * 1024  # 50MB

# Allowed stored-filename characters (everything else becomes "_")
ALLOWED_FILENAME_CHARS = r"[^a-zA-Z0-9._-]"

# Characters never allowed in a username/IP identity
FORBIDDEN_ID_CHARS = r'[/\\:*?"<>|]'
MAX_ID_LENGTH = 50


class ReservedIdentity(str, Enum):
    """Top-level folders with special handling; never deletable."""
    ADMIN = "admin"
    TEMP = ".temp"

    @classmethod
    def is_reserved(cls, name: str) -> bool:
        return name in {r.value for r in cls}


class RepositoryConfig(BaseModel):
    root_dir: Path = Field(DEFAULT_ROOT_DIR, description="Repository root")
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0, description="Upload size limit")
    admin_username: str = Field("admin", description="HTTP Basic user for the admin area")
    admin_password: Optional[str] = Field(None, description="Unset = admin area disabled")
    host: str = Field("0.0.0.0")
    port: int = Field(DEFAULT_PORT)
    base_url: Optional[str] = Field(None, description="Public URL shown in curl hints")
    log_level: str = Field("INFO")

    @property
    def root(self) -> Path:
        return Path(self.root_dir).resolve()

    @property
    def public_url(self) -> str:
        return (self.base_url or f"http://localhost:{self.port}").rstrip("/")

    @property
    def admin_enabled(self) -> bool:
        return bool(self.admin_password)

    @classmethod
    def from_env(cls, **overrides) -> "RepositoryConfig":
        """Reads FILEREPO_* (and PORT) from the environment; non-None overrides win."""
        values = {
            "root_dir": os.getenv("FILEREPO_ROOT", str(DEFAULT_ROOT_DIR)),
            "max_upload_bytes": int(os.getenv("FILEREPO_MAX_UPLOAD_BYTES", str(DEFAULT_MAX_UPLOAD_BYTES))),
            "admin_username": os.getenv("FILEREPO_ADMIN_USER", "admin"),
            "admin_password": os.getenv("FILEREPO_ADMIN_PASSWORD") or None,
            "host": os.getenv("FILEREPO_HOST", "0.0.0.0"),
            "port": int(os.getenv("PORT", str(DEFAULT_PORT))),
            "base_url": os.getenv("FILEREPO_BASE_URL") or None,
            "log_level": os.getenv("FILEREPO_LOG_LEVEL", "INFO"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
