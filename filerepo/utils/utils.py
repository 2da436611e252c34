from __future__ import annotations
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from filerepo.config import ALLOWED_FILENAME_CHARS, FORBIDDEN_ID_CHARS, MAX_ID_LENGTH

# ============================================================================
# Identity sanitizer
# ============================================================================
_FORBIDDEN_ID = re.compile(FORBIDDEN_ID_CHARS)
_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME = re.compile(ALLOWED_FILENAME_CHARS)
_IPV4_MAPPED_PREFIX = "::ffff:"
UNKNOWN_IDENTITY = "unknown"


def sanitize_name(raw: Optional[str]) -> Optional[str]:
    """
    Turns a username or IP address into a folder-safe identity:
    - drops every ``..``
    - ``/ \\ : * ? " < > |`` become ``_``
    - each whitespace run becomes a single ``_``
    - truncated to 50 characters
    """
    if not raw:
        return None
    s = raw.replace("..", "")
    s = _FORBIDDEN_ID.sub("_", s)
    s = _WHITESPACE.sub("_", s)
    return s[:MAX_ID_LENGTH]


def _usable_identity(s: Optional[str]) -> str:
    # "", "." and ".." would name the root or its parent, not a folder
    if not s or not s.strip("."):
        return UNKNOWN_IDENTITY
    return s


def resolve_identity(declared_username: Optional[str], peer_address: Optional[str]) -> str:
    if declared_username and declared_username.strip():
        return _usable_identity(sanitize_name(declared_username.strip()))
    if not peer_address:
        return UNKNOWN_IDENTITY
    ip = peer_address
    if ip.startswith(_IPV4_MAPPED_PREFIX):
        ip = ip[len(_IPV4_MAPPED_PREFIX):]
    return _usable_identity(sanitize_name(ip))


def safe_filename(original_name: Optional[str]) -> str:
    s = _UNSAFE_FILENAME.sub("_", original_name or "")
    # "", "." and ".." would name a directory, not a file
    if not s.strip("."):
        return "file"
    return s

# ============================================================================
# FS helpers
# ============================================================================
def ensure_dir(p: Path) -> Path:
    p.mkdir(parents=True, exist_ok=True)
    return p


def is_within(root: Path, candidate: Path) -> bool:
    """Component-wise containment: ``/data/uploads_evil`` is not inside ``/data/uploads``."""
    try:
        candidate.resolve().relative_to(root.resolve())
    except ValueError:
        return False
    return True

# ============================================================================
# Formatting
# ============================================================================
_SIZE_UNITS = ("B", "KB", "MB", "GB")


def format_size(num_bytes: int) -> str:
    if num_bytes <= 0:
        return "0 B"
    value, i = float(num_bytes), 0
    while value >= 1024 and i < len(_SIZE_UNITS) - 1:
        value /= 1024
        i += 1
    value = round(value, 1)
    if value == int(value):
        value = int(value)
    return f"{value} {_SIZE_UNITS[i]}"


def format_date(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def mtime_of(p: Path) -> datetime:
    return datetime.fromtimestamp(p.stat().st_mtime, tz=timezone.utc)
