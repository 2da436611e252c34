from __future__ import annotations
from typing import Iterable, List

from filerepo.models.files import IdentitySummary, StoredFile
from filerepo.utils.utils import format_date, format_size

# ============================================================================
# Plain-text views for curl / terminal clients
# ============================================================================
def _rule(char: str, width: int) -> str:
    return char * width + "\n"


def identities_table(items: Iterable[IdentitySummary], base_url: str) -> str:
    items = list(items)
    out = "Directory: /uploads\n" + _rule("=", 60)
    out += "Name".ljust(30) + "Files".ljust(15) + "Modified\n" + _rule("-", 60)
    for it in items:
        out += f"[DIR] {it.identity}".ljust(30) + f"{it.file_count} file(s)".ljust(15) + format_date(it.modified) + "\n"
    out += _rule("-", 60) + f"Total: {len(items)} folder(s)\n"
    out += f'\nUpload: curl -F "file=@yourfile.txt" -F "username=yourname" {base_url}/upload\n'
    return out


def files_table(identity: str, files: Iterable[StoredFile], base_url: str, download_path: str = "/download") -> str:
    files = list(files)
    out = f"Directory: /uploads/{identity}\n" + _rule("=", 80)
    out += "Filename".ljust(45) + "Size".ljust(15) + "Modified\n" + _rule("-", 80)
    for f in files:
        out += f.name[:44].ljust(45) + format_size(f.size).ljust(15) + format_date(f.modified) + "\n"
    out += _rule("-", 80) + f"Total: {len(files)} file(s)\n"
    out += f"\nDownload: curl -O {base_url}{download_path}/<filename>\n"
    return out


def all_files_table(files: List[StoredFile]) -> str:
    out = "All Files\n" + _rule("=", 100)
    out += "User".ljust(20) + "Filename".ljust(50) + "Size".ljust(15) + "Modified\n" + _rule("-", 100)
    for f in files:
        out += f.identity.ljust(20) + f.name[:49].ljust(50) + format_size(f.size).ljust(15) + format_date(f.modified) + "\n"
    out += _rule("-", 100) + f"Total: {len(files)} file(s)\n"
    return out


def upload_message(original_name: str, identity: str, size: int) -> str:
    return f'Success: "{original_name}" uploaded to /{identity}/ ({format_size(size)})\n'


def upload_help(base_url: str) -> str:
    return f"""
File Upload - curl Command
===========================

Upload with username:
  curl -F "file=@yourfile.txt" -F "username=yourname" {base_url}/upload

Upload with IP (auto):
  curl -F "file=@yourfile.txt" {base_url}/upload

"""


def help_text(base_url: str) -> str:
    return f"""
File Repository - curl Commands
================================

LIST folders:
  curl {base_url}/

LIST user files:
  curl {base_url}/uploads/<username>

LIST all files:
  curl {base_url}/files

UPLOAD file:
  curl -F "file=@yourfile.txt" -F "username=yourname" {base_url}/upload

DOWNLOAD file:
  curl -O {base_url}/download/<filename>

ADMIN upload / download:
  curl -u admin:<password> -F "file=@yourfile.txt" {base_url}/admin/upload
  curl -O {base_url}/admin/download/<filename>

HELP:
  curl {base_url}/help

"""
