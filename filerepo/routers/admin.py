from __future__ import annotations
from typing import List
from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse

from filerepo.config import ReservedIdentity
from filerepo.models.files import StoredFile
from filerepo.models.responses import DeleteResponse, UploadResponse
from filerepo.routers.deps import get_store, require_admin, wants_text
from filerepo.services import render
from filerepo.services.repository import RepositoryStore
from filerepo.utils.utils import format_size

router = APIRouter(prefix="/admin", tags=["Admin"])
ADMIN = ReservedIdentity.ADMIN.value

# Uploads and deletions need the admin password; listing and download are public.

@router.post("/upload", response_model=UploadResponse, summary="Upload into the admin area")
def admin_upload(request: Request,
                 file: UploadFile = File(...),
                 store: RepositoryStore = Depends(get_store),
                 _admin: str = Depends(require_admin)):
    original = file.filename or ""
    stored = store.admin_upload(file.file, original)
    if wants_text(request):
        return PlainTextResponse(render.upload_message(original, ADMIN, stored.size))
    return UploadResponse(identity=ADMIN, filename=stored.name, original_name=original,
                          size=stored.size, size_human=format_size(stored.size))


@router.get("/files", response_model=List[StoredFile], summary="List the admin area")
def admin_files(request: Request, store: RepositoryStore = Depends(get_store)):
    files = store.list_files(ADMIN)
    if wants_text(request):
        return PlainTextResponse(render.files_table(ADMIN, files, store.config.public_url, "/admin/download"))
    return files


@router.get("/download/{filename}", summary="Download from the admin area")
def admin_download(filename: str, store: RepositoryStore = Depends(get_store)):
    path = store.find_admin_file(filename)
    return FileResponse(path, media_type="application/octet-stream", filename=path.name)


@router.delete("/files/{filename}", response_model=DeleteResponse, summary="Delete from the admin area")
def admin_delete(filename: str,
                 store: RepositoryStore = Depends(get_store),
                 _admin: str = Depends(require_admin)):
    store.delete_admin_file(filename)
    return DeleteResponse(id=filename, identity=ADMIN, redirect="/admin/files")
