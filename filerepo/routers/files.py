from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import FileResponse, PlainTextResponse

from filerepo.models.files import StoredFile
from filerepo.models.responses import DeleteResponse, UploadResponse
from filerepo.routers.deps import get_store, require_admin, wants_text
from filerepo.services import render
from filerepo.services.repository import RepositoryStore
from filerepo.utils.utils import format_size, resolve_identity, sanitize_name

router = APIRouter(tags=["Files"])


def _peer_address(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


@router.get("/upload", response_class=PlainTextResponse, summary="Upload instructions")
def upload_help(store: RepositoryStore = Depends(get_store)):
    return render.upload_help(store.config.public_url)


@router.post("/upload", response_model=UploadResponse, summary="Upload a file to the caller's folder")
def upload(request: Request,
           file: UploadFile = File(...),
           username: Optional[str] = Form(None),
           store: RepositoryStore = Depends(get_store)):
    identity = resolve_identity(username, _peer_address(request))
    original = file.filename or ""
    stored = store.upload(file.file, original, identity)
    if wants_text(request):
        return PlainTextResponse(render.upload_message(original, identity, stored.size))
    return UploadResponse(identity=identity, filename=stored.name, original_name=original,
                          size=stored.size, size_human=format_size(stored.size))


@router.get("/download/{filename}", summary="Download a file from any user folder")
def download(filename: str, store: RepositoryStore = Depends(get_store)):
    _, path = store.find_file(filename)
    return FileResponse(path, media_type="application/octet-stream", filename=path.name)


@router.get("/files", response_model=List[StoredFile], summary="Flat list of every stored file")
def list_all_files(request: Request, store: RepositoryStore = Depends(get_store)):
    files = store.list_all_files()
    if wants_text(request):
        return PlainTextResponse(render.all_files_table(files))
    return files


@router.delete("/files/{filename}", response_model=DeleteResponse, summary="Delete one file")
def delete_file(filename: str,
                identity: Optional[str] = Query(None, description="Folder to go back to afterwards"),
                store: RepositoryStore = Depends(get_store),
                _admin: str = Depends(require_admin)):
    owner = store.delete_file(filename)
    back = sanitize_name(identity) or owner
    return DeleteResponse(id=filename, identity=owner, redirect=f"/uploads/{back}")


@router.get("/help", response_class=PlainTextResponse, summary="curl cheat-sheet")
def help_page(store: RepositoryStore = Depends(get_store)):
    return render.help_text(store.config.public_url)
