from __future__ import annotations
from typing import List
from fastapi import APIRouter, Depends, Path as FPath, Request
from fastapi.responses import PlainTextResponse

from filerepo.models.files import IdentitySummary, StoredFile
from filerepo.models.responses import DeleteResponse
from filerepo.routers.deps import get_store, require_admin, wants_text
from filerepo.services import render
from filerepo.services.errors import NotFound
from filerepo.services.repository import RepositoryStore
from filerepo.utils.utils import sanitize_name

router = APIRouter(tags=["Identities"])
IDENTITY_DOC = "Username or IP folder (sanitized before use)"


def _identity(raw: str) -> str:
    identity = sanitize_name(raw)
    if not identity:
        raise NotFound(raw)
    return identity


@router.get("/", response_model=List[IdentitySummary], summary="List identity folders")
def list_identities(request: Request, store: RepositoryStore = Depends(get_store)):
    items = store.list_identities()
    if wants_text(request):
        return PlainTextResponse(render.identities_table(items, store.config.public_url))
    return items


@router.get("/uploads/{identity}", response_model=List[StoredFile], summary="List files of one identity")
def list_identity_files(request: Request,
                        identity: str = FPath(..., description=IDENTITY_DOC),
                        store: RepositoryStore = Depends(get_store)):
    ident = _identity(identity)
    files = store.list_files(ident)
    if wants_text(request):
        return PlainTextResponse(render.files_table(ident, files, store.config.public_url))
    return files


@router.delete("/uploads/{identity}", response_model=DeleteResponse, summary="Delete an identity folder")
def delete_identity_folder(identity: str = FPath(..., description=IDENTITY_DOC),
                           store: RepositoryStore = Depends(get_store),
                           _admin: str = Depends(require_admin)):
    ident = _identity(identity)
    store.delete_identity_folder(ident)
    return DeleteResponse(id=ident, identity=ident, redirect="/")
