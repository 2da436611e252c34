from __future__ import annotations
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from filerepo.config import RepositoryConfig
from filerepo.services.errors import AdminDisabled
from filerepo.services.repository import RepositoryStore

_basic = HTTPBasic(auto_error=False)


def get_store(request: Request) -> RepositoryStore:
    return request.app.state.store


def get_config(request: Request) -> RepositoryConfig:
    return request.app.state.store.config


def wants_text(request: Request) -> bool:
    return "curl" in request.headers.get("user-agent", "").lower()


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid admin credentials.",
        headers={"WWW-Authenticate": "Basic"},
    )


def require_admin(credentials: HTTPBasicCredentials = Depends(_basic),
                  config: RepositoryConfig = Depends(get_config)) -> str:
    if not config.admin_enabled:
        raise AdminDisabled("admin")
    if credentials is None:
        raise _unauthorized()
    user_ok = secrets.compare_digest(credentials.username.encode("utf-8"), config.admin_username.encode("utf-8"))
    pass_ok = secrets.compare_digest(credentials.password.encode("utf-8"), config.admin_password.encode("utf-8"))
    if not (user_ok and pass_ok):
        raise _unauthorized()
    return credentials.username
