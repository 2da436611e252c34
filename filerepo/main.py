from __future__ import annotations
import logging
from typing import Optional
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from filerepo.config import RepositoryConfig
from filerepo.routers import admin, files, identities
from filerepo.routers.deps import wants_text
from filerepo.services.errors import RepositoryError
from filerepo.services.repository import RepositoryStore

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


async def repository_error_handler(request: Request, exc: RepositoryError):
    if wants_text(request):
        return PlainTextResponse(f"Error: {exc.message}\n", status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code,
                        content={"detail": exc.message, "error": type(exc).__name__})


def create_app(config: Optional[RepositoryConfig] = None) -> FastAPI:
    config = config or RepositoryConfig.from_env()
    store = RepositoryStore(config)

    app = FastAPI(
        title="File Repository",
        description="Per-user file drop: upload by username or IP, list, download; admin area.",
        version="1.0.1",
    )
    app.state.store = store
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RepositoryError, repository_error_handler)

    app.include_router(identities.router)
    app.include_router(files.router)
    app.include_router(admin.router)

    @app.get("/ping")
    def ping(): return {"status": "ok"}

    logger.info("Repository root: %s (admin area %s)", store.root,
                "enabled" if config.admin_enabled else "disabled")
    return app
