"""
Starts the file repository server.

    filerepo --port 3000 --root ./uploads
    FILEREPO_ADMIN_PASSWORD=secret filerepo
"""
from __future__ import annotations
import argparse
import logging

import uvicorn

from filerepo.config import RepositoryConfig
from filerepo.main import configure_logging, create_app

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="filerepo", description="Per-user HTTP file repository")
    ap.add_argument("--host", default=None)
    ap.add_argument("--port", type=int, default=None)
    ap.add_argument("--root", default=None, help="Repository root (default ./uploads)")
    ap.add_argument("--max-upload-mb", type=int, default=None)
    ap.add_argument("--base-url", default=None, help="Public URL shown in curl hints")
    ap.add_argument("--log-level", default=None)
    return ap


def config_from_args(args: argparse.Namespace) -> RepositoryConfig:
    return RepositoryConfig.from_env(
        host=args.host,
        port=args.port,
        root_dir=args.root,
        max_upload_bytes=args.max_upload_mb * 1024 * 1024 if args.max_upload_mb else None,
        base_url=args.base_url,
        log_level=args.log_level,
    )


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    configure_logging(config.log_level)
    app = create_app(config)

    url = config.public_url
    logger.info("File Repository running on %s", url)
    print("\ncurl commands:")
    print(f"  List:     curl {url}/")
    print(f'  Upload:   curl -F "file=@file.txt" -F "username=name" {url}/upload')
    print(f"  Download: curl -O {url}/download/<filename>")
    print(f"  Help:     curl {url}/help\n")

    uvicorn.run(app, host=config.host, port=config.port, proxy_headers=True,
                log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
