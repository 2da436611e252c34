from __future__ import annotations
import logging
import os
import shutil
import threading
import time
from io import BytesIO
from pathlib import Path
from typing import BinaryIO, Iterator, List, Tuple, Union

from filerepo.config import RepositoryConfig, ReservedIdentity
from filerepo.models.files import IdentitySummary, StagedFile, StoredFile
from filerepo.services.errors import AccessDenied, Forbidden, NotFound, StorageFault, TooLarge
from filerepo.utils.utils import ensure_dir, format_size, is_within, mtime_of, safe_filename

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB

Source = Union[bytes, bytearray, BinaryIO]


class _MillisClock:
    """Epoch milliseconds, strictly increasing across threads."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> int:
        with self._lock:
            now = int(time.time() * 1000)
            self._last = now if now > self._last else self._last + 1
            return self._last


class RepositoryStore:
    """
    Layout on disk::

        <root>/
          .temp/                staging area, never listed
          admin/                admin uploads, publicly downloadable
          <identity>/<millis>_<filename>

    Every path is checked against the root component-wise before it is
    touched. Lookups by filename are linear scans over the identity folders
    (first match in lexical order wins); there is no index.
    """

    def __init__(self, config: RepositoryConfig):
        self.config = config
        self.root = ensure_dir(config.root)
        self.temp_dir = ensure_dir(self.root / ReservedIdentity.TEMP.value)
        self.admin_dir = ensure_dir(self.root / ReservedIdentity.ADMIN.value)
        self._clock = _MillisClock()

    # ------------------------------------------------------------------------
    # Containment
    # ------------------------------------------------------------------------
    def _child(self, parent: Path, name: str) -> Path:
        """``parent / name`` if ``name`` is a single component that stays inside the root."""
        if not name or name in (".", "..") or "/" in name or "\\" in name or "\x00" in name:
            logger.warning("Rejected path component %r under %s", name, parent)
            raise AccessDenied(name)
        path = parent / name
        if not is_within(self.root, path):
            logger.warning("Rejected path %s: outside %s", path, self.root)
            raise AccessDenied(name)
        return path

    def identity_dir(self, identity: str) -> Path:
        return self._child(self.root, identity)

    def ensure_identity_dir(self, identity: str) -> Path:
        if identity == ReservedIdentity.TEMP.value:
            raise Forbidden(identity)
        return ensure_dir(self.identity_dir(identity))

    def _is_reserved_dir(self, path: Path) -> bool:
        resolved = path.resolve()
        return resolved in (self.temp_dir.resolve(), self.admin_dir.resolve())

    def _identity_names(self) -> Iterator[str]:
        for p in sorted(self.root.iterdir(), key=lambda p: p.name):
            if p.name == ReservedIdentity.TEMP.value or not p.is_dir():
                continue
            if not is_within(self.root, p):
                continue
            yield p.name

    @staticmethod
    def _stored(identity: str, path: Path) -> StoredFile:
        st = path.stat()
        return StoredFile(identity=identity, name=path.name, size=st.st_size, modified=mtime_of(path))

    # ------------------------------------------------------------------------
    # Upload: stage in .temp, then rename into the identity folder
    # ------------------------------------------------------------------------
    def stage_upload(self, source: Source, original_name: str) -> StagedFile:
        if isinstance(source, (bytes, bytearray)):
            source = BytesIO(source)
        safe = safe_filename(original_name)
        limit = self.config.max_upload_bytes
        ensure_dir(self.temp_dir)

        while True:
            filename = f"{self._clock.next()}_{safe}"
            path = self._child(self.temp_dir, filename)
            try:
                fp = path.open("xb")
            except FileExistsError:
                # another process staged the same name in the same millisecond
                continue
            except OSError as e:
                logger.error("Cannot create staging file %s: %s", path, e)
                raise StorageFault(f"cannot stage {safe}", cause=e) from e
            break

        written = 0
        try:
            with fp:
                while True:
                    chunk = source.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > limit:
                        raise TooLarge(format_size(limit))
                    fp.write(chunk)
        except TooLarge:
            path.unlink(missing_ok=True)
            logger.warning("Upload %r rejected: larger than %d bytes", original_name, limit)
            raise
        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error("Staging %s failed: %s", filename, e)
            raise StorageFault(f"cannot stage {safe}", cause=e) from e

        logger.debug("Staged %s (%d bytes)", filename, written)
        return StagedFile(path=path, filename=filename, original_name=original_name or "", size=written)

    def commit_upload(self, staged: StagedFile, identity: str) -> StoredFile:
        source = self._child(self.temp_dir, staged.filename)
        try:
            target_dir = self.ensure_identity_dir(identity)
            target = self._child(target_dir, staged.filename)
            os.rename(source, target)
        except OSError as e:
            logger.error("Commit of %s into %s failed: %s", staged.filename, identity, e)
            raise StorageFault(f"cannot move {staged.filename} into {identity}", cause=e) from e
        logger.info("Stored %s/%s (%d bytes)", identity, staged.filename, staged.size)
        return self._stored(identity, target)

    def discard_staged(self, staged: StagedFile) -> None:
        self._child(self.temp_dir, staged.filename).unlink(missing_ok=True)

    def _stage_and_commit(self, source: Source, original_name: str, identity: str) -> StoredFile:
        staged = self.stage_upload(source, original_name)
        try:
            return self.commit_upload(staged, identity)
        except Exception:
            self.discard_staged(staged)
            raise

    def upload(self, source: Source, original_name: str, identity: str) -> StoredFile:
        """Public upload; reserved folders are reachable only through ``admin_upload``."""
        if ReservedIdentity.is_reserved(identity):
            logger.warning("Refused public upload into reserved folder %r", identity)
            raise Forbidden(identity)
        return self._stage_and_commit(source, original_name, identity)

    def admin_upload(self, source: Source, original_name: str) -> StoredFile:
        return self._stage_and_commit(source, original_name, ReservedIdentity.ADMIN.value)

    # ------------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------------
    def list_identities(self) -> List[IdentitySummary]:
        out: List[IdentitySummary] = []
        for name in self._identity_names():
            d = self.root / name
            try:
                count = sum(1 for _ in d.iterdir())
                modified = mtime_of(d)
            except FileNotFoundError:
                # folder removed between the scan and the stat
                continue
            out.append(IdentitySummary(identity=name, file_count=count, modified=modified))
        return out

    def list_files(self, identity: str) -> List[StoredFile]:
        d = self.identity_dir(identity)
        if identity == ReservedIdentity.TEMP.value or not d.is_dir():
            raise NotFound(identity)
        files: List[StoredFile] = []
        for p in sorted(d.iterdir(), key=lambda p: p.name):
            if not p.is_file():
                continue
            try:
                files.append(self._stored(identity, p))
            except FileNotFoundError:
                continue
        return files

    def list_all_files(self) -> List[StoredFile]:
        out: List[StoredFile] = []
        for summary in self.list_identities():
            try:
                out.extend(self.list_files(summary.identity))
            except NotFound:
                continue
        return out

    # ------------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------------
    def find_file(self, filename: str) -> Tuple[str, Path]:
        """Linear scan of every user folder (not admin, not .temp); O(total files), no index."""
        self._child(self.root, filename)
        for name in self._identity_names():
            if ReservedIdentity.is_reserved(name):
                continue
            candidate = self._child(self.root / name, filename)
            if candidate.is_file():
                return name, candidate
        raise NotFound(filename)

    def find_admin_file(self, filename: str) -> Path:
        path = self._child(self.admin_dir, filename)
        if not path.is_file():
            raise NotFound(filename)
        return path

    # ------------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------------
    def _unlink(self, path: Path, filename: str) -> None:
        try:
            path.unlink()
        except FileNotFoundError as e:
            raise NotFound(filename) from e
        except OSError as e:
            logger.error("Cannot delete %s: %s", path, e)
            raise StorageFault(f"cannot delete {filename}", cause=e) from e

    def delete_file(self, filename: str) -> str:
        identity, path = self.find_file(filename)
        self._unlink(path, filename)
        logger.info("Deleted %s/%s", identity, filename)
        return identity

    def delete_admin_file(self, filename: str) -> None:
        self._unlink(self.find_admin_file(filename), filename)
        logger.info("Deleted admin/%s", filename)

    def delete_identity_folder(self, identity: str) -> None:
        if ReservedIdentity.is_reserved(identity):
            logger.warning("Refused to delete reserved folder %r", identity)
            raise Forbidden(identity)
        d = self.identity_dir(identity)
        if self._is_reserved_dir(d):
            logger.warning("Refused to delete reserved folder %r", identity)
            raise Forbidden(identity)
        if not d.is_dir():
            raise NotFound(identity)
        try:
            shutil.rmtree(d)
        except FileNotFoundError as e:
            raise NotFound(identity) from e
        except OSError as e:
            logger.error("Cannot delete folder %s: %s", d, e)
            raise StorageFault(f"cannot delete folder {identity}", cause=e) from e
        logger.info("Deleted folder %s", identity)
