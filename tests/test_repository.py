# tests/test_repository.py
import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from filerepo.config import ReservedIdentity
from filerepo.services.errors import AccessDenied, Forbidden, NotFound, StorageFault, TooLarge
from filerepo.utils.utils import sanitize_name
from tests.conftest import tree


def test_layout_created(store):
    assert (store.root / ".temp").is_dir()
    assert (store.root / "admin").is_dir()


def test_ensure_identity_dir_is_idempotent(store):
    with ThreadPoolExecutor(max_workers=8) as pool:
        dirs = list(pool.map(lambda _: store.ensure_identity_dir("alice"), range(16)))
    assert len(set(dirs)) == 1
    assert dirs[0] == store.root / "alice"
    assert dirs[0].is_dir()


def test_ensure_identity_dir_refuses_staging(store):
    with pytest.raises(Forbidden):
        store.ensure_identity_dir(".temp")


def test_sanitized_traversal_stays_inside_root(store):
    identity = sanitize_name("../../etc")
    d = store.ensure_identity_dir(identity)
    assert d.resolve().parent == store.root


@pytest.mark.parametrize("raw", ["../etc", "..", "a/../../b", "..\\x", ""])
def test_raw_traversal_is_denied(store, raw):
    before = tree(store.root.parent)
    with pytest.raises(AccessDenied):
        store.ensure_identity_dir(raw)
    with pytest.raises(AccessDenied):
        store.list_files(raw)
    assert tree(store.root.parent) == before


def test_traversal_filename_is_denied(store):
    store.upload(b"x", "a.txt", "alice")
    with pytest.raises(AccessDenied):
        store.find_file("../alice/a.txt")
    with pytest.raises(AccessDenied):
        store.find_admin_file("../.temp/whatever")


def test_symlink_to_sibling_directory_is_denied(store, tmp_path):
    evil = tmp_path / "uploads_evil"
    evil.mkdir()
    (evil / "secret.txt").write_text("nope")
    os.symlink(evil, store.root / "evil")
    assert "evil" not in [s.identity for s in store.list_identities()]
    with pytest.raises(AccessDenied):
        store.list_files("evil")
    with pytest.raises(NotFound):
        store.find_file("secret.txt")


def test_upload_round_trip(store):
    payload = b"quarterly numbers\n"
    stored = store.upload(payload, "report.txt", "alice")
    assert stored.identity == "alice"
    assert stored.name.endswith("_report.txt")
    assert stored.size == len(payload)
    identity, path = store.find_file(stored.name)
    assert identity == "alice"
    assert path.read_bytes() == payload


def test_stage_then_commit_moves_file(store):
    staged = store.stage_upload(b"abc", "my file.txt")
    assert staged.path.parent == store.temp_dir
    assert staged.filename.endswith("_my_file.txt")
    assert staged.filename.split("_", 1)[0].isdigit()
    stored = store.commit_upload(staged, "bob")
    assert not staged.path.exists()
    assert (store.root / "bob" / staged.filename).read_bytes() == b"abc"
    assert stored.name == staged.filename


def test_commit_of_vanished_staging_file(store):
    staged = store.stage_upload(b"abc", "gone.txt")
    staged.path.unlink()
    with pytest.raises(StorageFault):
        store.commit_upload(staged, "bob")


def test_commit_into_unusable_folder_is_storage_fault(store):
    # a plain file squats on the identity folder name
    (store.root / "alice").write_bytes(b"not a folder")
    with pytest.raises(StorageFault) as exc:
        store.upload(b"x", "a.txt", "alice")
    assert exc.value.status_code == 500
    assert list(store.temp_dir.iterdir()) == []
    assert (store.root / "alice").read_bytes() == b"not a folder"


def test_concurrent_same_name_uploads_never_overwrite(store):
    payloads = [f"payload {i}".encode() for i in range(20)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        stored = list(pool.map(lambda p: store.upload(p, "same.txt", "10.0.0.7"), payloads))
    names = [s.name for s in stored]
    assert len(set(names)) == len(payloads)
    for s, p in zip(stored, payloads):
        assert (store.root / "10.0.0.7" / s.name).read_bytes() == p


def test_too_large_upload_leaves_nothing_behind(store):
    with pytest.raises(TooLarge) as exc:
        store.upload(b"x" * 2048, "big.bin", "carol")
    assert exc.value.status_code == 413
    assert list(store.temp_dir.iterdir()) == []
    assert not (store.root / "carol").exists()


def test_upload_at_limit_is_accepted(store):
    stored = store.upload(b"x" * store.config.max_upload_bytes, "edge.bin", "carol")
    assert stored.size == store.config.max_upload_bytes


def test_list_identities_skips_staging(store):
    store.upload(b"1", "a.txt", "zed")
    store.upload(b"2", "b.txt", "alice")
    store.upload(b"3", "c.txt", "alice")
    store.stage_upload(b"pending", "pending.txt")
    summaries = store.list_identities()
    names = [s.identity for s in summaries]
    assert ".temp" not in names
    assert names == sorted(names) == ["admin", "alice", "zed"]
    counts = {s.identity: s.file_count for s in summaries}
    assert counts == {"admin": 0, "alice": 2, "zed": 1}
    assert store.list_identities() == summaries


def test_list_files_unknown_identity(store):
    with pytest.raises(NotFound):
        store.list_files("nobody")
    with pytest.raises(NotFound):
        store.list_files(".temp")


def test_list_all_files_flattens(store):
    store.upload(b"1", "a.txt", "bob")
    store.upload(b"22", "b.txt", "alice")
    store.admin_upload(b"333", "c.txt")
    everything = store.list_all_files()
    assert [f.identity for f in everything] == ["admin", "alice", "bob"]
    assert [f.size for f in everything] == [3, 2, 1]


def test_find_file_first_match_wins(store):
    for identity in ("bob", "alice"):
        store.ensure_identity_dir(identity)
        (store.root / identity / "dup.txt").write_bytes(identity.encode())
    identity, path = store.find_file("dup.txt")
    assert identity == "alice"
    assert path.read_bytes() == b"alice"


def test_find_file_ignores_admin_area(store):
    stored = store.admin_upload(b"public", "notice.txt")
    with pytest.raises(NotFound):
        store.find_file(stored.name)
    assert store.find_admin_file(stored.name).read_bytes() == b"public"


def test_delete_missing_file_changes_nothing(store):
    store.upload(b"keep", "keep.txt", "alice")
    before = tree(store.root)
    with pytest.raises(NotFound):
        store.delete_file("does-not-exist.txt")
    assert tree(store.root) == before


@pytest.mark.parametrize("reserved", [r.value for r in ReservedIdentity])
def test_reserved_folders_cannot_be_deleted(store, reserved):
    store.admin_upload(b"a", "a.txt")
    store.stage_upload(b"b", "b.txt")
    with pytest.raises(Forbidden):
        store.delete_identity_folder(reserved)
    assert (store.root / "admin").is_dir()
    assert (store.root / ".temp").is_dir()
    assert len(list((store.root / "admin").iterdir())) == 1
    assert len(list((store.root / ".temp").iterdir())) == 1


def test_delete_identity_folder(store):
    store.upload(b"a", "a.txt", "alice")
    store.delete_identity_folder("alice")
    assert not (store.root / "alice").exists()
    with pytest.raises(NotFound):
        store.delete_identity_folder("alice")


def test_delete_admin_file(store):
    stored = store.admin_upload(b"a", "a.txt")
    store.delete_admin_file(stored.name)
    with pytest.raises(NotFound):
        store.find_admin_file(stored.name)


def test_end_to_end(store):
    stored = store.upload(b"hi\n", "hello.txt", sanitize_name("nachiket"))
    files = store.list_files("nachiket")
    assert len(files) == 1
    assert files[0].name == stored.name
    assert files[0].name.endswith("_hello.txt")
    assert files[0].size == 3

    identity, path = store.find_file(stored.name)
    assert identity == "nachiket"
    assert path.read_bytes() == b"hi\n"

    assert store.delete_file(stored.name) == "nachiket"
    with pytest.raises(NotFound):
        store.find_file(stored.name)
    assert store.list_files("nachiket") == []


def test_isolated_stores(config, tmp_path):
    from filerepo.services.repository import RepositoryStore
    other = RepositoryStore(config.model_copy(update={"root_dir": tmp_path / "other"}))
    mine = RepositoryStore(config)
    mine.upload(b"a", "a.txt", "alice")
    assert [s.identity for s in other.list_identities()] == ["admin"]


@pytest.mark.parametrize("reserved", ["admin", ".temp"])
def test_public_upload_into_reserved_folder_is_forbidden(store, reserved):
    with pytest.raises(Forbidden):
        store.upload(b"sneaky", "x.txt", reserved)
    assert list(store.admin_dir.iterdir()) == []
    assert list(store.temp_dir.iterdir()) == []
