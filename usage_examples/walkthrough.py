# walkthrough.py
"""
Walkthrough against a running File Repository (default localhost:3000).
- Upload a few files for a user (and one without username -> IP folder)
- List folders, the user's folder and the flat file list
- Download each file and compare bytes
- Optional admin part (upload/download/delete, delete user folder)

Run:
    python walkthrough.py --username demo
    python walkthrough.py --username demo --admin-password secret --cleanup
"""

import argparse
from pprint import pformat
import requests

def pretty(x): return pformat(x, width=110)

def api(base_url, method, path, *, params=None, data=None, files=None, auth=None, ok_codes=(200,201)):
    url = base_url + path
    r = requests.request(method, url, params=params, data=data, files=files, auth=auth)
    if r.status_code not in ok_codes:
        raise RuntimeError(f"{method} {path} -> {r.status_code} : {r.text}")
    return r

def upload(base_url, name, content, username=None):
    data = {"username": username} if username else None
    r = api(base_url, "POST", "/upload", data=data, files={"file": (name, content)})
    return r.json()

def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--base-url", default="http://127.0.0.1:3000")
    ap.add_argument("--username", default="demo")
    ap.add_argument("--files", type=int, default=3)
    ap.add_argument("--admin-password", default=None)
    ap.add_argument("--cleanup", action="store_true", help="Delete what was created (needs admin)")
    args = ap.parse_args()
    base = args.base_url.rstrip("/")

    print("\n== PING ==")
    api(base, "GET", "/ping")
    print("API OK.")

    print("\n== UPLOAD ==")
    uploaded = {}
    for i in range(args.files):
        content = f"walkthrough file {i}\n".encode("utf-8")
        res = upload(base, f"note {i}.txt", content, args.username)
        uploaded[res["filename"]] = content
        print(pretty(res))
    anon = upload(base, "anonymous.txt", b"no username\n")
    uploaded[anon["filename"]] = b"no username\n"
    print("without username ->", anon["identity"])

    print("\n== LIST ==")
    print(pretty(api(base, "GET", "/").json()))
    print(pretty(api(base, "GET", f"/uploads/{args.username}").json()))
    print(f"{len(api(base, 'GET', '/files').json())} file(s) in total")

    print("\n== DOWNLOAD ==")
    for name, content in uploaded.items():
        got = api(base, "GET", f"/download/{name}").content
        assert got == content, f"content mismatch for {name}"
        print(f"{name}: OK ({len(got)} bytes)")

    if not args.admin_password:
        print("\nNo --admin-password: admin part skipped.")
        return
    auth = ("admin", args.admin_password)

    print("\n== ADMIN ==")
    res = api(base, "POST", "/admin/upload", files={"file": ("public.txt", b"for everyone\n")}, auth=auth).json()
    print(pretty(res))
    assert api(base, "GET", f"/admin/download/{res['filename']}").content == b"for everyone\n"
    r = api(base, "DELETE", "/uploads/admin", auth=auth, ok_codes=(403,))
    print("delete admin folder ->", r.status_code, r.json()["detail"])

    if args.cleanup:
        print("\n== CLEANUP ==")
        api(base, "DELETE", f"/admin/files/{res['filename']}", auth=auth)
        print(pretty(api(base, "DELETE", f"/uploads/{args.username}", auth=auth).json()))
        print(pretty(api(base, "DELETE", f"/uploads/{anon['identity']}", auth=auth).json()))

    print("\nDone.")

if __name__ == "__main__":
    main()
