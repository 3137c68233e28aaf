from __future__ import annotations
import os
import datetime
from functools import lru_cache
from pathlib import Path
from fastapi import FastAPI, HTTPException

from .settings import settings
from .addresses import LeafEncoding, hash_address, normalize_address
from .allowlist import SALE_LISTS, Allowlist, artifact_path, load_allowlist
from .crypto import hash_from_hex, hash_hex
from .errors import InvalidAddressError, ProofMismatchError
from .merkle import verify_proof
from .models import ProofResponse, VerifyRequest

app = FastAPI(title="Allow-list proof service")


def _output_dir() -> Path:
    return Path(os.getenv("ALLOWLIST_OUTPUT_DIR", settings.output_dir))


def _encoding() -> LeafEncoding:
    return LeafEncoding(os.getenv("ALLOWLIST_LEAF_ENCODING", settings.leaf_encoding.value))


def _duplicate_odd() -> bool:
    raw = os.getenv("ALLOWLIST_DUPLICATE_ODD")
    if raw is None:
        return settings.duplicate_odd
    return raw.strip().lower() in ("1", "true", "yes", "on")


@lru_cache(maxsize=16)
def _cached_allowlist(
    path: str, mtime_ns: int, size: int, name: str, encoding: LeafEncoding, duplicate_odd: bool
) -> Allowlist:
    # mtime_ns and size only key the cache so a rewritten artifact is reloaded
    return load_allowlist(path, name=name, encoding=encoding, duplicate_odd=duplicate_odd)


def _load(name: str) -> Allowlist:
    if name not in SALE_LISTS:
        raise HTTPException(status_code=404, detail="unknown list")
    path = artifact_path(_output_dir(), name)
    if not path.exists():
        raise HTTPException(status_code=404, detail="list not built")
    st = path.stat()
    try:
        return _cached_allowlist(
            str(path), st.st_mtime_ns, st.st_size, name, _encoding(), _duplicate_odd()
        )
    except ProofMismatchError:
        raise HTTPException(status_code=500, detail="artifact root mismatch")
    except ValueError:
        raise HTTPException(status_code=500, detail="artifact unreadable")


@app.get("/healthz")
async def healthz():
    return {"ok": True, "ts": datetime.datetime.now(datetime.timezone.utc).isoformat()}


# sync handlers: tree rebuilds are CPU-bound and run in the threadpool
@app.get("/lists/{name}")
def list_root(name: str):
    allowlist = _load(name)
    return {"name": name, "root": allowlist.hex_root, "tree_size": len(allowlist.tree)}


@app.get("/lists/{name}/proof/{address}", response_model=ProofResponse)
def list_proof(name: str, address: str):
    allowlist = _load(name)
    try:
        canonical = normalize_address(address)
    except InvalidAddressError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ProofResponse(
        address=canonical,
        leaf=hash_hex(allowlist.leaf(canonical)),
        proof=allowlist.proof(canonical),
        member=allowlist.is_member(canonical),
    )


@app.post("/verify")
async def verify(req: VerifyRequest):
    try:
        leaf = hash_address(req.address, _encoding())
    except InvalidAddressError as e:
        raise HTTPException(status_code=400, detail=str(e))
    ok = verify_proof(leaf, [hash_from_hex(p) for p in req.proof], hash_from_hex(req.root))
    return {"valid": ok}
