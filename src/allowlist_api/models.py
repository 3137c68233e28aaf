from __future__ import annotations
from typing import List
from pydantic import BaseModel, Field, field_validator
from pydantic import ConfigDict

from .crypto import hash_from_hex


def _check_hex_hash(v: str) -> str:
    hash_from_hex(v)
    return v.lower()


class AllowlistArtifact(BaseModel):
    """Exported ``{root, leaves}`` file.

    ``leaves`` holds the canonical checksummed addresses in tree-input order,
    which is enough to rebuild the tree and regenerate any proof offline.
    """

    model_config = ConfigDict(extra="forbid")

    root: str
    leaves: List[str] = Field(default_factory=list)

    @field_validator("root")
    @classmethod
    def _root_hash(cls, v):  # type: ignore[override]
        return _check_hex_hash(v)


class RootAttestation(BaseModel):
    list_name: str
    tree_size: int
    merkle_root: str
    leaf_encoding: str
    ts: str
    signer_pubkey_b64: str
    signature_b64: str


class ProofResponse(BaseModel):
    address: str
    leaf: str
    proof: List[str]
    member: bool


class VerifyRequest(BaseModel):
    model_config = ConfigDict(strict=True)

    address: str
    proof: List[str]
    root: str

    @field_validator("proof")
    @classmethod
    def _proof_hashes(cls, v):  # type: ignore[override]
        return [_check_hex_hash(p) for p in v]

    @field_validator("root")
    @classmethod
    def _root_hash(cls, v):  # type: ignore[override]
        return _check_hex_hash(v)
