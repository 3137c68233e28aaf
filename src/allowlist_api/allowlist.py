from __future__ import annotations
import datetime
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from .addresses import (
    LeafEncoding,
    hash_address,
    normalize_addresses,
    pad_with_placeholders,
    prepare_addresses,
)
from .crypto import B64, ed25519_sign, hash_hex, jcs_dumps
from .errors import EmptyTreeError, LeafNotFoundError, ProofMismatchError
from .merkle import MerkleTree, verify_proof
from .models import AllowlistArtifact, RootAttestation

logger = logging.getLogger(__name__)

ADVISORY = "advisory"
ALPHA_SALE = "alpha-sale"
SALE_LISTS = (ADVISORY, ALPHA_SALE)


def _now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


@dataclass(frozen=True)
class Allowlist:
    name: str
    addresses: Tuple[str, ...]  # checksummed, in tree-input order
    tree: MerkleTree
    encoding: LeafEncoding = LeafEncoding.PACKED

    @property
    def root(self) -> bytes:
        return self.tree.root

    @property
    def hex_root(self) -> str:
        return self.tree.hex_root

    def leaf(self, address: str) -> bytes:
        return hash_address(address, self.encoding)

    def proof(self, address: str) -> List[str]:
        """Hex proof for ``address``; empty when it is not a member."""
        return self.tree.hex_proof(self.leaf(address))

    def is_member(self, address: str) -> bool:
        try:
            self.tree.leaf_index(self.leaf(address))
        except LeafNotFoundError:
            return False
        return True

    def to_artifact(self) -> AllowlistArtifact:
        return AllowlistArtifact(root=self.hex_root, leaves=list(self.addresses))


def self_check(tree: MerkleTree) -> None:
    """Verify the proof of every leaf against the root."""
    for i, leaf in enumerate(tree.leaves):
        if not verify_proof(leaf, tree.proof(leaf, i), tree.root):
            raise ProofMismatchError(f"proof for leaf {i} does not recompute the root")


def build_allowlist(
    name: str,
    addresses: Sequence[str],
    placeholders: Optional[Sequence[str]] = None,
    encoding: LeafEncoding = LeafEncoding.PACKED,
    duplicate_odd: bool = False,
    check: bool = True,
) -> Allowlist:
    """Normalize, sort, optionally pad, and commit ``addresses`` to a root."""
    real = prepare_addresses(addresses)
    if not real:
        raise EmptyTreeError(f"EMPTY_LEAVES: the {name} list is empty")
    padding = normalize_addresses(placeholders) if placeholders else None
    leaves = pad_with_placeholders(real, padding)
    tree = MerkleTree.from_addresses(leaves, encoding, duplicate_odd=duplicate_odd)
    if check:
        self_check(tree)
    logger.info(
        "%s: %d addresses (%d real) -> root %s", name, len(leaves), len(real), tree.hex_root
    )
    return Allowlist(name, tuple(leaves), tree, LeafEncoding(encoding))


def build_sale_roots(
    advisory: Sequence[str],
    alpha_sale: Sequence[str],
    advisory_placeholders: Optional[Sequence[str]] = None,
    alpha_sale_placeholders: Optional[Sequence[str]] = None,
    **kwargs,
) -> Dict[str, Allowlist]:
    """Build both sale lists; refuses to proceed if either one is empty."""
    if not advisory or not alpha_sale:
        raise EmptyTreeError(
            "EMPTY_LEAVES: Either the whitelist leaves or the advisory leaves is empty."
        )
    return {
        ADVISORY: build_allowlist(ADVISORY, advisory, advisory_placeholders, **kwargs),
        ALPHA_SALE: build_allowlist(ALPHA_SALE, alpha_sale, alpha_sale_placeholders, **kwargs),
    }


def load_addresses(path) -> List[str]:
    """Read a JSON array of address strings."""
    data = json.loads(Path(path).read_text())
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of addresses")
    return data


def artifact_path(out_dir, name: str) -> Path:
    return Path(out_dir) / f"{name}-whitelist-output.json"


def export_allowlist(allowlist: Allowlist, path) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(allowlist.to_artifact().model_dump(), indent=2))
    logger.info("exported %s to %s", allowlist.name, p)
    return p


def load_allowlist(
    path,
    name: Optional[str] = None,
    encoding: LeafEncoding = LeafEncoding.PACKED,
    duplicate_odd: bool = False,
) -> Allowlist:
    """Rebuild an allow-list from an exported artifact.

    The leaves are taken as recorded (no re-sorting or padding) and must
    rebuild to the recorded root.
    """
    p = Path(path)
    artifact = AllowlistArtifact(**json.loads(p.read_text()))
    if not artifact.leaves:
        raise EmptyTreeError(f"{p}: artifact has no leaves")
    leaves = normalize_addresses(artifact.leaves)
    tree = MerkleTree.from_addresses(leaves, encoding, duplicate_odd=duplicate_odd)
    if tree.hex_root != artifact.root:
        raise ProofMismatchError(
            f"{p}: leaves rebuild to {tree.hex_root}, artifact records {artifact.root}"
        )
    return Allowlist(name or p.stem, tuple(leaves), tree, LeafEncoding(encoding))


def make_attestation(
    allowlist: Allowlist, signer_sk_bytes: bytes, signer_pk_bytes: bytes
) -> RootAttestation:
    body = {
        "list_name": allowlist.name,
        "tree_size": len(allowlist.tree),
        "merkle_root": hash_hex(allowlist.root),
        "leaf_encoding": allowlist.encoding.value,
        "ts": _now_iso(),
        "signer_pubkey_b64": B64(signer_pk_bytes),
    }
    sig = ed25519_sign(signer_sk_bytes, jcs_dumps(body))
    return RootAttestation(**{**body, "signature_b64": B64(sig)})
