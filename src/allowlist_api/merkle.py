"""Sorted-pair keccak Merkle tree, compatible with OpenZeppelin ``MerkleProof``.

- node(a, b) = keccak256(min(a, b) || max(a, b))
- leaves are sorted byte-wise before building
- an odd last node is promoted to the next level unchanged, unless
  ``duplicate_odd`` pairs it with itself
- proofs are flat lists of sibling hashes, no position flags
"""
from __future__ import annotations
import bisect
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .addresses import LeafEncoding, hash_address
from .crypto import HASH_SIZE, hash_hex, keccak256
from .errors import EmptyTreeError, LeafNotFoundError

logger = logging.getLogger(__name__)


def hash_pair(a: bytes, b: bytes) -> bytes:
    return keccak256(a + b) if a <= b else keccak256(b + a)


def _check_hash(h: bytes) -> bytes:
    if not isinstance(h, (bytes, bytearray)) or len(h) != HASH_SIZE:
        raise ValueError(f"tree nodes must be {HASH_SIZE}-byte hashes")
    return bytes(h)


@dataclass(frozen=True)
class MerkleTree:
    leaves: Tuple[bytes, ...]
    levels: Tuple[Tuple[bytes, ...], ...]  # level 0 = leaves
    sorted_leaves: bool = True
    duplicate_odd: bool = False

    @classmethod
    def from_leaves(
        cls,
        leaves: Sequence[bytes],
        sort_leaves: bool = True,
        duplicate_odd: bool = False,
    ) -> "MerkleTree":
        if not leaves:
            raise EmptyTreeError("cannot build a Merkle tree from zero leaves")
        lvl = [_check_hash(leaf) for leaf in leaves]
        if sort_leaves:
            lvl.sort()
        levels = [tuple(lvl)]
        while len(lvl) > 1:
            nxt = []
            for i in range(0, len(lvl), 2):
                if i + 1 < len(lvl):
                    nxt.append(hash_pair(lvl[i], lvl[i + 1]))
                elif duplicate_odd:
                    nxt.append(hash_pair(lvl[i], lvl[i]))
                else:
                    nxt.append(lvl[i])  # promote unchanged
            levels.append(tuple(nxt))
            lvl = nxt
        logger.debug("built tree: %d leaves, %d levels", len(levels[0]), len(levels))
        return cls(levels[0], tuple(levels), sort_leaves, duplicate_odd)

    @classmethod
    def from_addresses(
        cls,
        addresses: Sequence[str],
        encoding: LeafEncoding = LeafEncoding.PACKED,
        duplicate_odd: bool = False,
    ) -> "MerkleTree":
        return cls.from_leaves(
            [hash_address(a, encoding) for a in addresses], duplicate_odd=duplicate_odd
        )

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def hex_root(self) -> str:
        return hash_hex(self.root)

    def __len__(self) -> int:
        return len(self.leaves)

    def _find(self, leaf: bytes) -> int:
        if self.sorted_leaves:
            i = bisect.bisect_left(self.leaves, leaf)
            return i if i < len(self.leaves) and self.leaves[i] == leaf else -1
        try:
            return self.leaves.index(leaf)
        except ValueError:
            return -1

    def leaf_index(self, leaf: bytes) -> int:
        """Position of ``leaf`` in level 0; raises LeafNotFoundError."""
        idx = self._find(leaf)
        if idx < 0:
            raise LeafNotFoundError(f"leaf {leaf.hex()} is not in the tree")
        return idx

    def proof(self, leaf: bytes, index: Optional[int] = None) -> List[bytes]:
        """Sibling hashes from ``leaf`` up to the root.

        An empty list means "not a member": the leaf is absent, or ``index``
        is out of range or does not hold ``leaf``. With a single-leaf tree the
        proof of the one member is also empty; it verifies because root == leaf.
        """
        if index is None:
            index = self._find(leaf)
        if index < 0 or index >= len(self.leaves) or self.leaves[index] != leaf:
            return []
        proof = []
        idx = index
        for level in self.levels[:-1]:
            sibling_idx = idx - 1 if idx % 2 == 1 else idx + 1
            if sibling_idx < len(level):
                proof.append(level[sibling_idx])
            elif self.duplicate_odd:
                proof.append(level[idx])
            idx //= 2
        return proof

    def hex_proof(self, leaf: bytes, index: Optional[int] = None) -> List[str]:
        return [hash_hex(p) for p in self.proof(leaf, index)]

    def proof_for_address(
        self, address: str, encoding: LeafEncoding = LeafEncoding.PACKED
    ) -> List[bytes]:
        return self.proof(hash_address(address, encoding))


def process_proof(leaf: bytes, proof: Sequence[bytes]) -> bytes:
    h = leaf
    for sibling in proof:
        h = hash_pair(h, sibling)
    return h


def verify_proof(leaf: bytes, proof: Sequence[bytes], root: bytes) -> bool:
    """Recompute the root from ``leaf`` and ``proof`` and compare."""
    if len(leaf) != HASH_SIZE or len(root) != HASH_SIZE:
        return False
    if any(len(p) != HASH_SIZE for p in proof):
        return False
    return process_proof(leaf, proof) == root
