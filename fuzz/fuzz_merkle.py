"""Fuzz harness for sorted-pair tree construction & proof completeness."""
from __future__ import annotations
import atheris
import sys

with atheris.instrument_imports():
    from allowlist_api.crypto import keccak256
    from allowlist_api.merkle import MerkleTree, verify_proof


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 2:
        return
    # First byte picks the odd-node policy and leaf count; the rest seeds leaves.
    duplicate_odd = bool(data[0] & 0x80)
    count = 1 + (data[0] & 0x3F)
    body = data[1:]
    leaves = [keccak256(body + i.to_bytes(2, "big")) for i in range(count)]
    tree = MerkleTree.from_leaves(leaves, duplicate_odd=duplicate_odd)
    rebuilt = MerkleTree.from_leaves(list(reversed(leaves)), duplicate_odd=duplicate_odd)
    if rebuilt.root != tree.root:
        raise RuntimeError("root depends on input order")
    leaf = leaves[data[-1] % count]
    if not verify_proof(leaf, tree.proof(leaf), tree.root):
        raise RuntimeError("valid proof failed")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
