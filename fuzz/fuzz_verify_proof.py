"""Proof soundness fuzzing with tampered proofs and non-member leaves."""
from __future__ import annotations
import atheris
import sys
import random

with atheris.instrument_imports():
    from allowlist_api.crypto import keccak256
    from allowlist_api.merkle import MerkleTree, verify_proof


def TestOneInput(data: bytes):  # noqa: N802
    if len(data) < 8:
        return
    seed = int.from_bytes(data[:4], 'little')
    random.seed(seed)
    count = 2 + (data[4] % 62)
    body = data[5:]
    leaves = [keccak256(body + i.to_bytes(2, 'big')) for i in range(count)]
    tree = MerkleTree.from_leaves(leaves[:-1])
    idx = seed % (count - 1)
    leaf = leaves[idx]
    proof = list(tree.proof(leaf))
    outsider = leaves[-1]
    if tree.proof(outsider):
        raise RuntimeError("non-member received a proof")
    if verify_proof(outsider, proof, tree.root):
        raise RuntimeError("member proof verified for a non-member")
    if proof and random.random() < 0.5:
        pos = random.randrange(len(proof))
        sib = proof[pos]
        proof[pos] = bytes([sib[0] ^ 0x01]) + sib[1:]
        if verify_proof(leaf, proof, tree.root):
            raise RuntimeError("tampered proof unexpectedly verified")


def main():
    atheris.Setup(sys.argv, TestOneInput, enable_python_coverage=True)
    atheris.Fuzz()


if __name__ == "__main__":
    main()
