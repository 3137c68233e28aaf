from typing import Dict, Any, Sequence
from allowlist_api.addresses import LeafEncoding, hash_address
from allowlist_api.crypto import ed25519_verify, jcs_dumps, B64D, hash_from_hex
from allowlist_api.errors import InvalidAddressError
from allowlist_api.merkle import verify_proof


def verify_membership(
    address: str,
    proof_hex: Sequence[str],
    root_hex: str,
    encoding: LeafEncoding = LeafEncoding.PACKED,
) -> bool:
    """Return True if ``proof_hex`` proves ``address`` against ``root_hex``.

    Performs the same computation as the sale contract's proof check, so a
    True here means the claim transaction will pass the allow-list gate.
    Malformed addresses or hashes yield False.
    """
    try:
        leaf = hash_address(address, encoding)
        proof = [hash_from_hex(p) for p in proof_hex]
        root = hash_from_hex(root_hex)
    except (InvalidAddressError, ValueError):
        return False
    return verify_proof(leaf, proof, root)


def verify_attestation(attestation_json: Dict[str, Any]) -> bool:
    """Verify a signed root attestation (Ed25519 over RFC 8785 JSON)."""
    try:
        sig_b64 = attestation_json["signature_b64"]
        pub_b64 = attestation_json["signer_pubkey_b64"]
    except KeyError:
        return False
    body = {k: v for k, v in attestation_json.items() if k != "signature_b64"}
    try:
        return ed25519_verify(B64D(pub_b64), jcs_dumps(body), B64D(sig_b64))
    except ValueError:
        return False
