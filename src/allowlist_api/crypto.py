from __future__ import annotations
import base64
from typing import Tuple

import nacl.signing
import nacl.exceptions
import rfc8785
from eth_utils import keccak

HASH_SIZE = 32


def B64(b: bytes) -> str:
    """Base64-encode bytes to ASCII string."""
    return base64.b64encode(b).decode("ascii")


def B64D(s: str) -> bytes:
    """Decode base64 ASCII string to bytes with strict validation."""
    try:
        return base64.b64decode(s.encode("ascii"), validate=True)
    except Exception as e:
        raise ValueError("invalid base64") from e


def keccak256(data: bytes) -> bytes:
    """Ethereum keccak-256 (not NIST SHA3-256)."""
    return keccak(data)


def hash_hex(h: bytes) -> str:
    if len(h) != HASH_SIZE:
        raise ValueError(f"expected {HASH_SIZE}-byte hash, got {len(h)} bytes")
    return "0x" + h.hex()


def hash_from_hex(s: str) -> bytes:
    """Parse a 0x-prefixed 32-byte hex hash."""
    if not isinstance(s, str) or not s.startswith("0x"):
        raise ValueError("hash must be a 0x-prefixed hex string")
    try:
        b = bytes.fromhex(s[2:])
    except ValueError as e:
        raise ValueError("invalid hex hash") from e
    if len(b) != HASH_SIZE:
        raise ValueError(f"expected {HASH_SIZE}-byte hash, got {len(b)} bytes")
    return b


def jcs_dumps(obj) -> bytes:
    """Deterministic canonical JSON bytes per RFC8785."""
    return rfc8785.dumps(obj)


def ed25519_generate() -> Tuple[bytes, bytes]:
    sk = nacl.signing.SigningKey.generate()
    pk = sk.verify_key
    return (sk.encode(), pk.encode())


def ed25519_sign(sk_bytes: bytes, data: bytes) -> bytes:
    sk = nacl.signing.SigningKey(sk_bytes)
    return sk.sign(data).signature


def ed25519_verify(pk_bytes: bytes, data: bytes, signature: bytes) -> bool:
    try:
        vk = nacl.signing.VerifyKey(pk_bytes)
        vk.verify(data, signature)
        return True
    except (nacl.exceptions.BadSignatureError, ValueError, TypeError):
        return False
