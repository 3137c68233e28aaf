"""Address canonicalization and leaf encoding.

A leaf is the exact byte string the sale contract hashes for ``msg.sender``:

- ``packed``: ``abi.encodePacked(address)``, the 20 raw address bytes
  (what ``solidityKeccak256(["address"], [addr])`` hashes).
- ``padded``: ``abi.encode(address)``, a 32-byte word with the address in the
  low 20 bytes.
"""
from __future__ import annotations
import logging
import os
import re
from collections import Counter
from enum import Enum
from typing import Iterable, List, Optional, Sequence

from eth_utils import is_checksum_address, to_checksum_address

from .crypto import keccak256
from .errors import InvalidAddressError

logger = logging.getLogger(__name__)

ADDRESS_SIZE = 20
WORD_SIZE = 32

_ADDRESS_RE = re.compile(r"(0x)?[0-9a-fA-F]{40}")


class LeafEncoding(str, Enum):
    PACKED = "packed"
    PADDED = "padded"


def normalize_address(raw) -> str:
    """Return the EIP-55 checksummed form of ``raw``.

    Lower- and upper-case inputs are accepted as-is; mixed case must carry a
    valid checksum, as with ethers' ``getAddress``.
    """
    if not isinstance(raw, str):
        raise InvalidAddressError(raw, "expected a string")
    if not _ADDRESS_RE.fullmatch(raw):
        raise InvalidAddressError(raw)
    body = raw[2:] if raw.startswith("0x") else raw
    candidate = "0x" + body
    if body != body.lower() and body != body.upper():
        if not is_checksum_address(candidate):
            raise InvalidAddressError(raw, "bad checksum")
    try:
        return to_checksum_address(candidate)
    except ValueError:
        raise InvalidAddressError(raw) from None


def normalize_addresses(raws: Iterable) -> List[str]:
    """Canonicalize every entry, failing on the first malformed one.

    Order is preserved and duplicates are kept; they are only reported.
    """
    out = []
    for i, raw in enumerate(raws):
        try:
            out.append(normalize_address(raw))
        except InvalidAddressError as e:
            raise InvalidAddressError(e.value, e.reason, position=i) from None
    dupes = [a for a, n in Counter(out).items() if n > 1]
    if dupes:
        logger.warning("%d duplicate address(es) in list, e.g. %s", len(dupes), dupes[0])
    return out


def prepare_addresses(raws: Iterable) -> List[str]:
    """Normalize then sort, the canonical order used before hashing."""
    return sorted(normalize_addresses(raws))


def encode_leaf(address: str, encoding: LeafEncoding = LeafEncoding.PACKED) -> bytes:
    raw = bytes.fromhex(normalize_address(address)[2:])
    if LeafEncoding(encoding) is LeafEncoding.PADDED:
        return b"\x00" * (WORD_SIZE - ADDRESS_SIZE) + raw
    return raw


def hash_leaf(leaf: bytes) -> bytes:
    if len(leaf) not in (ADDRESS_SIZE, WORD_SIZE):
        raise ValueError(f"leaf must be {ADDRESS_SIZE} or {WORD_SIZE} bytes, got {len(leaf)}")
    return keccak256(leaf)


def hash_address(address: str, encoding: LeafEncoding = LeafEncoding.PACKED) -> bytes:
    return hash_leaf(encode_leaf(address, encoding))


def generate_placeholders(count: int) -> List[str]:
    """Random checksummed addresses used to pad a list to a fixed size."""
    if count < 0:
        raise ValueError("count must be >= 0")
    return [to_checksum_address("0x" + os.urandom(ADDRESS_SIZE).hex()) for _ in range(count)]


def pad_with_placeholders(
    addresses: Sequence[str], placeholders: Optional[Sequence[str]]
) -> List[str]:
    """Overlay ``addresses`` onto the leading slots of ``placeholders``.

    The tree then always has ``len(placeholders)`` leaves, so the deployed
    root does not reveal how many real entries the list has.
    """
    if not placeholders:
        return list(addresses)
    if len(addresses) > len(placeholders):
        logger.warning(
            "list has %d entries but only %d placeholders; not padding",
            len(addresses),
            len(placeholders),
        )
        return list(addresses)
    padded = list(placeholders)
    padded[: len(addresses)] = addresses
    return padded
