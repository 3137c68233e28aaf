import json

import pytest

from allowlist_api.addresses import LeafEncoding, generate_placeholders, normalize_address
from allowlist_api.allowlist import (
    ADVISORY,
    ALPHA_SALE,
    artifact_path,
    build_allowlist,
    build_sale_roots,
    export_allowlist,
    load_addresses,
    load_allowlist,
    make_attestation,
    self_check,
)
from allowlist_api.crypto import ed25519_generate
from allowlist_api.errors import EmptyTreeError, InvalidAddressError, ProofMismatchError
from allowlist_api.merkle import MerkleTree
from allowlist_sdk.verify import verify_attestation, verify_membership
from tests._helpers import make_addresses


def test_build_sorts_and_proves_every_member():
    raw = list(reversed(make_addresses(6)))
    al = build_allowlist(ADVISORY, raw)
    assert list(al.addresses) == sorted(normalize_address(a) for a in raw)
    for a in raw:
        assert al.is_member(a)
        assert verify_membership(a, al.proof(a), al.hex_root)


def test_case_variants_build_the_same_root():
    raw = make_addresses(5, start=0xABC)
    upper = ["0x" + a[2:].upper() for a in raw]
    assert build_allowlist(ADVISORY, raw).root == build_allowlist(ADVISORY, upper).root


def test_non_member():
    al = build_allowlist(ADVISORY, make_addresses(3))
    outsider = make_addresses(1, start=100)[0]
    assert not al.is_member(outsider)
    assert al.proof(outsider) == []
    assert not verify_membership(outsider, al.proof(make_addresses(1)[0]), al.hex_root)


def test_invalid_address_aborts_build():
    with pytest.raises(InvalidAddressError):
        build_allowlist(ADVISORY, make_addresses(3) + ["0xnope"])


def test_empty_list_rejected():
    with pytest.raises(EmptyTreeError):
        build_allowlist(ADVISORY, [])


def test_sale_roots_refuse_an_empty_list():
    with pytest.raises(EmptyTreeError) as exc:
        build_sale_roots(make_addresses(2), [])
    assert "EMPTY_LEAVES" in str(exc.value)
    with pytest.raises(EmptyTreeError):
        build_sale_roots([], make_addresses(2))


def test_sale_roots_builds_both_lists():
    lists = build_sale_roots(make_addresses(2), make_addresses(5, start=50))
    assert set(lists) == {ADVISORY, ALPHA_SALE}
    assert lists[ADVISORY].root != lists[ALPHA_SALE].root
    assert len(lists[ALPHA_SALE].tree) == 5


def test_placeholder_padding_hides_list_size():
    placeholders = generate_placeholders(16)
    real = make_addresses(3)
    al = build_allowlist(ALPHA_SALE, real, placeholders=placeholders)
    assert len(al.tree) == 16
    assert list(al.addresses[:3]) == [normalize_address(a) for a in real]
    assert list(al.addresses[3:]) == placeholders[3:]
    for a in real:
        assert verify_membership(a, al.proof(a), al.hex_root)


def test_padded_encoding_changes_root():
    raw = make_addresses(4)
    packed = build_allowlist(ADVISORY, raw)
    padded = build_allowlist(ADVISORY, raw, encoding=LeafEncoding.PADDED)
    assert packed.root != padded.root
    a = raw[0]
    assert verify_membership(a, padded.proof(a), padded.hex_root, LeafEncoding.PADDED)
    assert not verify_membership(a, padded.proof(a), padded.hex_root)


def test_self_check_detects_corrupted_tree():
    tree = MerkleTree.from_addresses(make_addresses(4))
    levels = list(tree.levels)
    levels[-1] = (b"\x00" * 32,)
    broken = MerkleTree(tree.leaves, tuple(levels))
    with pytest.raises(ProofMismatchError):
        self_check(broken)


def test_export_then_load(tmp_path):
    al = build_allowlist(ADVISORY, make_addresses(7))
    out = export_allowlist(al, artifact_path(tmp_path, ADVISORY))
    assert out.name == "advisory-whitelist-output.json"
    data = json.loads(out.read_text())
    assert set(data) == {"root", "leaves"}
    assert data["root"] == al.hex_root
    assert data["leaves"] == list(al.addresses)

    loaded = load_allowlist(out, name=ADVISORY)
    assert loaded.root == al.root
    a = make_addresses(7)[4]
    assert loaded.proof(a) == al.proof(a)


def test_load_rejects_tampered_artifact(tmp_path):
    al = build_allowlist(ADVISORY, make_addresses(4))
    out = export_allowlist(al, tmp_path / "a.json")
    data = json.loads(out.read_text())
    data["leaves"][0] = make_addresses(1, start=999)[0]
    out.write_text(json.dumps(data))
    with pytest.raises(ProofMismatchError):
        load_allowlist(out)


def test_load_rejects_malformed_root(tmp_path):
    p = tmp_path / "a.json"
    p.write_text(json.dumps({"root": "0x1234", "leaves": make_addresses(2)}))
    with pytest.raises(ValueError):
        load_allowlist(p)


def test_load_addresses(write_list):
    p = write_list("list.json", make_addresses(2))
    assert load_addresses(p) == make_addresses(2)
    bad = write_list("bad.json", {"not": "a list"})
    with pytest.raises(ValueError):
        load_addresses(bad)


def test_attestation_roundtrip():
    sk, pk = ed25519_generate()
    al = build_allowlist(ALPHA_SALE, make_addresses(3))
    att = make_attestation(al, sk, pk).model_dump()
    assert att["merkle_root"] == al.hex_root
    assert att["tree_size"] == 3
    assert verify_attestation(att)
    att["merkle_root"] = "0x" + "00" * 32
    assert not verify_attestation(att)
    assert not verify_attestation({"merkle_root": al.hex_root})
