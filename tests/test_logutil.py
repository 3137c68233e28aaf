import logging

from allowlist_api.logutil import RedactingFilter


def _record(msg, *args):
    return logging.LogRecord("allowlist_api", logging.INFO, __file__, 1, msg, args, None)


def test_key_material_is_masked():
    f = RedactingFilter()
    rec = _record("loaded sk_b64=%s from disk", "c2VjcmV0")
    assert f.filter(rec)
    assert rec.getMessage() == "loaded sk_b64=*** from disk"

    rec = _record("seed: " + "ab" * 32)
    f.filter(rec)
    assert "ab" * 32 not in rec.getMessage()


def test_roots_are_left_alone():
    root = "0x" + "ab" * 32
    rec = _record("alpha-sale root %s", root)
    RedactingFilter().filter(rec)
    assert rec.getMessage() == f"alpha-sale root {root}"
