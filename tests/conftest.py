import json
import sys
from pathlib import Path

import pytest

# Ensure the 'src' directory is on sys.path for imports in tests
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

GOLDEN_ADDRESSES = [
    "0x" + "1" * 40,
    "0x" + "2" * 40,
    "0x" + "3" * 40,
    "0x" + "4" * 40,
]


@pytest.fixture
def golden_addresses():
    return list(GOLDEN_ADDRESSES)


@pytest.fixture
def write_list(tmp_path):
    def _write(name, addresses):
        p = tmp_path / name
        p.write_text(json.dumps(addresses))
        return p

    return _write
