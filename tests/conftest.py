import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def _clean_savefile_env(monkeypatch):
    for name in (
        "SAVEFILE_DATA_DIR",
        "SAVEFILE_STRICT",
        "SAVEFILE_ATOMIC_WRITES",
        "SAVEFILE_INDENT",
        "SAVEFILE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
