import os
from pathlib import Path

import pytest


@pytest.fixture(scope="session")
def evidence_index_dat() -> Path:
    """Provide a real index.dat for tests that need genuine evidence."""
    env_path = os.environ.get("INDEX_DAT_PATH")
    path = Path(env_path) if env_path else Path("images/History.IE5/index.dat")
    if not path.exists():
        pytest.skip(f"index.dat evidence not found at {path}")
    return path
