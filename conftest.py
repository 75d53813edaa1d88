import shutil
from pathlib import Path

import pytest

from lumia import storage
from lumia.content import session_cache

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def clean_test_data():
    """Wipe and re-init data-tests/ and forget the random pick before every test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR)
    session_cache.reset()
    yield
    # leave data-tests around after tests for inspection; CI can ignore it
