"""Configure pytest for the picks project."""
import os
import sys
import tempfile
from pathlib import Path

import pytest

# =============================================================================
# Test Environment Configuration
# =============================================================================
# Set environment for tests BEFORE any imports.
# The database must be a file: the test client and asyncio.to_thread run
# queries on other threads, and each thread opens its own connection.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="picks-tests-")
os.environ["PICKS_DB_PATH"] = str(Path(_TEST_DB_DIR) / "picks-test.db")
os.environ.setdefault("APP_ENVIRONMENT", "test")

# Add project root for package imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def reset_profile_service_singleton():
    """Every test starts with a profile service rebuilt from the environment."""
    from visibility.service import reset_profile_service

    reset_profile_service()
    yield
    reset_profile_service()
