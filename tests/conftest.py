"""Test configuration for pytest."""

import os
import sys
from pathlib import Path
from typing import Generator

import pytest

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from gallery_resolver.database.db_manager import DatabaseManager  # noqa: E402
from gallery_resolver.models import Credentials  # noqa: E402
from gallery_resolver.utils.auth import build_basic_token  # noqa: E402


@pytest.fixture(scope="function")
def test_db_path(tmp_path) -> Path:
    """Path of a temporary gallery database."""
    return tmp_path / "gallery.db"


@pytest.fixture(scope="function")
def db_manager(test_db_path: Path) -> Generator[DatabaseManager, None, None]:
    """Create a database manager with an initialized gallery table."""
    manager = DatabaseManager(str(test_db_path))
    manager.init_database()
    yield manager
    manager.close()
    if test_db_path.exists():
        os.unlink(test_db_path)


@pytest.fixture
def credentials() -> Credentials:
    """Credentials for the `demo` account."""
    return Credentials(
        api_key="123456",
        api_secret="abcdef",
        account_name="demo",
        basic_token=build_basic_token("123456", "abcdef"),
    )


@pytest.fixture
def make_asset():
    """Factory for media service asset entries."""

    def _make_asset(index: int, folder: str = "events") -> dict:
        return {
            "public_id": f"{folder}/photo_{index}",
            "secure_url": f"https://res.cloudinary.com/demo/image/upload/{folder}/photo_{index}.jpg",
            "created_at": f"2024-01-{index:02d}T10:00:00Z",
            "format": "jpg",
            "bytes": 1024 * 1024 * index,
        }

    return _make_asset
