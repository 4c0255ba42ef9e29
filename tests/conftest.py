"""
Shared fixtures: an application wired to throwaway directories.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from photoweb.config import Settings
from photoweb.main import create_app
from photoweb.services.storage import ImageStorage

STYLE_CSS = "body { color: black; }\n"


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    static = tmp_path / "public"
    (static / "css").mkdir(parents=True)
    (static / "css" / "style.css").write_text(STYLE_CSS, encoding="utf-8")
    return static


@pytest.fixture
def app_settings(upload_dir: Path, static_dir: Path) -> Settings:
    return Settings(upload_dir=str(upload_dir), static_dir=str(static_dir), log_level="DEBUG")


@pytest.fixture
def client(app_settings: Settings) -> Generator[TestClient, None, None]:
    """TestClient with the lifespan run (views loaded, upload dir created)."""
    with TestClient(create_app(app_settings)) as client:
        yield client


@pytest.fixture
def storage(upload_dir: Path) -> ImageStorage:
    store = ImageStorage(upload_dir, chunk_size=4)
    store.ensure_root()
    return store
