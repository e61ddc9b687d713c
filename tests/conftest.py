# File: tests/conftest.py

from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy import func, select

from stopmotion.models.image import ProjectImage
from stopmotion.models.project import Project, user_project_join
from stopmotion.models.user import User
from stopmotion.services.project_store import ProjectStore


@pytest.fixture
def store(tmp_path):
    s = ProjectStore(database_url=f"sqlite:///{tmp_path / 'test.db'}")
    yield s
    s.close()


@pytest.fixture
def frames_dir(tmp_path) -> Path:
    d = tmp_path / "frames"
    d.mkdir()
    return d


@pytest.fixture
def make_image():
    """Write a small real image; the format follows the file extension."""

    def _make(path: Path, color=(200, 30, 30), size=(4, 3)) -> Path:
        fmt = "PNG" if path.suffix.lower() == ".png" else "JPEG"
        Image.new("RGB", size, color).save(path, format=fmt)
        return path

    return _make


@pytest.fixture
def count_rows(store):
    """Row counts for every table, read outside any store operation."""

    def _count() -> dict:
        with store.SessionLocal() as db:
            return {
                "users": db.scalar(select(func.count()).select_from(User)),
                "projects": db.scalar(select(func.count()).select_from(Project)),
                "links": db.scalar(select(func.count()).select_from(user_project_join)),
                "images": db.scalar(select(func.count()).select_from(ProjectImage)),
            }

    return _count
