# File: tests/test_projects.py

"""
ProjectStore project creation, listing and image access.

Real JPEG/PNG files are written with Pillow into a temp folder for each test.
"""

import threading

import pytest
from sqlalchemy import event
from sqlalchemy.exc import IntegrityError, OperationalError

from stopmotion.core.errors import (
    IngestCancelled,
    InvalidDirectory,
    NotFound,
    StorageFailure,
)
from stopmotion.models.image import ProjectImage
from stopmotion.models.project import Project


@pytest.fixture
def alice(store):
    return store.register_user("alice", "pw")


def test_mixed_folder_is_filtered_and_sorted(store, alice, frames_dir, make_image):
    make_image(frames_dir / "b.png")
    make_image(frames_dir / "a.jpg")
    (frames_dir / "c.txt").write_text("not an image")
    make_image(frames_dir / "d.JPEG")

    result = store.create_project("alice", "walk", frames_dir)

    assert result.image_count == 3
    assert result.skipped == []
    images = store.list_project_images(result.id)
    assert [i.filename for i in images] == ["a.jpg", "b.png", "d.JPEG"]
    assert [i.idx for i in images] == [0, 1, 2]
    assert [i.format for i in images] == ["JPEG", "PNG", "JPEG"]


def test_corrupt_file_is_skipped_without_gap(store, alice, frames_dir, make_image):
    make_image(frames_dir / "frame1.jpg")
    (frames_dir / "frame2.png").write_bytes(b"\x89PNG garbage, definitely not a png")
    (frames_dir / "frame3.jpg").write_bytes(b"")
    make_image(frames_dir / "frame4.png")

    result = store.create_project("alice", "walk", frames_dir)

    assert result.image_count == 2
    assert sorted(s.filename for s in result.skipped) == ["frame2.png", "frame3.jpg"]
    assert all(s.reason for s in result.skipped)

    images = store.list_project_images(result.id)
    assert [(i.idx, i.filename) for i in images] == [(0, "frame1.jpg"), (1, "frame4.png")]


def test_parallel_decoding_keeps_dense_sorted_indices(tmp_path, frames_dir, make_image):
    from stopmotion.services.project_store import ProjectStore

    names = [f"f{n:02d}.png" for n in range(12)]
    for n, name in enumerate(names):
        if n in (3, 7):
            (frames_dir / name).write_bytes(b"broken")
        else:
            make_image(frames_dir / name, color=(n * 10, 0, 0))

    with ProjectStore(database_url=f"sqlite:///{tmp_path / 'par.db'}", ingest_workers=4) as store:
        store.register_user("alice", "pw")
        result = store.create_project("alice", "walk", frames_dir)
        images = store.list_project_images(result.id)

    expected = [name for n, name in enumerate(names) if n not in (3, 7)]
    assert [i.filename for i in images] == expected
    assert [i.idx for i in images] == list(range(10))
    assert [s.filename for s in result.skipped] == ["f03.png", "f07.png"]


def test_project_is_linked_to_owner(store, alice, frames_dir, make_image):
    make_image(frames_dir / "a.png")
    result = store.create_project("alice", "walk", frames_dir)

    projects = store.list_projects_for_user(alice)
    assert [(p.id, p.name, p.image_count) for p in projects] == [(result.id, "walk", 1)]


def test_empty_folder_creates_empty_project(store, alice, frames_dir):
    result = store.create_project("alice", "empty", frames_dir)
    assert result.image_count == 0
    assert store.list_project_images(result.id) == []


def test_unknown_owner(store, frames_dir, count_rows):
    with pytest.raises(NotFound):
        store.create_project("ghost", "walk", frames_dir)
    assert count_rows()["projects"] == 0


def test_owner_checked_before_directory(store, tmp_path):
    with pytest.raises(NotFound):
        store.create_project("ghost", "walk", tmp_path / "missing")


def test_missing_directory(store, alice, tmp_path, count_rows):
    with pytest.raises(InvalidDirectory):
        store.create_project("alice", "walk", tmp_path / "missing")
    assert count_rows()["projects"] == 0


def test_file_instead_of_directory(store, alice, frames_dir, make_image, count_rows):
    path = make_image(frames_dir / "a.png")
    with pytest.raises(InvalidDirectory):
        store.create_project("alice", "walk", path)
    assert count_rows()["projects"] == 0


def test_storage_failure_mid_import_rolls_back(store, alice, frames_dir, make_image, count_rows):
    for name in ("a.png", "b.png", "c.png"):
        make_image(frames_dir / name)

    def fail_on_second_frame(mapper, connection, target):
        if target.idx == 1:
            raise OperationalError("INSERT INTO Images", {}, Exception("disk I/O error"))

    event.listen(ProjectImage, "before_insert", fail_on_second_frame)
    try:
        with pytest.raises(StorageFailure) as excinfo:
            store.create_project("alice", "walk", frames_dir)
    finally:
        event.remove(ProjectImage, "before_insert", fail_on_second_frame)

    assert isinstance(excinfo.value.__cause__, OperationalError)
    counts = count_rows()
    assert counts["projects"] == 0
    assert counts["links"] == 0
    assert counts["images"] == 0
    assert store.list_projects_for_user(alice) == []

    # the store is still usable afterwards
    result = store.create_project("alice", "walk", frames_dir)
    assert result.image_count == 3


def test_cancel_before_decoding(store, alice, frames_dir, make_image, count_rows):
    make_image(frames_dir / "a.png")
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(IngestCancelled):
        store.create_project("alice", "walk", frames_dir, cancel_event=cancel)
    assert count_rows()["projects"] == 0


def test_cancel_after_rows_written_rolls_back(store, alice, frames_dir, make_image, count_rows):
    make_image(frames_dir / "a.png")
    make_image(frames_dir / "b.png")
    cancel = threading.Event()

    def cancel_during_write(mapper, connection, target):
        cancel.set()

    event.listen(Project, "after_insert", cancel_during_write)
    try:
        with pytest.raises(IngestCancelled):
            store.create_project("alice", "walk", frames_dir, cancel_event=cancel)
    finally:
        event.remove(Project, "after_insert", cancel_during_write)

    assert count_rows() == {"users": 1, "projects": 0, "links": 0, "images": 0}


def test_list_projects_for_user_with_none(store, alice):
    assert store.list_projects_for_user(alice) == []


def test_list_projects_for_unknown_user(store):
    assert store.list_projects_for_user(9999) == []


def test_projects_are_scoped_to_owner(store, alice, frames_dir, make_image):
    bob = store.register_user("bob", "pw")
    make_image(frames_dir / "a.png")

    first = store.create_project("alice", "walk", frames_dir)
    second = store.create_project("alice", "run", frames_dir)
    theirs = store.create_project("bob", "walk", frames_dir)

    assert [p.id for p in store.list_projects_for_user(alice)] == [first.id, second.id]
    assert [p.id for p in store.list_projects_for_user(bob)] == [theirs.id]


def test_find_project_prefers_latest_duplicate_name(store, alice, frames_dir, make_image):
    make_image(frames_dir / "a.png")
    store.create_project("alice", "walk", frames_dir)
    latest = store.create_project("alice", "walk", frames_dir)

    found = store.find_project("alice", "walk")
    assert found.id == latest.id
    assert found.image_count == 1

    with pytest.raises(NotFound):
        store.find_project("alice", "jump")


def test_image_payload_is_original_bytes(store, alice, frames_dir, make_image):
    path = make_image(frames_dir / "a.jpg", size=(8, 6))
    result = store.create_project("alice", "walk", frames_dir)

    fmt, payload = store.get_image_payload(result.id, 0)
    assert fmt == "JPEG"
    assert payload == path.read_bytes()

    meta = store.list_project_images(result.id)[0]
    assert (meta.width, meta.height) == (8, 6)

    with pytest.raises(NotFound):
        store.get_image_payload(result.id, 1)


def test_list_images_unknown_project(store):
    with pytest.raises(NotFound):
        store.list_project_images(12345)


def test_schema_rejects_duplicate_frame_index(store, alice, frames_dir, make_image):
    make_image(frames_dir / "a.png")
    result = store.create_project("alice", "walk", frames_dir)

    with store.SessionLocal() as db:
        db.add(ProjectImage(
            project_id=result.id, idx=0, filename="dup.png",
            format="PNG", width=1, height=1, payload=b"x",
        ))
        with pytest.raises(IntegrityError):
            db.flush()
        db.rollback()


def test_schema_rejects_image_for_missing_project(store):
    with store.SessionLocal() as db:
        db.add(ProjectImage(
            project_id=999, idx=0, filename="a.png",
            format="PNG", width=1, height=1, payload=b"x",
        ))
        with pytest.raises(IntegrityError):
            db.flush()
        db.rollback()


@pytest.mark.parametrize("url", ["bogus://x", "not a url"])
def test_unusable_database_url_raises_storage_failure(url):
    from stopmotion.services.project_store import ProjectStore

    with pytest.raises(StorageFailure):
        ProjectStore(database_url=url)


def test_cancel_while_decoding_in_parallel(tmp_path, frames_dir, make_image, monkeypatch):
    from stopmotion.services import ingest_service
    from stopmotion.services.project_store import ProjectStore

    for n in range(8):
        make_image(frames_dir / f"f{n}.png")

    cancel = threading.Event()
    decoded = []
    real_decode = ingest_service.decode_image

    def decode_then_cancel(path):
        decoded.append(path.name)
        if path.name == "f0.png":
            cancel.set()
        return real_decode(path)

    monkeypatch.setattr(ingest_service, "decode_image", decode_then_cancel)

    with ProjectStore(database_url=f"sqlite:///{tmp_path / 'cancel.db'}", ingest_workers=2) as store:
        store.register_user("alice", "pw")
        with pytest.raises(IngestCancelled):
            store.create_project("alice", "walk", frames_dir, cancel_event=cancel)
        user_id = store.authenticate("alice", "pw")
        assert store.list_projects_for_user(user_id) == []

    assert "f0.png" in decoded
    assert len(decoded) < 8
