# File: stopmotion/services/project_store.py

"""
ProjectStore: persistent catalog of users, projects and their frame sequences.

One instance owns one engine. Callers (the HTTP layer, the import script,
a desktop front end) receive the instance explicitly; there is no global
connection.

Every mutating operation runs in a single transaction. Any failure rolls the
whole operation back, so a project never exists without its owner link or
with a partial frame sequence.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stopmotion.core.config import settings
from stopmotion.core.errors import (
    DuplicateUsername,
    IngestCancelled,
    NotFound,
    StorageFailure,
)
from stopmotion.db.init_db import init_db
from stopmotion.db.session import make_engine, make_session_factory
from stopmotion.models.image import ProjectImage
from stopmotion.models.project import Project, user_project_join
from stopmotion.schemas.project import (
    ProjectCreated,
    ProjectImageRead,
    ProjectSummary,
    SkippedFile,
)
from stopmotion.schemas.user import UserRead
from stopmotion.services import auth_service
from stopmotion.services.ingest_service import decode_images, scan_image_directory

logger = logging.getLogger(__name__)


class ProjectStore:
    def __init__(
        self,
        engine: Optional[Engine] = None,
        *,
        database_url: Optional[str] = None,
        ingest_workers: Optional[int] = None,
        create_schema: bool = True,
    ):
        self._owns_engine = engine is None
        try:
            self.engine = engine if engine is not None else make_engine(database_url)
            self.SessionLocal = make_session_factory(self.engine)
        except SQLAlchemyError as exc:
            raise StorageFailure(f"Could not open database: {exc}") from exc
        self.ingest_workers = ingest_workers or settings.ingest_workers

        if create_schema:
            try:
                init_db(self.engine)
            except SQLAlchemyError as exc:
                raise StorageFailure(f"Could not create schema: {exc}") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def close(self) -> None:
        if self._owns_engine:
            self.engine.dispose()

    def __enter__(self) -> "ProjectStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Yield a session inside a transaction.

        Commits when the block finishes, rolls back on any exception.
        SQLAlchemy errors come out as StorageFailure.
        """
        db: Session = self.SessionLocal()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("[STORE] Rolled back after storage error: %s", exc)
            raise StorageFailure(str(exc)) from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def register_user(self, username: str, password: str) -> int:
        """
        Create a user and return its id.

        The unique constraint on Users.username decides races: whichever
        insert commits first wins, the other gets DuplicateUsername.
        """
        auth_service.check_username(username)
        with self.session_scope() as db:
            try:
                user = auth_service.create_user(db, username=username, password=password)
            except IntegrityError as exc:
                logger.info("[AUTH] Username '%s' already registered", username)
                raise DuplicateUsername(username) from exc
            user_id = user.id

        logger.info("[AUTH] Registered user '%s' (id=%s)", username, user_id)
        return user_id

    def authenticate(self, username: str, password: str) -> int:
        with self.session_scope() as db:
            return auth_service.authenticate_user(db, username=username, password=password).id

    def is_username_available(self, username: str) -> bool:
        """Advisory only; register_user does not depend on it."""
        with self.session_scope() as db:
            return auth_service.get_user_by_username(db, username) is None

    def get_user(self, username: str) -> UserRead:
        with self.session_scope() as db:
            return UserRead.model_validate(auth_service.require_user(db, username))

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------
    def create_project(
        self,
        owner_username: str,
        project_name: str,
        source_directory,
        *,
        cancel_event: Optional[threading.Event] = None,
    ) -> ProjectCreated:
        """
        Import the images in `source_directory` as a new project.

        Files are decoded before anything is written. Undecodable files are
        skipped and reported in `skipped`; the stored frames are numbered
        0..n-1 in file-name order with no gaps.
        """
        with self.session_scope() as db:
            auth_service.require_user(db, owner_username)

        paths = scan_image_directory(source_directory)
        logger.info(
            "[INGEST] Importing %d image file(s) from %s as '%s'",
            len(paths), source_directory, project_name,
        )

        try:
            decoded, failures = decode_images(
                paths,
                workers=self.ingest_workers,
                cancel_event=cancel_event,
            )
        except IngestCancelled:
            logger.info("[INGEST] Import of '%s' cancelled during decoding", project_name)
            raise

        with self.session_scope() as db:
            owner = auth_service.require_user(db, owner_username)
            project = Project(name=project_name, owners=[owner])
            project.images = [
                ProjectImage(
                    idx=idx,
                    filename=image.filename,
                    format=image.format,
                    width=image.width,
                    height=image.height,
                    payload=image.payload,
                )
                for idx, image in enumerate(decoded)
            ]
            db.add(project)
            db.flush()

            if cancel_event is not None and cancel_event.is_set():
                logger.info("[INGEST] Import of '%s' cancelled before commit", project_name)
                raise IngestCancelled("Image import was cancelled.")

            project_id = project.id

        logger.info(
            "[INGEST] Created project '%s' (id=%s): %d frame(s), %d skipped",
            project_name, project_id, len(decoded), len(failures),
        )
        return ProjectCreated(
            id=project_id,
            name=project_name,
            image_count=len(decoded),
            skipped=[SkippedFile(filename=f.filename, reason=f.reason) for f in failures],
        )

    def _summaries(self, db: Session, stmt) -> List[ProjectSummary]:
        return [
            ProjectSummary(id=p.id, name=p.name, created_at=p.created_at, image_count=count)
            for p, count in db.execute(stmt).all()
        ]

    @staticmethod
    def _with_image_count():
        image_count = (
            select(func.count(ProjectImage.idx))
            .where(ProjectImage.project_id == Project.id)
            .correlate(Project)
            .scalar_subquery()
        )
        return select(Project, image_count.label("image_count")).join(
            user_project_join, user_project_join.c.project_id == Project.id
        )

    def list_projects_for_user(self, user_id: int) -> List[ProjectSummary]:
        """Projects linked to `user_id`, oldest first. Empty for unknown ids."""
        stmt = (
            self._with_image_count()
            .where(user_project_join.c.user_id == user_id)
            .order_by(Project.id)
        )
        with self.session_scope() as db:
            return self._summaries(db, stmt)

    def find_project(self, owner_username: str, project_name: str) -> ProjectSummary:
        """
        Look a project up by owner and name. Names can repeat, so the most
        recently created match wins.
        """
        with self.session_scope() as db:
            owner = auth_service.require_user(db, owner_username)
            stmt = (
                self._with_image_count()
                .where(user_project_join.c.user_id == owner.id)
                .where(Project.name == project_name)
                .order_by(Project.id.desc())
                .limit(1)
            )
            found = self._summaries(db, stmt)
            if not found:
                raise NotFound("Project", project_name)
            return found[0]

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def list_project_images(self, project_id: int) -> List[ProjectImageRead]:
        """Frame metadata in index order; payloads are not loaded."""
        with self.session_scope() as db:
            if db.get(Project, project_id) is None:
                raise NotFound("Project", project_id)
            rows = db.execute(
                select(
                    ProjectImage.idx,
                    ProjectImage.filename,
                    ProjectImage.format,
                    ProjectImage.width,
                    ProjectImage.height,
                )
                .where(ProjectImage.project_id == project_id)
                .order_by(ProjectImage.idx)
            ).all()
            return [ProjectImageRead(**row._mapping) for row in rows]

    def get_image_payload(self, project_id: int, idx: int) -> Tuple[str, bytes]:
        """Return (format, original file bytes) for one frame."""
        with self.session_scope() as db:
            image = db.get(ProjectImage, (project_id, idx))
            if image is None:
                raise NotFound("Image", (project_id, idx))
            return image.format, image.payload
