# File: stopmotion/models/image.py

"""
ProjectImage model.

One row per frame of a project. idx is the frame position; (project_id, idx)
is unique and indices run 0..n-1. The payload is the original file bytes.
"""

from sqlalchemy import CheckConstraint, ForeignKey, Integer, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stopmotion.models.base import Base


class ProjectImage(Base):
    __tablename__ = "Images"
    __table_args__ = (
        CheckConstraint("idx >= 0", name="ck_images_idx_non_negative"),
    )

    project_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("Projects.id", ondelete="CASCADE"),
        primary_key=True,
    )
    idx: Mapped[int] = mapped_column(Integer, primary_key=True)

    filename: Mapped[str] = mapped_column(String(1024), nullable=False)
    # "JPEG" or "PNG", as reported by the decoder
    format: Mapped[str] = mapped_column(String(16), nullable=False)
    width: Mapped[int] = mapped_column(Integer, nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    payload: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    project = relationship("Project", back_populates="images")

    def __repr__(self):
        return f"<ProjectImage(project_id={self.project_id}, idx={self.idx}, filename='{self.filename}')>"
