# File: stopmotion/models/project.py

"""
Project model and the user/project association table.

Project names are not unique; a project is identified by its id and found by
name only together with its owner.
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stopmotion.models.base import Base


user_project_join = Table(
    "User_Project_Join",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("Users.id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", Integer, ForeignKey("Projects.id", ondelete="CASCADE"), primary_key=True),
)


class Project(Base):
    __tablename__ = "Projects"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    owners = relationship(
        "User",
        secondary=user_project_join,
        back_populates="projects",
    )
    images = relationship(
        "ProjectImage",
        back_populates="project",
        order_by="ProjectImage.idx",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Project(id={self.id}, name='{self.name}')>"
