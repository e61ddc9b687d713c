# File: stopmotion/models/user.py

"""
User model.

Usernames are unique at the schema level so two concurrent registrations
cannot both land.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stopmotion.models.base import Base


class User(Base):
    __tablename__ = "Users"
    __table_args__ = (
        CheckConstraint("length(username) > 0", name="ck_users_username_not_empty"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    projects = relationship(
        "Project",
        secondary="User_Project_Join",
        back_populates="owners",
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
