# File: stopmotion/schemas/project.py

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProjectBase(BaseModel):
    name: str


class ProjectCreate(ProjectBase):
    name: str = Field(min_length=1, max_length=255)
    owner_username: str
    source_directory: str


class ProjectSummary(ProjectBase):
    id: int
    image_count: int = 0
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SkippedFile(BaseModel):
    """A file that matched an image extension but could not be decoded."""

    filename: str
    reason: str


class ProjectCreated(ProjectBase):
    id: int
    image_count: int
    skipped: List[SkippedFile] = []


class ProjectImageRead(BaseModel):
    idx: int
    filename: str
    format: str
    width: int
    height: int

    model_config = ConfigDict(from_attributes=True)
