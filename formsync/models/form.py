"""Blank form model."""

from __future__ import annotations

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from formsync.models.base import Base


class Form(Base):
    """A blank form stored on the device."""

    __tablename__ = "forms"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    form_id: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    version: Mapped[str | None] = mapped_column(String, nullable=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_hash: Mapped[str] = mapped_column(Text, nullable=False)
    form_path: Mapped[str] = mapped_column(Text, nullable=False)
    media_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_detected_version_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    downloaded_at: Mapped[str] = mapped_column(Text, nullable=False)
