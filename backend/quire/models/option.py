"""
Quire Backend: Option Model
============================

What:  Runtime-editable key/value configuration (`imageMaxWidthHeight`,
       `imageJpegQuality`, ...). Values are stored as text and parsed by
       OptionService.
"""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quire.database import Base
from quire.models.note import utc_now


class Option(Base):
    __tablename__ = "options"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False, default="")
    date_modified: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )

    def __repr__(self) -> str:
        return f"<Option(name='{self.name}', value='{self.value}')>"
