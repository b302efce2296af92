"""
ORM tables for forms and their entries
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from db.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Form(Base):
    __tablename__ = "forms"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_multistep = Column(Boolean, nullable=False, default=False)
    # Exactly one of fields/steps is used, selected by is_multistep
    fields = Column(JSON, nullable=True)
    steps = Column(JSON, nullable=True)
    settings = Column(JSON, nullable=False, default=dict)
    styling = Column(JSON, nullable=False, default=dict)
    embedding = Column(JSON, nullable=True)
    thank_you_page = Column(JSON, nullable=True)
    error_page = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    entries = relationship(
        "FormEntry",
        back_populates="form",
        cascade="all, delete-orphan",
    )


class FormEntry(Base):
    __tablename__ = "form_entries"

    id = Column(String(36), primary_key=True, default=_uuid)
    form_id = Column(String(36), ForeignKey("forms.id", ondelete="CASCADE"), nullable=False, index=True)
    answers = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    form = relationship("Form", back_populates="entries")
