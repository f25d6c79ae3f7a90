"""Audit and rubric rating models."""

from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from roboaudit.database import Base
from roboaudit.models.enums import Detail, Quality, Safety, Truthfulness


class Audit(Base):
    """A prompt/response pair under review. Immutable once written."""

    __tablename__ = "audits"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    response: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __mapper_args__ = {"eager_defaults": True}

    rubric_rating: Mapped["RubricRating"] = relationship(
        back_populates="audit", uselist=False, lazy="raise"
    )


class RubricRating(Base):
    """Four-dimension rating attached 1:1 to an audit (shared primary key)."""

    __tablename__ = "rubric_ratings"

    audit_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("audits.id"), primary_key=True
    )
    truthfulness: Mapped[Truthfulness] = mapped_column(
        Enum(Truthfulness, name="truthfulness_rating"), nullable=False
    )
    detail: Mapped[Detail] = mapped_column(
        Enum(Detail, name="detail_rating"), nullable=False
    )
    safety: Mapped[Safety] = mapped_column(
        Enum(Safety, name="safety_rating"), nullable=False
    )
    quality: Mapped[Quality] = mapped_column(
        Enum(Quality, name="quality_rating"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    __mapper_args__ = {"eager_defaults": True}

    audit: Mapped[Audit] = relationship(back_populates="rubric_rating", lazy="raise")
