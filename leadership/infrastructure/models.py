from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class UserORM(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(100), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )

    assessments: Mapped[list[AssessmentORM]] = relationship(back_populates="user")


class AssessmentORM(Base):
    __tablename__ = "assessments"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), default=datetime.utcnow, nullable=False
    )
    # Legacy rows may hold a raw 1..5 average; see normalize_stored_score
    average_score: Mapped[Decimal | None] = mapped_column(Numeric(4, 1), nullable=True)

    __table_args__ = (
        CheckConstraint(
            "average_score IS NULL OR (average_score >= 0 AND average_score <= 100)",
            name="ck_assessment_average",
        ),
    )

    user: Mapped[UserORM] = relationship(back_populates="assessments")
    dimension_scores: Mapped[list[DimensionScoreORM]] = relationship(
        back_populates="assessment", cascade="all, delete"
    )
    answers: Mapped[list[QuestionAnswerORM]] = relationship(
        back_populates="assessment", cascade="all, delete"
    )


class DimensionScoreORM(Base):
    __tablename__ = "dimension_scores"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    dimension: Mapped[str] = mapped_column(String(100), nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False)

    assessment: Mapped[AssessmentORM] = relationship(back_populates="dimension_scores")


class QuestionAnswerORM(Base):
    __tablename__ = "question_answers"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    assessment_id: Mapped[int] = mapped_column(
        ForeignKey("assessments.id", ondelete="CASCADE"), nullable=False, index=True
    )
    question_id: Mapped[str] = mapped_column(String(32), nullable=False)
    dimension: Mapped[str] = mapped_column(String(100), nullable=False)
    answer: Mapped[int] = mapped_column(Integer, nullable=False)

    __table_args__ = (CheckConstraint("answer >= 1 AND answer <= 5", name="ck_answer_range"),)

    assessment: Mapped[AssessmentORM] = relationship(back_populates="answers")
