"""
Stakeholder models for the CSR reporting system.

Stakeholders are classified by category, importance, influence and
relationship, and may be linked to programs and activities.
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Table, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow


program_stakeholders = Table(
    "program_stakeholders",
    Base.metadata,
    Column("program_id", Uuid, ForeignKey("programs.id", ondelete="CASCADE"), primary_key=True),
    Column("stakeholder_id", Uuid, ForeignKey("stakeholders.id", ondelete="CASCADE"), primary_key=True),
    Column("role", String(50), nullable=True),
)

activity_stakeholders = Table(
    "activity_stakeholders",
    Base.metadata,
    Column("activity_id", Uuid, ForeignKey("activities.id", ondelete="CASCADE"), primary_key=True),
    Column("stakeholder_id", Uuid, ForeignKey("stakeholders.id", ondelete="CASCADE"), primary_key=True),
)


class StakeholderCategory(Base):
    """Grouping used for the stakeholder breakdown in reports."""

    __tablename__ = "stakeholder_categories"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    type = Column(String(50), nullable=True)  # community, external, government, internal
    description = Column(Text, nullable=True)

    stakeholders = relationship("Stakeholder", back_populates="category")

    def __repr__(self) -> str:
        return f"<StakeholderCategory(id={self.id}, name='{self.name}')>"


class Stakeholder(Base):
    """Stakeholder model."""

    __tablename__ = "stakeholders"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    type = Column(String(50), nullable=True)  # community, organization, individual, ...
    category_id = Column(Uuid, ForeignKey("stakeholder_categories.id"), nullable=True, index=True)
    importance = Column(String(20), nullable=True)  # high, medium, low
    influence = Column(String(20), nullable=True)  # high, medium, low
    relationship_status = Column("relationship", String(20), nullable=True)  # supporter, neutral, opponent
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    category = relationship("StakeholderCategory", back_populates="stakeholders")
    programs = relationship(
        "Program",
        secondary=program_stakeholders,
        back_populates="stakeholders",
    )
    activities = relationship(
        "Activity",
        secondary=activity_stakeholders,
        back_populates="stakeholders",
    )

    def __repr__(self) -> str:
        return f"<Stakeholder(id={self.id}, name='{self.name}', importance='{self.importance}')>"
