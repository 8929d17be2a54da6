"""
Activity model for the CSR reporting system.

Activities are the concrete events (trainings, distributions, workshops)
executed under a project. Their participant counts are the source of the
beneficiary figures in reports.
"""

from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Numeric, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow


class ActivityStatus(str, PyEnum):
    """Enumeration of activity states."""

    PLANNED = "planned"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Activity(Base):
    """Activity model representing work carried out under a project."""

    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    project_id = Column(Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=True)  # training, workshop, distribution, ...
    status = Column(
        Enum(ActivityStatus, values_callable=lambda e: [m.value for m in e], name="activity_status"),
        nullable=False,
        default=ActivityStatus.PLANNED,
    )
    participants = Column(Integer, nullable=True)
    progress = Column(Integer, nullable=False, default=0)
    budget = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    actual_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    location = Column(String(255), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    project = relationship("Project", back_populates="activities")
    stakeholders = relationship(
        "Stakeholder",
        secondary="activity_stakeholders",
        back_populates="activities",
    )

    def __repr__(self) -> str:
        """String representation of the Activity model."""
        return (
            f"<Activity(id={self.id}, name='{self.name}', "
            f"status='{self.status}', participants={self.participants})>"
        )
