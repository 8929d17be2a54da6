"""
Budget model for the CSR reporting system.

This module defines the SQLAlchemy model for budgets,
which represent the planned and realized funds of a department,
optionally earmarked for a program or project.
"""

from decimal import Decimal
from sqlalchemy import Column, String, DateTime, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow

class Budget(Base):
    """
    Budget model representing an allocation of funds.

    `amount` is the planned figure and `spent_amount` the realized one;
    the reporting engine sums both to derive budget utilization.
    """

    __tablename__ = "budgets"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    department_id = Column(Uuid, ForeignKey("departments.id"), nullable=False, index=True)
    program_id = Column(Uuid, ForeignKey("programs.id"), nullable=True, index=True)
    project_id = Column(Uuid, ForeignKey("projects.id"), nullable=True, index=True)
    description = Column(String(255), nullable=True)
    category = Column(String(50), nullable=True)  # operational, capital, ...
    amount = Column(Numeric(15, 2), nullable=False)
    spent_amount = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    currency = Column(String(3), nullable=False, default="IDR")
    status = Column(String(20), nullable=False, default="draft")
    period = Column(String(20), nullable=True)  # e.g., "2024", "Q1-2024"
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    department = relationship("Department", back_populates="budgets")
    program = relationship("Program", back_populates="budgets")
    project = relationship("Project", back_populates="budgets")

    @property
    def remaining_amount(self) -> Decimal:
        """Planned amount not yet realized."""
        return (self.amount or Decimal("0.00")) - (self.spent_amount or Decimal("0.00"))

    def __repr__(self) -> str:
        """String representation of the Budget model."""
        return (
            f"<Budget(id={self.id}, "
            f"department_id={self.department_id}, "
            f"period='{self.period}', "
            f"amount={self.amount})>"
        )
