"""
Department model for the CSR reporting system.

Departments are the organizational units that own programs and budgets.
"""
from sqlalchemy import Column, String, DateTime, Text, Boolean, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow

class Department(Base):
    """
    Department model representing an organizational unit.

    Departments run CSR programs and hold the budgets allocated to them.
    A report may be scoped to a single department.
    """

    __tablename__ = "departments"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True, index=True)
    code = Column(String(20), nullable=True, unique=True, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Timestamp fields
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Programs keep their rows when a department is removed
    programs = relationship(
        "Program",
        back_populates="department",
        order_by="Program.name",
    )
    budgets = relationship(
        "Budget",
        back_populates="department",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name='{self.name}', code='{self.code}')>"
