"""
Program models for the CSR reporting system.

This module defines the SQLAlchemy models for CSR programs, their
categories, and the projects (sub-programs) that carry out a program.
"""

from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Numeric, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow


class ProgramStatus(str, PyEnum):
    """Enumeration of program lifecycle states."""

    DRAFT = "draft"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProgramCategory(Base):
    """Category a program belongs to (education, health, environment, ...)."""

    __tablename__ = "program_categories"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)

    programs = relationship("Program", back_populates="category")

    def __repr__(self) -> str:
        return f"<ProgramCategory(id={self.id}, name='{self.name}')>"


class Program(Base):
    """
    Program model representing a CSR program.

    A program belongs to a department, may be categorized, and owns the
    projects through which its activities and budgets are tracked.
    """

    __tablename__ = "programs"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(ProgramStatus, values_callable=lambda e: [m.value for m in e], name="program_status"),
        nullable=False,
        default=ProgramStatus.DRAFT,
    )
    department_id = Column(Uuid, ForeignKey("departments.id"), nullable=True, index=True)
    category_id = Column(Uuid, ForeignKey("program_categories.id"), nullable=True, index=True)
    target_beneficiary = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    # Relationships
    department = relationship("Department", back_populates="programs")
    category = relationship("ProgramCategory", back_populates="programs")
    projects = relationship("Project", back_populates="program", cascade="all, delete-orphan")
    budgets = relationship("Budget", back_populates="program")
    stakeholders = relationship(
        "Stakeholder",
        secondary="program_stakeholders",
        back_populates="programs",
    )

    def __repr__(self) -> str:
        """String representation of the Program model."""
        return f"<Program(id={self.id}, name='{self.name}', status='{self.status}')>"


class Project(Base):
    """
    Project (sub-program) model.

    Projects break a program down into deliverables; activities and budgets
    may reference a project.
    """

    __tablename__ = "projects"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    program_id = Column(Uuid, ForeignKey("programs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="planned")
    progress = Column(Integer, nullable=False, default=0)
    budget = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    actual_cost = Column(Numeric(15, 2), nullable=False, default=Decimal("0.00"))
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    program = relationship("Program", back_populates="projects")
    activities = relationship("Activity", back_populates="project", cascade="all, delete-orphan")
    budgets = relationship("Budget", back_populates="project")

    def __repr__(self) -> str:
        return f"<Project(id={self.id}, name='{self.name}', program_id={self.program_id})>"
