"""
Report models for storing generated CSR reports.

This module defines the SQLAlchemy model for reports and for the
append-only metrics snapshots recorded each time a report's content is
generated.
"""

from enum import Enum as PyEnum
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, JSON, Float, ForeignKey, Enum, Uuid
from sqlalchemy.orm import relationship
import uuid

from app.models.base import Base, utcnow


class ReportStatus(str, PyEnum):
    """Enumeration of report workflow states."""

    DRAFT = "draft"
    REVIEW = "review"
    APPROVED = "approved"
    PUBLISHED = "published"


class Report(Base):
    """
    Report model for CSR reports.

    Stores the generated content payload together with the metrics the
    content was computed from. `version` starts at 1 and grows by one on
    every content regeneration; each generation appends a ReportMetrics row.

    `version` is also the optimistic lock: row updates and deletes match on
    the version that was read, so a concurrent regeneration surfaces as
    StaleDataError instead of reusing a version number.
    """

    __tablename__ = "reports"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)  # quarterly, annual, program, impact, ...
    status = Column(
        Enum(ReportStatus, values_callable=lambda e: [m.value for m in e], name="report_status"),
        nullable=False,
        default=ReportStatus.DRAFT,
    )
    period = Column(String(20), nullable=False)  # period token, e.g. "Q1-2024"
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    program_id = Column(Uuid, ForeignKey("programs.id", ondelete="SET NULL"), nullable=True, index=True)
    department_id = Column(Uuid, ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True)
    template = Column(String(50), nullable=True)
    tags = Column(JSON, nullable=True)
    content = Column(JSON, nullable=True)  # serialized ReportContent
    metrics = Column(JSON, nullable=True)  # serialized ReportMetrics of the current version
    version = Column(Integer, nullable=False, default=1)
    view_count = Column(Integer, nullable=False, default=0)
    download_count = Column(Integer, nullable=False, default=0)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    # Relationships
    program = relationship("Program", lazy="selectin")
    department = relationship("Department", lazy="selectin")
    metrics_records = relationship(
        "ReportMetrics",
        back_populates="report",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=lambda: [ReportMetrics.created_at.desc(), ReportMetrics.version.desc()],
    )

    # The service bumps the version itself, only when content is regenerated
    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

    @property
    def latest_metrics(self):
        """The snapshot considered current: newest by creation time."""
        return self.metrics_records[0] if self.metrics_records else None

    def __repr__(self) -> str:
        """String representation of the Report model."""
        return (
            f"<Report(id={self.id}, title='{self.title}', "
            f"type='{self.type}', version={self.version})>"
        )


class ReportMetrics(Base):
    """
    Immutable metrics snapshot belonging to one report version.

    Every metric is stored in its own column so that historical values can be
    queried across report versions.
    """

    __tablename__ = "report_metrics"

    id = Column(Uuid, primary_key=True, nullable=False, default=uuid.uuid4)
    report_id = Column(Uuid, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    version = Column(Integer, nullable=False)

    # Financial
    total_budget = Column(Float, nullable=False, default=0.0)
    budget_used = Column(Float, nullable=False, default=0.0)
    budget_remaining = Column(Float, nullable=False, default=0.0)
    budget_percentage = Column(Float, nullable=False, default=0.0)

    # Programs
    total_programs = Column(Integer, nullable=False, default=0)
    active_programs = Column(Integer, nullable=False, default=0)
    completed_programs = Column(Integer, nullable=False, default=0)
    program_completion_rate = Column(Float, nullable=False, default=0.0)

    # Activities
    total_activities = Column(Integer, nullable=False, default=0)
    completed_activities = Column(Integer, nullable=False, default=0)
    ongoing_activities = Column(Integer, nullable=False, default=0)
    activity_completion_rate = Column(Float, nullable=False, default=0.0)

    # Stakeholders
    total_stakeholders = Column(Integer, nullable=False, default=0)
    total_beneficiaries = Column(Integer, nullable=False, default=0)
    average_satisfaction = Column(Float, nullable=False, default=0.0)

    # Impact
    social_impact = Column(Float, nullable=False, default=0.0)
    environmental_impact = Column(Float, nullable=False, default=0.0)
    economic_impact = Column(Float, nullable=False, default=0.0)
    overall_impact = Column(Float, nullable=False, default=0.0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    report = relationship("Report", back_populates="metrics_records")

    def __repr__(self) -> str:
        return f"<ReportMetrics(id={self.id}, report_id={self.report_id}, version={self.version})>"
