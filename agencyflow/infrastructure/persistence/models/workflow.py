"""Workflow, WorkflowStep, WorkflowRun and WorkflowStepExecution ORM models."""

from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from agencyflow.infrastructure.persistence.database import Base
from agencyflow.infrastructure.persistence.models.mixins import (
    MultiTenantModel,
    TenantScopedRow,
    status_check,
)
from agencyflow.shared.enums import RunStatus, StepExecutionStatus, WorkflowStatus


class Workflow(MultiTenantModel, Base):
    """Tenant automation rule. Table: workflow. trigger_type is immutable."""

    __tablename__ = "workflow"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=WorkflowStatus.ACTIVE.value,
        server_default=WorkflowStatus.ACTIVE.value,
    )
    created_by: Mapped[str | None] = mapped_column(String, nullable=True)

    __table_args__ = (
        Index("ix_workflow_tenant_trigger_status", "tenant_id", "trigger_type", "status"),
        CheckConstraint(
            status_check("status", WorkflowStatus.values()),
            name="workflow_status_check",
        ),
    )


class WorkflowStep(MultiTenantModel, Base):
    """Ordered action of a workflow. Table: workflow_step."""

    __tablename__ = "workflow_step"

    workflow_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    step_type: Mapped[str] = mapped_column(String(64), nullable=False)
    config: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    continue_on_error: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.text("false")
    )
    timeout_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)

    __table_args__ = (
        UniqueConstraint("workflow_id", "step_order", name="uq_workflow_step_order"),
    )


class WorkflowRun(TenantScopedRow, Base):
    """One execution of a workflow. Table: workflow_run.

    workflow_id is nulled when the workflow is deleted so history survives.
    trigger_type / entity_type / entity_id are copied out of trigger_data
    for the same-day dedup query.
    """

    __tablename__ = "workflow_run"

    workflow_id: Mapped[str | None] = mapped_column(
        String,
        ForeignKey("workflow.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    trigger_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    entity_id: Mapped[str | None] = mapped_column(String, nullable=True)
    trigger_data: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RunStatus.RUNNING.value
    )
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    ended_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    triggered_by: Mapped[str] = mapped_column(String, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index(
            "ix_workflow_run_dedup",
            "tenant_id",
            "trigger_type",
            "entity_type",
            "entity_id",
            "started_at",
        ),
        Index("ix_workflow_run_tenant_workflow", "tenant_id", "workflow_id"),
        CheckConstraint(
            status_check("status", RunStatus.values()),
            name="workflow_run_status_check",
        ),
    )


class WorkflowStepExecution(TenantScopedRow, Base):
    """Outcome of one step within a run. Table: workflow_step_execution."""

    __tablename__ = "workflow_step_execution"

    run_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("workflow_run.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    step_id: Mapped[str | None] = mapped_column(
        String, ForeignKey("workflow_step.id", ondelete="SET NULL"), nullable=True
    )
    step_order: Mapped[int] = mapped_column(Integer, nullable=False)
    step_type: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    output: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    executed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            status_check("status", StepExecutionStatus.values()),
            name="workflow_step_execution_status_check",
        ),
    )
