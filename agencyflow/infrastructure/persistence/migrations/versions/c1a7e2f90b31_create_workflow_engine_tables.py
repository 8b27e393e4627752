"""create workflow engine tables

Revision ID: c1a7e2f90b31
Revises:
Create Date: 2026-10-19

workflow, workflow_step, workflow_run, workflow_step_execution, plus the
invoice columns the overdue sweep reads (created here when billing has
not already created the table).
"""

from collections.abc import Sequence
from typing import Union

import sqlalchemy as sa
from alembic import op

revision: str = "c1a7e2f90b31"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_WORKFLOW_STATUSES = ("active", "inactive", "draft")
_RUN_STATUSES = ("running", "succeeded", "failed", "partial")
_STEP_STATUSES = ("succeeded", "failed", "skipped")
_INVOICE_STATUSES = (
    "draft",
    "sent",
    "viewed",
    "partially_paid",
    "overdue",
    "paid",
    "cancelled",
)


def _in(column: str, values: Sequence[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "workflow",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("trigger_type", sa.String(64), nullable=False),
        sa.Column("trigger_config", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False, server_default="active"),
        sa.Column("created_by", sa.String(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(_in("status", _WORKFLOW_STATUSES), name="workflow_status_check"),
    )
    op.create_index("ix_workflow_tenant_id", "workflow", ["tenant_id"])
    op.create_index(
        "ix_workflow_tenant_trigger_status",
        "workflow",
        ["tenant_id", "trigger_type", "status"],
    )

    op.create_table(
        "workflow_step",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column(
            "workflow_id",
            sa.String(),
            sa.ForeignKey("workflow.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("step_order", sa.Integer(), nullable=False),
        sa.Column("step_type", sa.String(64), nullable=False),
        sa.Column("config", sa.JSON(), nullable=False),
        sa.Column(
            "continue_on_error",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("timeout_seconds", sa.Float(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("workflow_id", "step_order", name="uq_workflow_step_order"),
    )
    op.create_index("ix_workflow_step_tenant_id", "workflow_step", ["tenant_id"])
    op.create_index("ix_workflow_step_workflow_id", "workflow_step", ["workflow_id"])

    op.create_table(
        "workflow_run",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column(
            "workflow_id",
            sa.String(),
            sa.ForeignKey("workflow.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("trigger_type", sa.String(64), nullable=False),
        sa.Column("entity_type", sa.String(64), nullable=True),
        sa.Column("entity_id", sa.String(), nullable=True),
        sa.Column("trigger_data", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column(
            "started_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("ended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("triggered_by", sa.String(), nullable=False),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.CheckConstraint(_in("status", _RUN_STATUSES), name="workflow_run_status_check"),
    )
    op.create_index("ix_workflow_run_tenant_id", "workflow_run", ["tenant_id"])
    op.create_index("ix_workflow_run_workflow_id", "workflow_run", ["workflow_id"])
    op.create_index(
        "ix_workflow_run_tenant_workflow", "workflow_run", ["tenant_id", "workflow_id"]
    )
    op.create_index(
        "ix_workflow_run_dedup",
        "workflow_run",
        ["tenant_id", "trigger_type", "entity_type", "entity_id", "started_at"],
    )

    op.create_table(
        "workflow_step_execution",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column(
            "run_id",
            sa.String(),
            sa.ForeignKey("workflow_run.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "step_id",
            sa.String(),
            sa.ForeignKey("workflow_step.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("step_order", sa.Integer(), nullable=False),
        sa.Column("step_type", sa.String(64), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("output", sa.JSON(), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column(
            "executed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            _in("status", _STEP_STATUSES), name="workflow_step_execution_status_check"
        ),
    )
    op.create_index(
        "ix_workflow_step_execution_tenant_id", "workflow_step_execution", ["tenant_id"]
    )
    op.create_index(
        "ix_workflow_step_execution_run_id", "workflow_step_execution", ["run_id"]
    )

    op.create_table(
        "invoice",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("invoice_number", sa.String(64), nullable=False),
        sa.Column("client_id", sa.String(), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(_in("status", _INVOICE_STATUSES), name="invoice_status_check"),
        if_not_exists=True,
    )
    op.create_index("ix_invoice_tenant_id", "invoice", ["tenant_id"], if_not_exists=True)
    op.create_index(
        "ix_invoice_status_due_date", "invoice", ["status", "due_date"], if_not_exists=True
    )


def downgrade() -> None:
    op.drop_table("workflow_step_execution")
    op.drop_table("workflow_run")
    op.drop_table("workflow_step")
    op.drop_table("workflow")
