"""Workflow repository and engine integration tests. Require a migrated Postgres.

Repository tests roll back; engine tests commit (the engine writes durably),
so each uses a fresh tenant id.
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from agencyflow.application.dtos.workflow import StepDefinition
from agencyflow.infrastructure.persistence.models.invoice import Invoice
from agencyflow.infrastructure.persistence.repositories.invoice_repo import InvoiceRepository
from agencyflow.infrastructure.persistence.repositories.workflow_repo import WorkflowRepository
from agencyflow.infrastructure.persistence.repositories.workflow_run_repo import (
    WorkflowRunRepository,
)
from agencyflow.infrastructure.services.automation import WorkflowAutomation
from agencyflow.infrastructure.services.step_handlers import build_default_registry
from agencyflow.shared.utils.ids import generate_cuid

pytestmark = pytest.mark.requires_db

CONDITION = StepDefinition(
    step_order=1,
    step_type="condition",
    config={"conditions": [{"field": "amount", "operator": "greater_than", "value": 10}]},
)
WAIT = StepDefinition(step_order=2, step_type="wait_delay", config={"seconds": 0})


async def test_create_and_get_workflow_with_steps(db_session) -> None:
    """Create a workflow then read it back with ordered steps."""
    repo = WorkflowRepository(db_session)
    tenant_id = generate_cuid()
    created = await repo.create_workflow(
        tenant_id=tenant_id,
        created_by="u1",
        name="Big deals",
        trigger_type="proposal_accepted",
        trigger_config={},
        status="active",
        steps=[WAIT, CONDITION],
    )
    assert created.id
    assert [s.step_order for s in created.steps] == [1, 2]

    found = await repo.get_by_id_and_tenant(created.id, tenant_id, include_steps=True)
    assert found is not None
    assert found.step_count == 2
    assert found.steps[0].step_type == "condition"

    assert await repo.get_by_id_and_tenant(created.id, "another-tenant") is None


async def test_update_replaces_steps_and_list_active(db_session) -> None:
    """Step replacement keeps the order constraint; only active workflows match a trigger."""
    repo = WorkflowRepository(db_session)
    tenant_id = generate_cuid()
    active = await repo.create_workflow(
        tenant_id, "u1", "a", "lead_created", {}, "active", [CONDITION, WAIT]
    )
    await repo.create_workflow(tenant_id, "u1", "b", "lead_created", {}, "inactive", [])

    updated = await repo.update_workflow(
        active.id, tenant_id, {"name": "renamed"}, steps=[CONDITION]
    )
    assert updated is not None
    assert updated.name == "renamed"
    assert [s.step_type for s in updated.steps] == ["condition"]

    matches = await repo.list_active_by_trigger(tenant_id, "lead_created")
    assert [w.id for w in matches] == [active.id]

    listed = await repo.list_by_tenant(tenant_id)
    assert {w.name: w.step_count for w in listed} == {"renamed": 1, "b": 0}

    assert await repo.delete_workflow(active.id, tenant_id) is True
    assert await repo.get_by_id_and_tenant(active.id, tenant_id) is None


async def test_invoice_mark_overdue_is_idempotent(db_session) -> None:
    """Only still-collectable invoices change status."""
    tenant_id = generate_cuid()
    due = date.today() - timedelta(days=3)
    sent = Invoice(
        tenant_id=tenant_id,
        invoice_number="INV-1",
        total=Decimal("99.00"),
        currency="USD",
        status="sent",
        due_date=due,
    )
    paid = Invoice(
        tenant_id=tenant_id,
        invoice_number="INV-2",
        total=Decimal("10.00"),
        currency="USD",
        status="paid",
        due_date=due,
    )
    db_session.add_all([sent, paid])
    await db_session.flush()

    repo = InvoiceRepository(db_session)
    candidates = [
        i for i in await repo.list_overdue_candidates(date.today()) if i.tenant_id == tenant_id
    ]
    assert [i.invoice_number for i in candidates] == ["INV-1"]
    assert await repo.mark_overdue([sent.id, paid.id]) == 1
    assert await repo.mark_overdue([sent.id]) == 0


async def test_engine_executes_and_records_run(db_session_factory) -> None:
    """execute_workflow persists the run and one execution per step."""
    tenant_id = generate_cuid()
    async with db_session_factory() as session:
        workflow = await WorkflowRepository(session, autocommit=True).create_workflow(
            tenant_id, "u1", "engine", "proposal_accepted", {}, "active", [CONDITION, WAIT]
        )

    automation = WorkflowAutomation(db_session_factory, build_default_registry())
    run_id = await automation.execute_workflow(
        workflow.id, {"amount": 50, "entity_type": "proposal", "entity_id": "p1"}, tenant_id, "u1"
    )

    async with db_session_factory() as session:
        run = await WorkflowRunRepository(session).get_by_id_and_tenant(run_id, tenant_id)
    assert run is not None
    assert run.status == "succeeded"
    assert run.ended_at is not None
    assert (run.entity_type, run.entity_id) == ("proposal", "p1")
    assert [(e.step_order, e.status) for e in run.step_executions] == [
        (1, "succeeded"),
        (2, "succeeded"),
    ]


async def test_engine_trigger_skips_unmatched_conditions(db_session_factory) -> None:
    """check_triggers only runs workflows whose trigger conditions hold."""
    tenant_id = generate_cuid()
    async with db_session_factory() as session:
        workflow = await WorkflowRepository(session, autocommit=True).create_workflow(
            tenant_id,
            "u1",
            "big leads",
            "lead_created",
            {"conditions": [{"field": "score", "operator": "greater_than", "value": 80}]},
            "active",
            [WAIT],
        )

    automation = WorkflowAutomation(db_session_factory, build_default_registry())
    await automation.check_triggers("lead_created", {"score": 10}, tenant_id, "u1")
    await automation.check_triggers("lead_created", {"score": 90}, tenant_id, "u1")

    async with db_session_factory() as session:
        runs = await WorkflowRunRepository(session).list_by_workflow(workflow.id, tenant_id)
    assert len(runs) == 1
    assert runs[0].trigger_data["score"] == 90
