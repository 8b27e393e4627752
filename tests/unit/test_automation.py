"""WorkflowAutomation: the call-site helpers never raise into business code."""

import logging

import pytest

from agencyflow.application.dtos.workflow import PreparedRun
from agencyflow.core.config import get_settings
from agencyflow.infrastructure.services.automation import WorkflowAutomation
from agencyflow.infrastructure.services.step_handlers import build_default_registry

LOGGER = "agencyflow.infrastructure.services.automation"


class BrokenSession:
    async def __aenter__(self):
        raise RuntimeError("database unavailable")

    async def __aexit__(self, *exc_info) -> bool:
        return False


@pytest.fixture
def automation() -> WorkflowAutomation:
    return WorkflowAutomation(BrokenSession, build_default_registry(), get_settings())


async def test_fire_triggers_swallows_session_errors(automation, caplog) -> None:
    """A failing session factory is logged with the trigger and tenant, not raised."""
    with caplog.at_level(logging.ERROR, logger=LOGGER):
        result = await automation.fire_triggers(
            "client_created", {"entity_id": "c1"}, "tenant-a", "user-a"
        )
    assert result is None
    record = next(r for r in caplog.records if r.name == LOGGER)
    assert "Workflow triggers for client_created failed" in record.getMessage()
    assert "tenant_id=tenant-a" in record.getMessage()
    assert record.exc_info is not None


async def test_fire_triggers_swallows_dispatch_errors(automation, caplog, monkeypatch) -> None:
    """Errors raised by dispatch itself are isolated the same way."""

    async def explode(*args, **kwargs):
        raise ValueError("dispatcher bug")

    monkeypatch.setattr(automation, "check_triggers", explode)
    with caplog.at_level(logging.ERROR, logger=LOGGER):
        await automation.fire_triggers("task_created", {}, "tenant-a", "user-a")
    assert any("Workflow triggers for task_created failed" in r.getMessage() for r in caplog.records)


async def test_check_triggers_propagates(automation) -> None:
    """The raw entry point does not hide failures."""
    with pytest.raises(RuntimeError):
        await automation.check_triggers("client_created", {}, "tenant-a", "user-a")


async def test_finish_manual_run_logs_failures(automation, caplog) -> None:
    """Background manual runs log their failure instead of raising."""
    prepared = PreparedRun(
        run_id="run-1",
        workflow_id="wf-1",
        tenant_id="tenant-a",
        user_id="user-a",
        trigger_data={"manual": True},
    )
    with caplog.at_level(logging.ERROR, logger=LOGGER):
        await automation.finish_manual_run(prepared)
    assert any("Manual run run-1 of workflow wf-1 failed" in r.getMessage() for r in caplog.records)
