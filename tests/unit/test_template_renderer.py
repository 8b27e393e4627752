"""WorkflowTemplateRenderer: sandboxed placeholders in step configs."""

import pytest

from agencyflow.application.dtos.step import StepContext
from agencyflow.infrastructure.services.workflow_template_renderer import (
    TEMPLATE_CACHE_SIZE,
    WorkflowTemplateRenderer,
    compile_template,
    template_context,
)


@pytest.fixture
def renderer() -> WorkflowTemplateRenderer:
    return WorkflowTemplateRenderer()


def test_plain_strings_pass_through(renderer) -> None:
    assert renderer.render("no placeholders", {}) == "no placeholders"


def test_renders_top_level_variables(renderer) -> None:
    assert renderer.render("Hi {{ client_name }}", {"client_name": "Acme"}) == "Hi Acme"


def test_missing_variables_render_empty(renderer) -> None:
    """Undefined names, including chained lookups, render as empty strings."""
    assert renderer.render("[{{ nope }}]", {}) == "[]"
    assert renderer.render("[{{ steps.missing.value }}]", {"steps": {}}) == "[]"


def test_render_value_recurses(renderer) -> None:
    """Strings inside nested dicts and lists are rendered; other values are kept."""
    value = {"a": "{{ x }}", "b": ["{{ x }}!", 3], "c": True}
    assert renderer.render_value(value, {"x": "y"}) == {"a": "y", "b": ["y!", 3], "c": True}


def test_sandbox_hides_internals(renderer) -> None:
    """Dunder attributes are unsafe in the sandbox and render as nothing."""
    assert renderer.render("{{ run_id.__class__ }}", {"run_id": "r1"}) == ""


def test_template_context_exposes_data_and_steps() -> None:
    """Context has every data key at top level plus data, steps and ids."""
    context = StepContext(
        tenant_id="t1",
        user_id="u1",
        workflow_id="wf1",
        run_id="r1",
        data={"lead_name": "Ada"},
        step_outputs={1: {"webhook_status": 200}},
    )
    variables = template_context(context)
    renderer = WorkflowTemplateRenderer()
    assert renderer.render("{{ lead_name }}/{{ data.lead_name }}", variables) == "Ada/Ada"
    assert renderer.render("{{ steps['1'].webhook_status }}", variables) == "200"
    assert variables["run_id"] == "r1"


def test_compiled_template_cache_is_bounded(renderer) -> None:
    """Distinct tenant-authored templates never grow the cache past its limit."""
    for i in range(TEMPLATE_CACHE_SIZE + 50):
        assert renderer.render(f"{{{{ n }}}}-{i}", {"n": 1}) == f"1-{i}"
    info = compile_template.cache_info()
    assert info.maxsize == TEMPLATE_CACHE_SIZE
    assert info.currsize <= TEMPLATE_CACHE_SIZE


def test_repeated_template_is_compiled_once(renderer) -> None:
    source = "{{ a }}+{{ b }} cached"
    compile_template.cache_clear()
    renderer.render(source, {"a": 1, "b": 2})
    renderer.render(source, {"a": 3, "b": 4})
    assert compile_template.cache_info().hits == 1
