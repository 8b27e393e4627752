"""Jinja rendering of step config strings against the run context."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from jinja2 import ChainableUndefined, Template
from jinja2.sandbox import SandboxedEnvironment

from agencyflow.application.dtos.step import StepContext

TEMPLATE_CACHE_SIZE = 512

_env = SandboxedEnvironment(autoescape=False, undefined=ChainableUndefined)


@lru_cache(maxsize=TEMPLATE_CACHE_SIZE)
def compile_template(source: str) -> Template:
    """Compile once per distinct source; least recently used entries are evicted."""
    return _env.from_string(source)


def template_context(context: StepContext) -> dict[str, Any]:
    """Variables visible to templates: every data key at top level, plus data/steps/ids."""
    return {
        **context.data,
        "data": context.data,
        "steps": {str(order): out for order, out in context.step_outputs.items()},
        "workflow_id": context.workflow_id,
        "run_id": context.run_id,
        "tenant_id": context.tenant_id,
        "user_id": context.user_id,
    }


class WorkflowTemplateRenderer:
    """Renders ``{{ client_name }}``-style placeholders in step configs.

    Sandboxed so user-authored templates cannot reach Python internals.
    Missing variables render as empty strings, including chained lookups
    like ``{{ steps.1.webhook_status }}``.
    """

    def render(self, template: str, variables: dict[str, Any]) -> str:
        if "{{" not in template and "{%" not in template:
            return template
        return compile_template(template).render(**variables)

    def render_value(self, value: Any, variables: dict[str, Any]) -> Any:
        """Render strings anywhere inside nested dicts and lists; other values pass through."""
        if isinstance(value, str):
            return self.render(value, variables)
        if isinstance(value, dict):
            return {k: self.render_value(v, variables) for k, v in value.items()}
        if isinstance(value, list):
            return [self.render_value(v, variables) for v in value]
        return value
