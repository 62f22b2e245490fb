"""Markdown reports rendered from Jinja2 templates."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

TEMPLATES_DIR = Path(__file__).parent / "templates"

_jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,
    trim_blocks=True,
    lstrip_blocks=True,
)


def _signed(value: float) -> str:
    return f"+{value:,.0f}" if value > 0 else f"{value:,.0f}"


_jinja_env.filters["signed"] = _signed


def render(template_name: str, **kwargs: Any) -> str:
    return _jinja_env.get_template(template_name).render(**kwargs)


def scope_creep_warning(metrics: dict[str, Any]) -> str | None:
    """Warning text for a project over its creep threshold, else ``None``."""
    if not metrics["is_over_threshold"]:
        return None
    return render("scope_creep_warning.md.j2", m=metrics)


def baseline_report(comparison: dict[str, Any]) -> str:
    return render("baseline_report.md.j2", c=comparison)
