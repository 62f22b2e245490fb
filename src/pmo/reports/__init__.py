"""Markdown report rendering."""

from pmo.reports.render import baseline_report, scope_creep_warning

__all__ = ["baseline_report", "scope_creep_warning"]
