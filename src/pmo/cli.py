"""PMO CLI: portfolio health checks from the terminal.

Usage::

    # Earned value for a project
    pmo evm <PROJECT_ID>

    # Scope creep against the active baseline
    pmo scope <PROJECT_ID>

    # Same commands against the bundled demo portfolio when the API is down
    pmo --demo evm DEMO-1
"""

from __future__ import annotations

import asyncio
import json
import sys
from datetime import date
from typing import Any, Callable

import click
import httpx

from pmo.config import settings


async def _request(method: str, path: str, **kwargs: Any) -> Any:
    """Call the PMO API and return the decoded JSON body."""
    headers = {
        "Content-Type": "application/json",
        "X-API-Key": settings.pmo_api_key,
    }
    async with httpx.AsyncClient(base_url=settings.pmo_api_url, timeout=30) as client:
        resp = await client.request(method, path, headers=headers, **kwargs)
        resp.raise_for_status()
        return resp.json()


def _call(
    ctx: click.Context,
    method: str,
    path: str,
    demo: Callable[[], Any],
    **kwargs: Any,
) -> Any:
    """Run an API call, falling back to *demo* on connection errors with --demo."""
    try:
        return asyncio.run(_request(method, path, **kwargs))
    except httpx.ConnectError:
        if ctx.obj["demo"]:
            click.secho(
                f"PMO API at {settings.pmo_api_url} is unreachable; using demo data.",
                fg="yellow",
                err=True,
            )
            return demo()
        click.secho(
            f"Error: Cannot reach the PMO API at {settings.pmo_api_url}.  "
            "Is the server running?  (Use --demo to run against demo data.)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    except httpx.HTTPStatusError as exc:
        click.secho(
            f"Error: API returned {exc.response.status_code}: {exc.response.text}",
            fg="red",
            err=True,
        )
        sys.exit(1)


def _demo_project(key: str):
    from pmo.demo import build_demo_portfolio

    portfolio = build_demo_portfolio()
    project = portfolio.find_project(key)
    if project is None:
        codes = ", ".join(p.code for p in portfolio.projects)
        click.secho(
            f"Error: No demo project '{key}' (try one of {codes}).", fg="red", err=True
        )
        sys.exit(1)
    return portfolio, project


def _emit(ctx: click.Context, data: Any, formatter: Callable[[Any], None]) -> None:
    if ctx.obj["json"]:
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        formatter(data)


@click.group()
@click.option(
    "--demo",
    is_flag=True,
    default=False,
    help="Fall back to the bundled demo portfolio if the API is unreachable.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print raw JSON instead of a summary.",
)
@click.pass_context
def cli(ctx: click.Context, demo: bool, as_json: bool):
    """PMO: project portfolio health from the command line."""
    ctx.ensure_object(dict)
    ctx.obj["demo"] = demo
    ctx.obj["json"] = as_json


# ── projects ──────────────────────────────────────────────────────────


@cli.command()
@click.pass_context
def projects(ctx: click.Context):
    """List projects in rank order."""

    def demo():
        from pmo.analytics.scoring import rescore_portfolio
        from pmo.demo import build_demo_portfolio

        portfolio = build_demo_portfolio()
        ranked = rescore_portfolio(portfolio.projects, portfolio.factors)
        return {
            "projects": [
                {
                    "id": str(p.id),
                    "name": p.name,
                    "status": p.status,
                    "priority": p.priority,
                    "score": p.score,
                    "rank": p.rank,
                }
                for p in ranked
            ],
            "total": len(ranked),
        }

    data = _call(ctx, "GET", "/api/projects", demo)

    def show(data):
        for p in data["projects"]:
            click.echo(
                f"  #{p['rank'] or '-':<3} {p['name']:<32} {p['status']:<10} "
                f"{p['priority']}  score {p['score'] or 0:.1f}  ({p['id']})"
            )
        click.echo(f"{data['total']} project(s)")

    _emit(ctx, data, show)


@cli.command()
@click.pass_context
def sync(ctx: click.Context):
    """Recompute portfolio scores and ranks."""

    def demo():
        from pmo.analytics.scoring import rescore_portfolio
        from pmo.demo import build_demo_portfolio

        portfolio = build_demo_portfolio()
        ranked = rescore_portfolio(portfolio.projects, portfolio.factors)
        return {
            "message": "Portfolio scores and ranks synced (demo)",
            "ranking": [
                {"project_id": str(p.id), "name": p.name, "score": p.score, "rank": p.rank}
                for p in ranked
            ],
        }

    data = _call(ctx, "POST", "/api/pmo/sync", demo)

    def show(data):
        click.echo(data["message"])
        for entry in data["ranking"]:
            click.echo(f"  {entry['rank']}. {entry['name']} ({entry['score']:.1f})")

    _emit(ctx, data, show)


# ── evm ───────────────────────────────────────────────────────────────


@cli.command()
@click.argument("project_id")
@click.option(
    "--as-of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Status date (default: today).",
)
@click.pass_context
def evm(ctx: click.Context, project_id: str, as_of):
    """Show earned value metrics for a project."""
    as_of_date: date | None = as_of.date() if as_of else None

    def demo():
        from pmo.analytics.evm import calculate_evm

        portfolio, project = _demo_project(project_id)
        return calculate_evm(project, portfolio.tasks_for(project), as_of_date)

    params = {"as_of": as_of_date.isoformat()} if as_of_date else {}
    data = _call(ctx, "GET", f"/api/pmo/evm/{project_id}", demo, params=params)

    def show(m):
        click.echo(f"EVM as of {m['as_of']}")
        click.echo(f"  BAC {m['bac']:>14,.2f}   PV {m['pv']:>14,.2f}")
        click.echo(f"  EV  {m['ev']:>14,.2f}   AC {m['ac']:>14,.2f}")
        click.echo(f"  SV  {m['sv']:>14,.2f}   CV {m['cv']:>14,.2f}")
        click.echo(f"  SPI {m['spi']:>14.2f}   CPI {m['cpi']:>13.2f}")
        click.echo(f"  EAC {m['eac']:>14,.2f}   VAC {m['vac']:>13,.2f}")
        click.echo(f"  TCPI {m['tcpi']:>13.2f}")
        status = m["status"]
        schedule_colour = "green" if status["schedule"] != "behind" else "red"
        cost_colour = "green" if status["cost"] != "over_budget" else "red"
        click.secho(f"  Schedule: {status['schedule']}", fg=schedule_colour)
        click.secho(f"  Cost:     {status['cost']}", fg=cost_colour)

    _emit(ctx, data, show)


# ── scope ─────────────────────────────────────────────────────────────


@cli.command()
@click.argument("project_id")
@click.pass_context
def scope(ctx: click.Context, project_id: str):
    """Show scope creep against the project's active baseline."""

    def demo():
        from pmo.analytics.baseline import snapshot_tasks
        from pmo.analytics.scope import calculate_scope_creep
        from pmo.reports import scope_creep_warning

        portfolio, project = _demo_project(project_id)
        baseline = portfolio.active_baseline(project)
        metrics = calculate_scope_creep(
            project,
            portfolio.tasks_for(project),
            portfolio.change_requests_for(project),
            baseline_tasks=snapshot_tasks(baseline.snapshot) if baseline else None,
            threshold=settings.scope_creep_threshold,
            hours_per_day=settings.hours_per_day,
        )
        metrics["warning"] = scope_creep_warning(metrics)
        return metrics

    data = _call(ctx, "GET", f"/api/pmo/scope-metrics/{project_id}", demo)

    def show(m):
        click.echo(f"Scope for {m['project_name']}")
        click.echo(f"  Baseline effort: {m['baseline_effort_hours']} h")
        click.echo(f"  Current effort:  {m['current_effort_hours']} h")
        colour = "red" if m["is_over_threshold"] else "green"
        click.secho(
            f"  Creep: {m['creep_percentage']:.1f}% (threshold {m['threshold']:.0f}%)",
            fg=colour,
        )
        click.echo(
            f"  Change requests: {m['total_change_requests']} "
            f"(approved {m['approved_changes']}, pending {m['pending_changes']}, "
            f"rejected {m['rejected_changes']})"
        )
        if m.get("warning"):
            click.echo()
            click.echo(m["warning"])

    _emit(ctx, data, show)


# ── risks ─────────────────────────────────────────────────────────────


@cli.command()
@click.argument("project_id")
@click.pass_context
def heatmap(ctx: click.Context, project_id: str):
    """Print the 5x5 probability/impact risk matrix."""

    def demo():
        from pmo.analytics.risk import build_heatmap

        portfolio, project = _demo_project(project_id)
        return {
            "project_id": str(project.id),
            **build_heatmap(portfolio.risks_for(project), settings.high_risk_threshold),
        }

    data = _call(
        ctx, "GET", "/api/risks/heatmap", demo, params={"project_id": project_id}
    )

    def show(h):
        click.echo("P\\I   1   2   3   4   5")
        for probability in range(5, 0, -1):
            row = h["matrix"][probability - 1]
            click.echo(f"  {probability} " + "".join(f"{count:>4}" for count in row))
        click.echo(f"{h['total_count']} risk(s), {h['high_risks']} high")

    _emit(ctx, data, show)


@cli.command("risk-summary")
@click.argument("project_id")
@click.pass_context
def risk_summary(ctx: click.Context, project_id: str):
    """Summarise a project's risk register."""

    def demo():
        from pmo.analytics.risk import summarize

        portfolio, project = _demo_project(project_id)
        return {"project_id": str(project.id), **summarize(portfolio.risks_for(project))}

    data = _call(
        ctx, "GET", "/api/risks/summary", demo, params={"project_id": project_id}
    )

    def show(s):
        click.echo(
            f"{s['active_count']} active of {s['total_count']} risk(s), "
            f"project risk score {s['project_risk_score']}"
        )
        for priority, count in s["by_priority"].items():
            if count:
                click.echo(f"  {priority:<8} {count}")
        if s["needs_review"]:
            click.secho(f"  {len(s['needs_review'])} risk(s) due for review", fg="yellow")

    _emit(ctx, data, show)


# ── dependencies ──────────────────────────────────────────────────────


@cli.command("critical-path")
@click.pass_context
def critical_path(ctx: click.Context):
    """Show the longest chain of dependent projects."""

    def demo():
        from pmo.analytics.dependencies import calculate_critical_path
        from pmo.demo import build_demo_portfolio

        portfolio = build_demo_portfolio()
        return calculate_critical_path(portfolio.dependencies, portfolio.projects)

    data = _call(ctx, "GET", "/api/dependencies/critical-path", demo)

    def show(c):
        if not c["path"]:
            click.echo("No dependencies recorded.")
            return
        click.echo(" -> ".join(c["project_names"]))
        click.echo(f"{c['total_duration_days']} days end to end")

    _emit(ctx, data, show)


@cli.command()
@click.argument("project_id")
@click.option("--delay-days", type=int, required=True, help="Expected slip in days.")
@click.pass_context
def impact(ctx: click.Context, project_id: str, delay_days: int):
    """Show which projects a delay would hold up."""

    def demo():
        from pmo.analytics.dependencies import (
            analyze_dependency_impact,
            circuit_breaker_recommendation,
        )

        portfolio, project = _demo_project(project_id)
        impacts = analyze_dependency_impact(
            project.id, delay_days, portfolio.projects, portfolio.dependencies
        )
        return [{**i, **circuit_breaker_recommendation(i)} for i in impacts]

    data = _call(
        ctx,
        "GET",
        f"/api/dependencies/impact/{project_id}",
        demo,
        params={"delay_days": delay_days},
    )

    def show(impacts):
        if not impacts:
            click.echo("No blocked projects.")
            return
        colours = {"high": "red", "medium": "yellow", "low": "green"}
        for i in impacts:
            click.secho(
                f"  {i['affected_project_name']}: {i['risk_level']} risk",
                fg=colours.get(i["risk_level"]),
            )
            click.echo(f"    {i['recommendation']}")
            if i.get("should_suspend"):
                click.echo(f"    Waiting would cost about {i['waiting_cost']:,.0f}")

    _emit(ctx, data, show)


# ── Entry point ───────────────────────────────────────────────────────


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
