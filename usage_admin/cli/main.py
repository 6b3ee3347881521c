"""
CLI interface for Usage Admin.

Renders the usage overview, usage-over-time and spend distribution views.
"""

import asyncio
import random
import sys
from datetime import datetime
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape

from usage_admin.cli.render import (
    render_bucket_users,
    render_distribution,
    render_overview,
    render_usage,
    render_user_detail,
)
from usage_admin.config.loader import DashboardConfig, default_config, load_dashboard_config
from usage_admin.config.logging_setup import configure_logging
from usage_admin.core.loader import DistributionLoader, UsageLoader
from usage_admin.core.metrics import summarize_pool
from usage_admin.core.user_detail import generate_user_stats
from usage_admin.core.view_state import (
    DISTRIBUTION_WINDOWS,
    USAGE_VIEWS,
    DistributionViewState,
    UsageViewState,
)
from usage_admin.data.models import SyntheticUser
from usage_admin.data.source import MockUsageSource

app = typer.Typer()
console = Console()

EXIT_CODE_OK = 0
EXIT_CODE_FAIL = 1


def _config(ctx: typer.Context) -> DashboardConfig:
    return ctx.obj if isinstance(ctx.obj, DashboardConfig) else default_config()


def _source(config: DashboardConfig, seed: Optional[int]) -> MockUsageSource:
    rng = random.Random(seed) if seed is not None else None
    return MockUsageSource(pool=config.pool, rng=rng)


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/] {message}")
    sys.exit(EXIT_CODE_FAIL)


def _exit_on_load_error(state, what: str) -> None:
    if state.error:
        console.print(f"[red]Error loading {what}:[/] {state.error}")
        console.print("Run the command again to retry.")
        sys.exit(EXIT_CODE_FAIL)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        envvar="USAGE_ADMIN_CONFIG",
        help="Path to a YAML dashboard configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        envvar="USAGE_ADMIN_LOG_LEVEL",
        help="Override the configured log level"
    )
):
    """Usage Admin CLI."""
    try:
        dashboard_config = load_dashboard_config(config) if config else default_config()
        configure_logging(log_level or dashboard_config.logging.level)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error loading configuration:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)

    ctx.obj = dashboard_config
    if ctx.invoked_subcommand is None:
        console.print("Usage Admin - Use --help to see available commands")


@app.command()
def overview(ctx: typer.Context):
    """Show active seats and the shared usage pool."""
    config = _config(ctx)
    try:
        now = datetime.now()
        stats = MockUsageSource(pool=config.pool).get_usage_stats(now)
        summary = summarize_pool(stats, now)
    except ValueError as e:
        _fail(str(e))
    console.print(render_overview(stats, summary))


@app.command()
def usage(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        min=1,
        help="Window length in days (7, 14, 30, 60 or 90)"
    ),
    view: Optional[str] = typer.Option(
        None,
        "--view",
        help="'total' or 'models'"
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed the mock generator for repeatable output"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the view state as JSON"
    )
):
    """Show dollars spent per day, in total or by model."""
    config = _config(ctx)
    if days is None:
        days = config.display.usage_days
    view = (view or config.display.usage_view).lower()
    if view not in USAGE_VIEWS:
        _fail(f"--view must be one of: {', '.join(USAGE_VIEWS)}")

    loader = UsageLoader(source=_source(config, seed), state=UsageViewState(days=days, view=view))
    state = asyncio.run(loader.select_window(days))
    _exit_on_load_error(state, "usage")

    if as_json:
        console.print_json(data=state.to_dict())
    else:
        console.print(render_usage(state))


@app.command()
def distribution(
    ctx: typer.Context,
    days: Optional[int] = typer.Option(
        None,
        "--days",
        "-d",
        help="Lookback window in days (7, 14 or 30)"
    ),
    bucket: Optional[str] = typer.Option(
        None,
        "--bucket",
        "-b",
        help="Drill into a bucket, e.g. '$20-40'"
    ),
    user_rank: Optional[int] = typer.Option(
        None,
        "--user-rank",
        "-u",
        min=1,
        help="Show detail for the Nth user listed in the bucket"
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed the mock generator for repeatable output"
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the view state as JSON"
    )
):
    """Show how many users fall into each spend bucket."""
    config = _config(ctx)
    if days is None:
        days = config.display.distribution_days
    if days not in DISTRIBUTION_WINDOWS:
        _fail(f"--days must be one of: {', '.join(str(d) for d in DISTRIBUTION_WINDOWS)}")
    if user_rank is not None and bucket is None:
        _fail("--user-rank requires --bucket")

    rng = random.Random(seed) if seed is not None else None
    loader = DistributionLoader(
        source=_source(config, seed),
        state=DistributionViewState(days=days),
        rng=rng
    )
    state = asyncio.run(loader.select_window(days))
    _exit_on_load_error(state, "distribution")

    if bucket is not None:
        state = loader.select_bucket(bucket)
    if user_rank is not None and state.selected_users:
        if user_rank > len(state.selected_users):
            _fail(f"Only {len(state.selected_users)} users listed in bucket {bucket}")
        state = loader.select_user(state.selected_users[user_rank - 1])

    if as_json:
        console.print_json(data=state.to_dict())
        return

    console.print(render_distribution(state))
    if bucket is None:
        return
    if not state.selected_users:
        console.print(f"[yellow]Nothing to display for bucket {escape(repr(bucket))}[/]")
        return
    console.print(render_bucket_users(state))
    if state.selected_user and state.selected_user_stats:
        console.print(render_user_detail(state.selected_user, state.selected_user_stats))


@app.command()
def user(
    email: str = typer.Argument(..., help="User email"),
    spend: float = typer.Option(..., "--spend", "-s", min=0, help="Spend in the bucket"),
    bucket: Optional[str] = typer.Option(None, "--bucket", "-b", help="Bucket label, e.g. '$20-40'")
):
    """Show the detail panel for one user; output is stable per email."""
    stats = generate_user_stats(email, spend, bucket)
    console.print(render_user_detail(SyntheticUser(email=email, spend=spend), stats))


@app.command()
def dashboard(
    ctx: typer.Context,
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed the mock generator for repeatable output"
    )
):
    """Show the overview, usage and distribution views together."""
    config = _config(ctx)
    display = config.display
    try:
        now = datetime.now()
        source = _source(config, seed)
        stats = source.get_usage_stats(now)
        summary = summarize_pool(stats, now)
    except ValueError as e:
        _fail(str(e))

    usage_loader = UsageLoader(
        source=source,
        state=UsageViewState(days=display.usage_days, view=display.usage_view)
    )
    distribution_loader = DistributionLoader(
        source=source,
        state=DistributionViewState(days=display.distribution_days)
    )

    async def _load_all():
        return await asyncio.gather(
            usage_loader.select_window(display.usage_days),
            distribution_loader.select_window(display.distribution_days),
        )

    usage_state, distribution_state = asyncio.run(_load_all())
    _exit_on_load_error(usage_state, "usage")
    _exit_on_load_error(distribution_state, "distribution")

    console.print(render_overview(stats, summary))
    console.print()
    console.print(render_usage(usage_state))
    console.print()
    console.print(render_distribution(distribution_state))


if __name__ == "__main__":
    app()
