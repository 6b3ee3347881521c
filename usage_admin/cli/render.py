"""
Rich renderables for the dashboard views.
"""

from datetime import date, datetime
from typing import Union

from rich.bar import Bar
from rich.console import Group
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from usage_admin.core.view_state import DistributionViewState, UsageViewState
from usage_admin.data.models import (
    SERIES_LABELS,
    PoolSummary,
    SyntheticUser,
    UsageStats,
    UserDetailStats,
)

BAR_WIDTH = 30
NO_VALUE = "—"

# Same palette order as the chart series
MODEL_COLORS = {
    "total": "cyan",
    "gpt-5": "green",
    "claude-4-sonnet": "yellow",
    "claude-4-opus": "magenta",
    "auto": "blue",
}


def format_currency(amount: float, decimals: int = 2) -> str:
    """Format currency with a dollar sign and thousands separators."""
    return f"${amount:,.{decimals}f}"


def format_number(value: Union[int, float]) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value:,}"


def format_date(value: Union[date, datetime, None]) -> str:
    """Format as e.g. 'Jun 1, 2027'; missing dates render as a dash."""
    if value is None:
        return NO_VALUE
    return f"{value:%b} {value.day}, {value.year}"


def _labelled(label: str, value: str) -> Text:
    text = Text(f"{label}\n", style="dim")
    text.append(value, style="bold")
    return text


def _figures(*pairs) -> Table:
    grid = Table.grid(expand=True, padding=(0, 2))
    for _ in pairs:
        grid.add_column(ratio=1)
    grid.add_row(*[_labelled(label, value) for label, value in pairs])
    return grid


def render_overview(stats: UsageStats, summary: PoolSummary) -> Group:
    """Active users card and usage pool card."""
    seats = Panel(
        Group(
            Text(format_number(stats.active_users), style="bold"),
            Text(""),
            _figures(
                ("License count", format_number(stats.license_count)),
                ("Next true up date", format_date(summary.next_true_up_date)),
                ("Projected seats added", format_number(summary.projected_seats_added)),
            ),
        ),
        title="Active users (last 30 days)",
        title_align="left",
    )

    pool = Panel(
        Group(
            Text.assemble(
                (format_currency(stats.remaining_pool, 0), "bold"),
                (f"  of {format_currency(stats.total_pool, 0)} ({summary.remaining_percent}%)", "dim"),
            ),
            ProgressBar(total=100, completed=summary.remaining_percent, width=BAR_WIDTH * 2),
            Text(""),
            _figures(
                ("Renews on", format_date(stats.renewal_date)),
                ("Projected run-out", format_date(summary.projected_run_out_date)),
                ("Projected additional spend", format_currency(summary.projected_overage_spend, 0)),
            ),
        ),
        title="Usage pool remaining",
        title_align="left",
    )
    return Group(seats, pool)


def render_usage(state: UsageViewState) -> Table:
    """Usage dollars per day for the active series."""
    keys = state.active_keys
    table = Table(title=f"Usage dollars spent ({state.days}d)", title_justify="left")
    table.add_column("Date")
    for key in keys:
        table.add_column(SERIES_LABELS.get(key, key), justify="right", style=MODEL_COLORS.get(key))
    if state.view == "total":
        table.add_column("")

    peak = max((point.total for point in state.data), default=0)
    for point in state.data:
        row = [point.date.isoformat()]
        row.extend(format_currency(point.value(key)) for key in keys)
        if state.view == "total":
            row.append(Bar(size=max(peak, 1), begin=0, end=point.total, width=BAR_WIDTH))
        table.add_row(*row)
    return table


def render_distribution(state: DistributionViewState) -> Table:
    """Histogram of users per spend bucket."""
    table = Table(title=f"User spend distribution ({state.days}d)", title_justify="left")
    table.add_column("Bucket")
    table.add_column("Users", justify="right")
    table.add_column("")

    peak = max((datum.users for datum in state.data), default=0)
    for datum in state.data:
        style = "bold" if datum.bucket == state.selected_bucket else None
        table.add_row(
            datum.bucket,
            format_number(datum.users),
            Bar(size=max(peak, 1), begin=0, end=datum.users, width=BAR_WIDTH),
            style=style,
        )
    return table


def render_bucket_users(state: DistributionViewState) -> Table:
    """Synthetic users listed for the selected bucket."""
    table = Table(
        title=f"Users in bucket {state.selected_bucket}",
        title_justify="left",
        caption=f"Showing {len(state.selected_users)} of {state.selected_bucket_total} users",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Email")
    table.add_column("Spend", justify="right")
    for rank, user in enumerate(state.selected_users, start=1):
        style = "bold" if user == state.selected_user else None
        table.add_row(str(rank), user.email, format_currency(user.spend), style=style)
    return table


def render_user_detail(user: SyntheticUser, stats: UserDetailStats) -> Panel:
    """Productivity figures and model mix for one user."""
    lines = Table.grid(padding=(0, 1))
    lines.add_column()
    lines.add_column()
    lines.add_row(
        ProgressBar(total=100, completed=stats.acceptance_percent, width=BAR_WIDTH),
        Text(
            f"{format_number(stats.lines_accepted)} / {format_number(stats.lines_generated)}"
            f" ({stats.acceptance_percent}%)"
        ),
    )

    usage = Table(show_header=True, box=None, padding=(0, 1))
    usage.add_column("Model")
    usage.add_column("Share", justify="right")
    usage.add_column("")
    for entry in stats.model_usage:
        usage.add_row(
            Text(entry.model, style=MODEL_COLORS.get(entry.model)),
            f"{entry.percent}%",
            Bar(size=100, begin=0, end=entry.percent, width=BAR_WIDTH,
                color=MODEL_COLORS.get(entry.model, "default")),
        )

    return Panel(
        Group(
            _figures(
                ("User", user.email),
                ("Spend in bucket", format_currency(user.spend)),
            ),
            Text(""),
            _figures(
                ("Agent requests", format_number(stats.agent_requests)),
                ("Tab completions accepted", format_number(stats.tab_completions_accepted)),
            ),
            Text(""),
            Text("Lines of code: generated vs accepted", style="dim"),
            lines,
            Text(""),
            Text("Model usage", style="dim"),
            usage,
        ),
        title="User detail",
        title_align="left",
    )
