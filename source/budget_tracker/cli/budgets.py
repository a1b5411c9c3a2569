"""This module defines the 'budgets' command group for inspecting budgets."""

import json
from datetime import datetime

import click
from budget_tracker.models.budgets import Budget, BudgetPeriod, BudgetView
from budget_tracker.providers.database import DatabaseManager
from budget_tracker.providers.date import DateProvider
from budget_tracker.services.budgets import BudgetService


def _get_service() -> BudgetService:
    """Builds the budget service on top of the shared database engine.

    Returns:
        A BudgetService instance.
    """
    return BudgetService.create(DatabaseManager.get_engine(), DatabaseManager.get_lock_engine())


def _output_format(ctx: click.Context) -> str:
    """Reads the global --output option, defaulting to text."""
    return getattr(ctx.obj, "output_format", "text")


def _format_budget(budget: Budget) -> str:
    """Renders one budget as a single line of text."""
    line = (
        f"{budget.id}  {budget.category:<14} {budget.period:<8} "
        f"{budget.start_date} -> {budget.end_date}  amount={budget.amount}"
    )
    if isinstance(budget, BudgetView):
        utilization = "n/a" if budget.utilization_percentage is None else f"{budget.utilization_percentage}%"
        line += f"  spent={budget.current_spending} remaining={budget.remaining_amount} used={utilization}"
        if budget.is_exceeded:
            line += "  [EXCEEDED]"
    return line


@click.group("budgets")
def budgets_group() -> None:
    """Inspect budgets, spending and available income."""
    pass


@budgets_group.command("list")
@click.argument("user_id")
@click.option(
    "--period",
    type=click.Choice([period.value for period in BudgetPeriod], case_sensitive=False),
    default=None,
    help="Only list budgets of this period.",
)
@click.option("--with-spending", is_flag=True, help="Compute current spending for each budget.")
@click.pass_context
def list_budgets(ctx: click.Context, user_id: str, period: str | None, with_spending: bool) -> None:
    """Lists the budgets of USER_ID.

    Args:
        ctx: The Click context object.
        user_id: The owner of the budgets.
        period: An optional period filter.
        with_spending: Whether to compute spending.
    """
    service = _get_service()
    budgets = service.list_budgets(
        user_id, BudgetPeriod(period) if period else None, include_spending=with_spending
    )

    if _output_format(ctx) == "json":
        click.echo(json.dumps([budget.model_dump(mode="json", by_alias=True) for budget in budgets], indent=2))
        return

    if not budgets:
        click.echo("No budgets found.")
        return
    for budget in budgets:
        click.echo(_format_budget(budget))


@budgets_group.command("income")
@click.argument("user_id")
@click.option("--start", "start_date", required=True, type=click.DateTime(formats=[DateProvider.DATE_FORMAT]))
@click.option("--end", "end_date", required=True, type=click.DateTime(formats=[DateProvider.DATE_FORMAT]))
@click.pass_context
def income(ctx: click.Context, user_id: str, start_date: datetime, end_date: datetime) -> None:
    """Shows income, allocated amount and headroom of USER_ID for a window.

    Args:
        ctx: The Click context object.
        user_id: The user to report on.
        start_date: The first day of the window.
        end_date: The last day of the window.
    """
    summary = _get_service().available_income(user_id, start_date.date(), end_date.date())

    if _output_format(ctx) == "json":
        click.echo(json.dumps(summary.model_dump(mode="json", by_alias=True), indent=2))
        return

    click.echo(f"Window:           {summary.start_date} -> {summary.end_date}")
    click.echo(f"Total income:     {summary.total_income}")
    click.echo(f"Total budgets:    {summary.total_budgets}")
    color = "green" if summary.available_income >= 0 else "red"
    click.secho(f"Available income: {summary.available_income}", fg=color)


@budgets_group.command("refresh")
@click.argument("user_id")
@click.pass_context
def refresh(ctx: click.Context, user_id: str) -> None:
    """Recomputes the spending of every budget of USER_ID.

    Args:
        ctx: The Click context object.
        user_id: The owner of the budgets.
    """
    views = _get_service().refresh_spending(user_id)

    if _output_format(ctx) == "json":
        click.echo(json.dumps({"refreshed": len(views)}))
        return
    click.secho(f"Recomputed spending for {len(views)} budget(s).", fg="green")
