from rich.console import Console
from rich.table import Table
from rich.text import Text

from relaycheck.balances import format_sol
from relaycheck.runner import RunResult


def _verdict(ok: bool) -> Text:
    return Text("PASS", style="bold green") if ok else Text("FAIL", style="bold red")


def build_table(result: RunResult) -> Table:
    table = Table(
        title=f"[bold underline bright_white]{result.scenario} ({result.state})[/]",
        show_header=True,
        pad_edge=True,
        padding=(0, 1),
        header_style="bold",
        expand=False,
    )
    table.add_column("Account", no_wrap=True)
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Expected", justify="right")
    table.add_column("Result", justify="center")

    for c in result.checks:
        table.add_row(
            f"{c.role}\n[bright_black]{c.account}[/]",
            format_sol(c.before),
            format_sol(c.after),
            format_sol(c.actual),
            format_sol(c.expected),
            _verdict(c.passed),
        )

    accepted = result.outcome.accepted if result.outcome else 0
    table.add_row(
        "accepted signatures",
        "",
        "",
        str(accepted),
        str(result.expected_settled),
        _verdict(result.count_matched),
    )
    return table


def render(result: RunResult, console: Console | None = None) -> None:
    console = console or Console()
    console.print(build_table(result))
    failed = sum(not c.passed for c in result.checks) + (not result.count_matched)
    if result.passed:
        console.print(f"[green]✓ {result.scenario}: all checks passed[/]")
    else:
        console.print(f"[red]✗ {result.scenario}: {failed} check(s) failed[/]")
    for sig in result.unconfirmed:
        console.print(f"[yellow]unexpected signature, not confirmed: {sig}[/]")
    if result.artifact:
        console.print(f"Saved transactions to {result.artifact}")
