from rich.console import Console
from rich.table import Table

from fantasy_football_tiers.domain.tier import TierResult

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_tier_result(result: TierResult) -> None:
    """Print one table per tier, colored by tier."""
    heading = f"{result.category} " if result.category else ""
    console.print(
        f"{heading}tiers ({result.scoring_format.value}): "
        f"[bold]{result.total_tiers}[/bold] tiers, {result.metadata.player_count} players, "
        f"algorithm [bold]{result.algorithm}[/bold]"
    )
    if result.metadata.cache_hit:
        console.print("  [dim](cached)[/dim]")

    for tier in result.tiers:
        title = f"[{tier.color}]Tier {tier.tier_index}[/{tier.color}] - {tier.label}"
        if tier.avg_value is not None:
            title += f" [dim](avg value {tier.avg_value:.2f})[/dim]"
        table = Table(title=title, title_justify="left", show_edge=False, pad_edge=False)
        table.add_column("Player")
        table.add_column("Team")
        table.add_column("Pos")
        table.add_column("Avg Rank", justify="right")
        for member in tier.members:
            table.add_row(member.name, member.group, member.category, f"{member.average_rank:.1f}")
        console.print(table)
        console.print(
            f"  [dim]ranks {tier.min_rank:.1f}-{tier.max_rank:.1f}, avg {tier.avg_rank:.2f}[/dim]"
        )
