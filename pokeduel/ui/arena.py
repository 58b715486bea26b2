"""Terminal rendering of a :class:`BattleSession` using Rich.

Read-only: everything shown comes from the session's stored state. The
winner banner and per-stat highlights come from the stored Outcome.
"""
from __future__ import annotations
from typing import Optional

from rich.align import Align
from rich.box import ROUNDED, DOUBLE
from rich.columns import Columns
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from pokeduel.battle.models import ATTRIBUTES, Entity, Outcome, Side, Winner
from pokeduel.battle.session import BattleSession, Phase

console = Console()

STAT_MAX = 255  # highest possible base stat; scales the bars
BAR_WIDTH = 20

_BANNER_STYLES = {
    Winner.PLAYER: "bold white on green",
    Winner.CPU: "bold white on red",
    Winner.TIE: "bold white on grey35",
}

def _stat_bar(value: int, won: bool) -> Text:
    filled = max(0, min(BAR_WIDTH, round(value / STAT_MAX * BAR_WIDTH)))
    color = "bright_green" if won else "bright_white"
    bar = Text("█" * filled, style=color)
    bar.append("░" * (BAR_WIDTH - filled), style="grey37")
    bar.append(f" {value:>3}", style=f"bold {color}" if won else "white")
    return bar

def scoreboard(session: BattleSession) -> Panel:
    table = Table(show_header=True, box=None, expand=True, header_style="bold")
    table.add_column("PLAYER", justify="center", style="bold bright_blue")
    table.add_column("VS", justify="center", style="dim")
    table.add_column("CPU", justify="center", style="bold bright_red")
    table.add_row(str(session.ledger.player_wins), "-", str(session.ledger.cpu_wins))
    return Panel(table, title="[bold]Battle Score[/bold]", box=ROUNDED, border_style="bright_white")

def fighter_card(entity: Optional[Entity], fighter: int, session: BattleSession) -> Panel:
    label = session.fighter_label(fighter)
    if entity is None:
        return Panel(Align.center(Text("Loading...", style="dim")), title=label, box=ROUNDED, width=40)
    selected = session.selected_fighter is not None
    is_player = fighter == session.selected_fighter
    border = "bright_blue" if is_player else ("bright_red" if selected else "bright_white")
    lines = [Text(f"#{entity.id:03} {entity.display_name}", style="bold")]
    if entity.image:
        lines.append(Text(entity.image, style="dim", overflow="ellipsis", no_wrap=True))
    stats = Table.grid(padding=(0, 1))
    stats.add_column(justify="left", style="cyan")
    stats.add_column()
    outcome = session.outcome
    side = Side.PLAYER if is_player else Side.CPU
    won = outcome.won_by(side) if outcome else ()
    for name in ATTRIBUTES:
        if session.stats_revealed:
            stats.add_row(name.capitalize(), _stat_bar(entity.attributes.get(name), name in won))
        else:
            stats.add_row(name.capitalize(), Text("?" * 3, style="dim"))
    lines.append(stats)
    if not selected and session.phase is Phase.SELECTION:
        lines.append(Text(f"Press {fighter} to pick", style="italic dim"))
    return Panel(Group(*lines), title=f"[{fighter}] {label}", box=DOUBLE if is_player else ROUNDED,
                 border_style=border, width=40)

def result_banner(outcome: Outcome) -> Panel:
    body = Text(outcome.banner, style=_BANNER_STYLES[outcome.winner], justify="center")
    detail = Text(f"{outcome.score(Side.PLAYER)} - {outcome.score(Side.CPU)}", justify="center", style="bold")
    if outcome.draws():
        detail.append(f"  (draw on {', '.join(outcome.draws())})", style="dim")
    return Panel(Group(body, detail), title="Battle Complete!", box=ROUNDED, border_style="bright_white")

def status_line(session: BattleSession) -> Text:
    if session.phase is Phase.LOADING:
        return Text("Loading new Pokémon...", style="yellow")
    if session.phase is Phase.SELECTION:
        return Text("Choose Your Fighter!", style="bold magenta")
    if session.phase is Phase.READY:
        return Text("Ready! Start the battle when you are.", style="bold magenta")
    if session.phase is Phase.BATTLING:
        return Text("Battle in progress...", style="bold yellow")
    if session.phase is Phase.ERROR:
        return Text(session.error or "Something went wrong.", style="bold red")
    return Text("")

def render(session: BattleSession, target: Console | None = None) -> None:
    out = target or console
    out.clear()
    out.print(Align.center(Text("Pokémon Battle Arena", style="bold magenta")))
    out.print(Align.center(Text("Choose your fighter and battle against the CPU!", style="dim")))
    out.print(scoreboard(session))
    contest = session.contest
    out.print(Columns([
        fighter_card(contest.entity_a if contest else None, 1, session),
        fighter_card(contest.entity_b if contest else None, 2, session),
    ], align="center", expand=True))
    if session.outcome is not None:
        out.print(result_banner(session.outcome))
    else:
        out.print(Align.center(status_line(session)))

__all__ = ["render", "scoreboard", "fighter_card", "result_banner", "status_line", "console"]
