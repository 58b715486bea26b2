"""
Per-phase command prompts. Each returns an intent name for the CLI loop.
"""
from __future__ import annotations
from typing import Dict, List, Tuple

from rich.console import Console
from rich.prompt import Prompt, Confirm

from pokeduel.battle.session import BattleSession, Phase

# (key, label, intent)
_COMMANDS: Dict[Phase, List[Tuple[str, str, str]]] = {
    Phase.SELECTION: [("1", "Pick fighter 1", "select_1"), ("2", "Pick fighter 2", "select_2")],
    Phase.READY: [("b", "Start Battle!", "battle")],
    Phase.COMPLETE: [("n", "New Battle", "new"), ("r", "Replay", "replay")],
    Phase.ERROR: [("r", "Try again", "retry")],
}
_ALWAYS = [("x", "Reset score", "reset"), ("d", "Toggle debug log", "debug"), ("q", "Quit", "quit")]

def commands_for(phase: Phase) -> List[Tuple[str, str, str]]:
    return _COMMANDS.get(phase, []) + _ALWAYS

def prompt_intent(session: BattleSession, console: Console) -> str:
    commands = commands_for(session.phase)
    hint = " • ".join(f"[bold]{key}[/bold] {label}" for key, label, _ in commands)
    console.print(hint)
    intents = {key: intent for key, _, intent in commands}
    key = Prompt.ask(">", choices=list(intents), show_choices=False, console=console)
    return intents[key]

def confirm_reset(console: Console) -> bool:
    return Confirm.ask("Reset the score to 0 - 0?", default=False, console=console)
