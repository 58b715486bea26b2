from __future__ import annotations
from rich.console import Console

from pokeduel.battle.provider import PokeApiProvider
from pokeduel.battle.session import BattleSession, Phase
from pokeduel.battle.timing import BlockingScheduler
from pokeduel.core.logging import logger
from pokeduel.system.ledger import JsonFileStore, ScoreLedger
from pokeduel.system.settings import Settings, SettingsData
from pokeduel.ui import arena
from pokeduel.ui.menu import prompt_intent, confirm_reset

def build_session(settings: Settings, console: Console) -> BattleSession:
    data = settings.data
    provider = PokeApiProvider(base_url=data.api_base_url, max_species_id=data.max_species_id,
                               timeout=data.request_timeout)
    ledger = ScoreLedger(JsonFileStore())
    scheduler = BlockingScheduler(waiting=lambda: console.status("[bold yellow]Battle in progress...", spinner="dots"))
    return BattleSession(provider, ledger, scheduler,
                         resolution_delay_ms=data.resolution_delay_ms,
                         max_fetch_attempts=data.max_fetch_attempts)

def apply_settings(session: BattleSession, data: SettingsData):
    logger.set_level(data.effective_log_level())  # type: ignore[arg-type]
    session.resolution_delay_ms = data.resolution_delay_ms
    session.max_fetch_attempts = data.max_fetch_attempts

def dispatch(session: BattleSession, intent: str, console: Console, settings: Settings | None = None) -> bool:
    """Apply one user intent. Returns False when the user wants to quit."""
    if intent == "quit":
        return False
    if intent == "select_1":
        session.select_fighter(1)
    elif intent == "select_2":
        session.select_fighter(2)
    elif intent == "battle":
        session.start_battle()
    elif intent == "replay":
        session.replay()
    elif intent == "new":
        session.request_new_battle()
    elif intent == "retry":
        session.retry()
    elif intent == "reset":
        if confirm_reset(console):
            session.reset_ledger()
    elif intent == "debug" and settings is not None:
        settings.update(debug=not settings.data.debug)
        console.print(f"Debug log {'on' if settings.data.debug else 'off'}")
    return True

def run():
    settings = Settings.load()
    console = arena.console
    session = build_session(settings, console)
    apply_settings(session, settings.data)
    settings.on_change(lambda data: apply_settings(session, data))
    # Re-render on battling so the spinner sits under the arena
    session.on_change(lambda s: arena.render(s, console) if s.phase is Phase.BATTLING else None)
    with console.status("[yellow]Loading new Pokémon...", spinner="dots"):
        session.start()
    try:
        while True:
            arena.render(session, console)
            intent = prompt_intent(session, console)
            if intent == "new" or intent == "retry":
                with console.status("[yellow]Loading new Pokémon...", spinner="dots"):
                    keep_going = dispatch(session, intent, console, settings)
            else:
                keep_going = dispatch(session, intent, console, settings)
            if not keep_going:
                break
    except (KeyboardInterrupt, EOFError):
        console.print()
    console.print(f"Final score  Player {session.ledger.player_wins} - {session.ledger.cpu_wins} CPU")
    console.print("Goodbye!")
    settings.save()

if __name__ == "__main__":
    run()
