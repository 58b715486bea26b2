"""Round orchestration for the stat battle: fetch, pick, fight, score.

Phases run ``loading -> selection -> ready -> battling -> complete`` with an
``error`` side branch out of ``loading``. Commands issued outside their phase
are ignored and return False; the UI reads state, it never writes it.
"""
from __future__ import annotations
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from pokeduel.core.errors import FetchError, LedgerError
from pokeduel.core.logging import logger
from pokeduel.system.ledger import ScoreLedger, Tally
from .engine import resolve
from .models import Contest, Entity, Outcome, Side, Winner
from .provider import DEFAULT_MAX_FETCH_ATTEMPTS, EntityProvider, fetch_contest
from .timing import Scheduler

FETCH_FAILED_MESSAGE = "Failed to load Pokémon. Please try again."
DEFAULT_RESOLUTION_DELAY_MS = 1500

class Phase(str, Enum):
    LOADING = "loading"
    SELECTION = "selection"
    READY = "ready"
    BATTLING = "battling"
    COMPLETE = "complete"
    ERROR = "error"

class BattleSession:
    def __init__(self, provider: EntityProvider, ledger: ScoreLedger, scheduler: Scheduler, *,
                 resolution_delay_ms: int = DEFAULT_RESOLUTION_DELAY_MS,
                 max_fetch_attempts: int = DEFAULT_MAX_FETCH_ATTEMPTS):
        self.provider = provider
        self.ledger = ledger
        self.scheduler = scheduler
        self.resolution_delay_ms = resolution_delay_ms
        self.max_fetch_attempts = max_fetch_attempts
        self.phase = Phase.LOADING
        self.contest: Optional[Contest] = None
        self.selected_fighter: Optional[int] = None
        self.outcome: Optional[Outcome] = None
        self.error: Optional[str] = None
        self.error_detail: Optional[str] = None
        self.loading = False
        self._started = False
        self._battle_token = 0
        self._listeners: List[Callable[["BattleSession"], None]] = []

    # --- Observers ---
    def on_change(self, fn: Callable[["BattleSession"], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self)

    def _set_phase(self, phase: Phase):
        logger.debug("PhaseChange", old=self.phase.value, new=phase.value)
        self.phase = phase
        self._notify()

    def _ignored(self, command: str) -> bool:
        logger.debug("CommandIgnored", command=command, phase=self.phase.value)
        return False

    # --- Derived views ---
    @property
    def player(self) -> Optional[Entity]:
        if self.contest is None or self.selected_fighter is None:
            return None
        return self.contest.slot(self.selected_fighter)

    @property
    def cpu(self) -> Optional[Entity]:
        if self.contest is None or self.selected_fighter is None:
            return None
        return self.contest.other(self.selected_fighter)

    @property
    def stats_revealed(self) -> bool:
        return self.phase is Phase.COMPLETE

    @property
    def tally(self) -> Tally:
        return self.ledger.tally

    def fighter_label(self, fighter: int) -> str:
        if self.selected_fighter is None:
            return "Choose Fighter"
        return "Your Fighter" if fighter == self.selected_fighter else "CPU Fighter"

    def snapshot(self) -> Dict[str, Any]:
        contest = self.contest
        return {
            "phase": self.phase.value,
            "loading": self.loading,
            "fighter_1": contest.entity_a.name if contest else None,
            "fighter_2": contest.entity_b.name if contest else None,
            "selected_fighter": self.selected_fighter,
            "winner": self.outcome.winner.value if self.outcome else None,
            "player_wins": self.ledger.player_wins,
            "cpu_wins": self.ledger.cpu_wins,
            "error": self.error,
        }

    # --- Commands ---
    def start(self) -> bool:
        """Begin the first fetch. Only fires once per session."""
        if self._started:
            return self._ignored("start")
        self._started = True
        self._fetch_round()
        return True

    def request_new_battle(self) -> bool:
        if not self._started:
            return self.start()
        if self.phase not in (Phase.COMPLETE, Phase.ERROR):
            return self._ignored("request_new_battle")
        self._fetch_round()
        return True

    def retry(self) -> bool:
        if self.phase is not Phase.ERROR:
            return self._ignored("retry")
        self._fetch_round()
        return True

    def select_fighter(self, fighter: int) -> bool:
        if self.phase is not Phase.SELECTION or self.contest is None:
            return self._ignored("select_fighter")
        if fighter not in (1, 2):
            logger.debug("CommandIgnored", command="select_fighter", fighter=fighter)
            return False
        self.selected_fighter = fighter
        logger.debug("FighterSelected", fighter=fighter, name=self.contest.slot(fighter).name)
        self._set_phase(Phase.READY)
        return True

    def start_battle(self) -> bool:
        if self.phase is not Phase.READY or self.contest is None or self.selected_fighter is None:
            return self._ignored("start_battle")
        self._begin_battle()
        return True

    def replay(self) -> bool:
        """Fight the same pair again with the same pick."""
        if self.phase is not Phase.COMPLETE or self.contest is None or self.selected_fighter is None:
            return self._ignored("replay")
        self.outcome = None
        self._begin_battle()
        return True

    def reset_ledger(self) -> bool:
        self.ledger.reset()
        self._notify()
        return True

    # --- Internals ---
    def _fetch_round(self):
        self.contest = None
        self.selected_fighter = None
        self.outcome = None
        self.error = None
        self.error_detail = None
        self._battle_token += 1  # any pending resolution belongs to the discarded round
        self.loading = True
        self._set_phase(Phase.LOADING)
        try:
            contest = fetch_contest(self.provider, self.max_fetch_attempts)
        except FetchError as e:
            self.loading = False
            self.error = FETCH_FAILED_MESSAGE
            self.error_detail = str(e)
            logger.error("ContestFetchFailed", error=str(e))
            self._set_phase(Phase.ERROR)
            return
        self.loading = False
        self.contest = contest
        logger.info("ContestReady", fighter_1=contest.entity_a.name, fighter_2=contest.entity_b.name)
        self._set_phase(Phase.SELECTION)

    def _begin_battle(self):
        self._battle_token += 1
        token = self._battle_token
        self._set_phase(Phase.BATTLING)
        self.scheduler.call_later(self.resolution_delay_ms, lambda: self._complete_battle(token))

    def _complete_battle(self, token: int):
        if token != self._battle_token or self.phase is not Phase.BATTLING:
            logger.debug("StaleResolutionIgnored", token=token, current=self._battle_token)
            return
        player, cpu = self.player, self.cpu
        if player is None or cpu is None:
            logger.debug("ResolutionWithoutFighters", token=token)
            return
        outcome = resolve(player, cpu)
        try:
            if outcome.winner is Winner.PLAYER:
                self.ledger.record_player_win()
            elif outcome.winner is Winner.CPU:
                self.ledger.record_cpu_win()
        except LedgerError as e:
            logger.error("LedgerSaveFailed", error=str(e))
        self.outcome = outcome
        logger.info("BattleResolved", player=player.name, cpu=cpu.name, winner=outcome.winner.value,
                    player_score=outcome.score(Side.PLAYER), cpu_score=outcome.score(Side.CPU))
        self._set_phase(Phase.COMPLETE)

__all__ = ["BattleSession", "Phase", "FETCH_FAILED_MESSAGE"]
