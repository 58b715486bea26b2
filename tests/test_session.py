import pytest

from pokeduel.battle.models import Winner
from pokeduel.battle.session import BattleSession, FETCH_FAILED_MESSAGE, Phase
from pokeduel.battle.timing import BlockingScheduler, ManualScheduler
from pokeduel.core.errors import FetchError
from pokeduel.system.ledger import ScoreLedger, Tally
from tests.helpers import RandomPoolProvider, ScriptedProvider, make_entity

STRONG = dict(attack=120, defense=80, speed=90)
WEAK = dict(attack=90, defense=70, speed=60)


def ready_session(session, provider, fighter=1, a=STRONG, b=WEAK):
    provider.push(make_entity(1, **a), make_entity(2, **b))
    session.start()
    session.select_fighter(fighter)
    return session


def assert_phase_consistency(session):
    if session.outcome is not None:
        assert session.phase is Phase.COMPLETE
    if session.selected_fighter is not None:
        assert session.phase in (Phase.READY, Phase.BATTLING, Phase.COMPLETE)


def test_start_moves_to_selection_with_distinct_pair(session, provider):
    provider.push(make_entity(1), make_entity(2))
    assert session.start()
    assert session.phase is Phase.SELECTION
    assert session.contest.entity_a.id == 1
    assert session.contest.entity_b.id == 2
    assert session.selected_fighter is None
    assert not session.loading
    assert_phase_consistency(session)


def test_fetch_failure_moves_to_error_and_retry_recovers(session, provider):
    provider.push(FetchError("offline"))
    session.start()
    assert session.phase is Phase.ERROR
    assert session.error == FETCH_FAILED_MESSAGE
    assert "offline" in session.error_detail
    assert session.contest is None
    provider.push(make_entity(3), make_entity(4))
    assert session.retry()
    assert session.phase is Phase.SELECTION
    assert session.error is None


def test_failed_second_fetch_exposes_no_partial_contest(session, provider):
    provider.push(make_entity(1), FetchError("timeout"))
    session.start()
    assert session.phase is Phase.ERROR
    assert session.contest is None


def test_start_battle_during_selection_is_ignored(session, provider):
    provider.push(make_entity(1), make_entity(2))
    session.start()
    assert not session.start_battle()
    assert session.phase is Phase.SELECTION


def test_select_assigns_player_and_cpu_roles(session, provider):
    ready_session(session, provider, fighter=2)
    assert session.phase is Phase.READY
    assert session.player.id == 2
    assert session.cpu.id == 1
    assert session.fighter_label(2) == "Your Fighter"
    assert session.fighter_label(1) == "CPU Fighter"
    assert_phase_consistency(session)


def test_invalid_fighter_number_is_ignored(session, provider):
    provider.push(make_entity(1), make_entity(2))
    session.start()
    assert not session.select_fighter(3)
    assert session.phase is Phase.SELECTION


def test_battle_resolves_only_after_delay(session, provider, scheduler, ledger):
    ready_session(session, provider)
    assert session.start_battle()
    assert session.phase is Phase.BATTLING
    assert session.outcome is None
    assert not session.stats_revealed
    scheduler.advance(1499)
    assert session.phase is Phase.BATTLING
    scheduler.advance(1)
    assert session.phase is Phase.COMPLETE
    assert session.outcome.winner is Winner.PLAYER
    assert ledger.tally == Tally(1, 0)
    assert session.stats_revealed
    assert_phase_consistency(session)


def test_outcome_and_ledger_update_are_observed_together(session, provider, scheduler, ledger):
    seen = []
    session.on_change(lambda s: seen.append((s.phase, s.outcome is not None, s.ledger.player_wins)))
    ready_session(session, provider)
    session.start_battle()
    scheduler.run_all()
    assert seen[-1] == (Phase.COMPLETE, True, 1)
    assert (Phase.COMPLETE, False, 0) not in seen


def test_cpu_win_increments_cpu_counter(session, provider, scheduler, ledger):
    ready_session(session, provider, fighter=2)
    session.start_battle()
    scheduler.run_all()
    assert session.outcome.winner is Winner.CPU
    assert ledger.tally == Tally(0, 1)


def test_tie_leaves_ledger_unchanged(session, provider, scheduler, ledger):
    ready_session(session, provider, a=dict(attack=100, defense=50, speed=70),
                  b=dict(attack=80, defense=60, speed=70))
    session.start_battle()
    scheduler.run_all()
    assert session.outcome.winner is Winner.TIE
    assert ledger.tally == Tally(0, 0)


def test_replay_reuses_pair_and_counts_again(session, provider, scheduler, ledger):
    ready_session(session, provider)
    session.start_battle()
    scheduler.run_all()
    contest = session.contest
    assert session.replay()
    assert session.phase is Phase.BATTLING
    assert session.outcome is None
    assert session.contest is contest
    assert session.selected_fighter == 1
    scheduler.run_all()
    assert ledger.tally == Tally(2, 0)
    assert provider.calls == 2


def test_new_battle_clears_round_state(session, provider, scheduler):
    ready_session(session, provider)
    session.start_battle()
    scheduler.run_all()
    provider.push(make_entity(5), make_entity(6))
    assert session.request_new_battle()
    assert session.phase is Phase.SELECTION
    assert session.outcome is None
    assert session.selected_fighter is None
    assert session.contest.entity_a.id == 5


@pytest.mark.parametrize("command", ["request_new_battle", "replay", "retry"])
def test_out_of_phase_commands_are_noops(session, provider, command):
    ready_session(session, provider)
    before = session.snapshot()
    assert not getattr(session, command)()
    assert session.snapshot() == before


def test_select_is_ignored_once_ready(session, provider):
    ready_session(session, provider, fighter=1)
    assert not session.select_fighter(2)
    assert session.selected_fighter == 1


def test_commands_while_battling_do_not_stack_timers(session, provider, scheduler):
    ready_session(session, provider)
    session.start_battle()
    assert not session.start_battle()
    assert not session.replay()
    assert not session.request_new_battle()
    assert scheduler.pending == 1


def test_stale_timer_from_discarded_round_is_ignored(provider, ledger, scheduler):
    session = BattleSession(provider, ledger, scheduler, resolution_delay_ms=100)
    ready_session(session, provider)
    session.start_battle()
    # Force a new round while the resolution is still pending
    session.phase = Phase.COMPLETE
    provider.push(make_entity(7), make_entity(8))
    session.request_new_battle()
    scheduler.run_all()
    assert session.phase is Phase.SELECTION
    assert session.outcome is None
    assert ledger.tally == Tally(0, 0)


def test_reset_ledger_works_in_any_phase(session, provider, scheduler, ledger):
    ready_session(session, provider)
    session.start_battle()
    scheduler.run_all()
    assert session.reset_ledger()
    assert ledger.tally == Tally(0, 0)
    assert session.phase is Phase.COMPLETE


def test_blocking_scheduler_completes_inside_start_battle(provider, ledger):
    slept = []
    session = BattleSession(provider, ledger, BlockingScheduler(sleep=slept.append), resolution_delay_ms=1200)
    ready_session(session, provider)
    session.start_battle()
    assert slept == [1.2]
    assert session.phase is Phase.COMPLETE


def test_ledger_restored_across_sessions(store, scheduler):
    provider = ScriptedProvider()
    first = BattleSession(provider, ScoreLedger(store), scheduler)
    ready_session(first, provider)
    first.start_battle()
    scheduler.run_all()
    second = BattleSession(ScriptedProvider(), ScoreLedger(store), ManualScheduler())
    assert second.snapshot()["player_wins"] == 1


def test_many_rounds_against_duplicate_prone_provider(ledger):
    scheduler = ManualScheduler()
    session = BattleSession(RandomPoolProvider(pool_size=2, seed=99), ledger, scheduler, max_fetch_attempts=60)
    session.start()
    for i in range(200):
        assert session.phase is Phase.SELECTION
        assert session.contest.entity_a.id != session.contest.entity_b.id
        session.select_fighter(1 + i % 2)
        session.start_battle()
        scheduler.run_all()
        assert_phase_consistency(session)
        session.request_new_battle()


def test_ledger_write_failure_still_completes_and_stays_consistent(scheduler):
    from pokeduel.core.errors import LedgerError
    from pokeduel.system.ledger import CPU_WINS_KEY, PLAYER_WINS_KEY, MemoryStore

    class BrokenStore(MemoryStore):
        def set_many(self, items):
            raise LedgerError("ledger.json", "read-only")

    store = BrokenStore()
    provider = ScriptedProvider()
    session = BattleSession(provider, ScoreLedger(store), scheduler)
    ready_session(session, provider)
    session.start_battle()
    scheduler.run_all()
    assert session.phase is Phase.COMPLETE
    assert session.outcome.winner is Winner.PLAYER
    assert session.ledger.tally == Tally(0, 0)
    assert store.get(PLAYER_WINS_KEY) is None and store.get(CPU_WINS_KEY) is None


def test_resolution_without_fighters_is_ignored(session, provider, scheduler):
    ready_session(session, provider)
    session.start_battle()
    session.selected_fighter = None
    scheduler.run_all()
    assert session.phase is Phase.BATTLING
    assert session.outcome is None
