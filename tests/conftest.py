import pytest

from pokeduel.battle.session import BattleSession
from pokeduel.battle.timing import ManualScheduler
from pokeduel.system.ledger import MemoryStore, ScoreLedger
from tests.helpers import ScriptedProvider


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def ledger(store):
    return ScoreLedger(store)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def provider():
    return ScriptedProvider()


@pytest.fixture
def session(provider, ledger, scheduler):
    return BattleSession(provider, ledger, scheduler, resolution_delay_ms=1500)
