import json

import pytest

from pokeduel.core.errors import LedgerError
from pokeduel.system.ledger import (
    CPU_WINS_KEY, PLAYER_WINS_KEY, JsonFileStore, MemoryStore, ScoreLedger, Tally,
)


def test_fresh_ledger_starts_at_zero(store):
    ledger = ScoreLedger(store)
    assert ledger.load() == Tally(0, 0)
    assert ledger.player_wins == 0 and ledger.cpu_wins == 0


def test_save_survives_restart_with_file_store(tmp_path):
    path = tmp_path / "ledger.json"
    ScoreLedger(JsonFileStore(path)).save(3, 5)
    restored = ScoreLedger(JsonFileStore(path))
    assert restored.load() == Tally(3, 5)
    assert restored.tally == Tally(3, 5)


def test_reset_clears_storage(tmp_path):
    path = tmp_path / "ledger.json"
    ledger = ScoreLedger(JsonFileStore(path))
    ledger.save(4, 2)
    ledger.reset()
    assert ledger.load() == Tally(0, 0)
    assert not path.exists()
    assert ScoreLedger(JsonFileStore(path)).tally == Tally(0, 0)


def test_record_increments_one_side_and_persists(store):
    ledger = ScoreLedger(store)
    ledger.record_player_win()
    ledger.record_player_win()
    ledger.record_cpu_win()
    assert ledger.tally == Tally(2, 1)
    assert store.get(PLAYER_WINS_KEY) == "2"
    assert store.get(CPU_WINS_KEY) == "1"


def test_malformed_values_default_to_zero():
    store = MemoryStore({PLAYER_WINS_KEY: "seven", CPU_WINS_KEY: "-3"})
    assert ScoreLedger(store).tally == Tally(0, 0)


def test_one_malformed_counter_keeps_the_other():
    store = MemoryStore({PLAYER_WINS_KEY: "12", CPU_WINS_KEY: "1.5"})
    assert ScoreLedger(store).tally == Tally(12, 0)


def test_corrupt_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "ledger.json"
    path.write_text("{not json")
    assert ScoreLedger(JsonFileStore(path)).tally == Tally(0, 0)
    path.write_text(json.dumps([1, 2, 3]))
    assert ScoreLedger(JsonFileStore(path)).tally == Tally(0, 0)


def test_file_store_keeps_unrelated_keys(tmp_path):
    path = tmp_path / "ledger.json"
    store = JsonFileStore(path)
    store.set("other", "x")
    ledger = ScoreLedger(store)
    ledger.save(1, 1)
    ledger.reset()
    assert json.loads(path.read_text()) == {"other": "x"}


class FailingStore(MemoryStore):
    def set_many(self, items):
        raise LedgerError("ledger.json", "disk full")


def test_failed_save_changes_neither_counter():
    store = FailingStore({PLAYER_WINS_KEY: "2", CPU_WINS_KEY: "3"})
    ledger = ScoreLedger(store)
    with pytest.raises(LedgerError):
        ledger.record_player_win()
    assert store.get(PLAYER_WINS_KEY) == "2"
    assert store.get(CPU_WINS_KEY) == "3"
    assert ledger.tally == Tally(2, 3)
    assert ScoreLedger(store).tally == ledger.tally


def test_file_store_writes_both_counters_in_one_rewrite(tmp_path, monkeypatch):
    store = JsonFileStore(tmp_path / "ledger.json")
    writes = []
    original = store._write
    monkeypatch.setattr(store, "_write", lambda data: (writes.append(dict(data)), original(data)))
    ScoreLedger(store).save(1, 4)
    assert writes == [{PLAYER_WINS_KEY: "1", CPU_WINS_KEY: "4"}]
