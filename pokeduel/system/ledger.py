"""Persistent win tally (player vs CPU).

Counters live behind a string-keyed store so the ledger can be exercised
without touching disk. :class:`JsonFileStore` keeps them in a single JSON file
under the save directory, surviving restarts of the whole application.
"""
from __future__ import annotations
import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Protocol

from pokeduel.core.errors import LedgerError
from pokeduel.core.logging import logger
from pokeduel.core.paths import ledger_path

PLAYER_WINS_KEY = "pokemon-battle-player-wins"
CPU_WINS_KEY = "pokemon-battle-cpu-wins"

class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def set_many(self, items: Dict[str, str]) -> None: ...
    def remove(self, key: str) -> None: ...

class MemoryStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def set_many(self, items: Dict[str, str]) -> None:
        self.data.update(items)

    def remove(self, key: str) -> None:
        self.data.pop(key, None)

class JsonFileStore:
    """String map persisted as one JSON object; rewritten on every change."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or ledger_path()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warn("LedgerFileUnreadable", path=str(self.path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            logger.warn("LedgerFileUnreadable", path=str(self.path), error="not an object")
            return {}
        return {str(k): str(v) for k, v in raw.items()}

    def _write(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(".tmp")
            tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
            tmp.replace(self.path)
        except OSError as e:
            raise LedgerError(str(self.path), str(e)) from e

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def set_many(self, items: Dict[str, str]) -> None:
        data = self._read()
        data.update(items)
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            if data:
                self._write(data)
            else:
                self.path.unlink(missing_ok=True)

@dataclass(frozen=True)
class Tally:
    player: int = 0
    cpu: int = 0

def _parse_count(raw: Optional[str], key: str) -> int:
    if raw is None:
        return 0
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warn("LedgerValueMalformed", key=key, value=repr(raw))
        return 0
    if value < 0:
        logger.warn("LedgerValueMalformed", key=key, value=repr(raw))
        return 0
    return value

class ScoreLedger:
    """Cumulative wins, restored at construction and saved after every change.

    ``record_*`` and ``reset`` hold a lock around the read-modify-write so a
    timer thread and the UI thread cannot interleave updates.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._lock = threading.Lock()
        self._tally = self.load()

    @property
    def player_wins(self) -> int:
        return self._tally.player

    @property
    def cpu_wins(self) -> int:
        return self._tally.cpu

    @property
    def tally(self) -> Tally:
        return self._tally

    def load(self) -> Tally:
        tally = Tally(
            player=_parse_count(self.store.get(PLAYER_WINS_KEY), PLAYER_WINS_KEY),
            cpu=_parse_count(self.store.get(CPU_WINS_KEY), CPU_WINS_KEY),
        )
        logger.debug("LedgerLoaded", player=tally.player, cpu=tally.cpu)
        return tally

    def save(self, player_wins: int, cpu_wins: int) -> None:
        # Both counters go out in one write so a failure leaves neither changed
        self.store.set_many({PLAYER_WINS_KEY: str(player_wins), CPU_WINS_KEY: str(cpu_wins)})
        self._tally = Tally(player_wins, cpu_wins)
        logger.debug("LedgerSaved", player=player_wins, cpu=cpu_wins)

    def record_player_win(self) -> Tally:
        with self._lock:
            self.save(self._tally.player + 1, self._tally.cpu)
            return self._tally

    def record_cpu_win(self) -> Tally:
        with self._lock:
            self.save(self._tally.player, self._tally.cpu + 1)
            return self._tally

    def reset(self) -> None:
        with self._lock:
            self.store.remove(PLAYER_WINS_KEY)
            self.store.remove(CPU_WINS_KEY)
            self._tally = Tally()
        logger.info("LedgerReset")

__all__ = ["KeyValueStore", "MemoryStore", "JsonFileStore", "Tally", "ScoreLedger",
           "PLAYER_WINS_KEY", "CPU_WINS_KEY"]
