from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Callable, List
from pokeduel.core.logging import logger, LEVELS
from pokeduel.core.paths import SETTINGS_FILENAME, home_dir

@dataclass
class SettingsData:
    resolution_delay_ms: int = 1500  # "battle in progress" pause before the result
    max_fetch_attempts: int = 10     # refetches allowed when both fighters come back identical
    api_base_url: str = "https://pokeapi.co/api/v2"
    max_species_id: int = 898
    request_timeout: float = 10.0
    log_level: str = "INFO"          # DEBUG / INFO / WARN / ERROR
    debug: bool = False              # Verbose logging; otherwise only WARN and up

    def normalize(self):
        if not isinstance(self.resolution_delay_ms, int) or not 0 <= self.resolution_delay_ms <= 10000:
            self.resolution_delay_ms = 1500
        if not isinstance(self.max_fetch_attempts, int) or not 1 <= self.max_fetch_attempts <= 100:
            self.max_fetch_attempts = 10
        if not isinstance(self.api_base_url, str) or not self.api_base_url.startswith(("http://", "https://")):
            self.api_base_url = "https://pokeapi.co/api/v2"
        if not isinstance(self.max_species_id, int) or self.max_species_id < 1:
            self.max_species_id = 898
        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            self.request_timeout = 10.0
        if self.log_level not in LEVELS:
            self.log_level = "INFO"
        self.debug = bool(self.debug)

    def effective_log_level(self) -> str:
        # Without debug, quiet INFO chatter so the arena output stays readable
        if not self.debug and self.log_level in {"DEBUG","INFO"}:
            return "WARN"
        return self.log_level

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = home_dir()
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                # Backfill missing fields (migration safe)
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2), encoding="utf-8")
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def update(self, **changes):
        for key, value in changes.items():
            if not hasattr(self.data, key):
                raise AttributeError(f"Unknown setting: {key}")
            setattr(self.data, key, value)
        self.data.normalize()
        self.save()
        self._notify()

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)
