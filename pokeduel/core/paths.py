"""
Centralized path helpers for files kept outside the project tree.
"""
from __future__ import annotations
import os
from pathlib import Path

SAVE_DIR_NAME = ".pokeduel_saves"
SETTINGS_FILENAME = ".pokeduel_settings.json"
LEDGER_FILENAME = "ledger.json"

def home_dir() -> Path:
    return Path(os.path.expanduser("~"))

def save_dir() -> Path:
    path = home_dir() / SAVE_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path

def ledger_path() -> Path:
    return save_dir() / LEDGER_FILENAME
