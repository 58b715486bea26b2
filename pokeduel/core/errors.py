"""
Error classes for clearer exception sources.
"""
from __future__ import annotations

class PokeDuelError(Exception):
    pass

class FetchError(PokeDuelError):
    """The entity provider was unreachable or returned unusable data."""

    def __init__(self, detail: str, *, species_id: int | None = None):
        super().__init__(detail)
        self.detail = detail
        self.species_id = species_id

class DuplicateEntityRetryExhaustion(FetchError):
    def __init__(self, entity_id: int, attempts: int):
        super().__init__(
            f"Could not draw a distinct opponent for #{entity_id} after {attempts} attempts",
            species_id=entity_id,
        )
        self.attempts = attempts

class LedgerError(PokeDuelError):
    def __init__(self, path: str, detail: str):
        super().__init__(f"Failed to write {path}: {detail}")
        self.path = path
        self.detail = detail
