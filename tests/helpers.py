"""Test doubles for the entity provider."""
import random
from typing import Iterable, List

from pokeduel.battle.models import Attributes, Entity
from pokeduel.core.errors import FetchError


def make_entity(entity_id: int, attack: int = 50, defense: int = 50, speed: int = 50, name: str | None = None) -> Entity:
    return Entity(
        id=entity_id,
        name=name or f"mon-{entity_id}",
        image=f"https://img.example/{entity_id}.png",
        attributes=Attributes(attack=attack, defense=defense, speed=speed),
    )


class ScriptedProvider:
    """Hands out queued entities (or raises queued errors) in order."""

    def __init__(self, items: Iterable = ()):
        self.queue: List = list(items)
        self.calls = 0

    def push(self, *items):
        self.queue.extend(items)

    def fetch_random_entity(self) -> Entity:
        self.calls += 1
        if not self.queue:
            raise FetchError("provider exhausted")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RandomPoolProvider:
    """Draws uniformly from a tiny pool so duplicates are common."""

    def __init__(self, pool_size: int, seed: int):
        self.rng = random.Random(seed)
        self.pool = [make_entity(i) for i in range(1, pool_size + 1)]
        self.calls = 0

    def fetch_random_entity(self) -> Entity:
        self.calls += 1
        return self.rng.choice(self.pool)
