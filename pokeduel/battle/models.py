"""Value types for a single round: fighters, the matched pair, and its result."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Tuple

ATTRIBUTES: Tuple[str, ...] = ("attack", "defense", "speed")

class Side(str, Enum):
    PLAYER = "player"
    CPU = "cpu"

class Winner(str, Enum):
    PLAYER = "player"
    CPU = "cpu"
    TIE = "tie"

# Per-attribute result; None marks a draw on that attribute
AttributeResult = Side | None

@dataclass(frozen=True)
class Attributes:
    attack: int = 0
    defense: int = 0
    speed: int = 0

    def __post_init__(self):
        for name in ATTRIBUTES:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")

    def get(self, name: str) -> int:
        if name not in ATTRIBUTES:
            raise KeyError(name)
        return getattr(self, name)

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in ATTRIBUTES}

@dataclass(frozen=True)
class Entity:
    id: int
    name: str
    image: str | None
    attributes: Attributes

    @property
    def display_name(self) -> str:
        return self.name.replace("-", " ").title()

@dataclass(frozen=True)
class Contest:
    """Two distinct fighters for one round, in fetch order (slot 1, slot 2)."""
    entity_a: Entity
    entity_b: Entity

    def __post_init__(self):
        if self.entity_a.id == self.entity_b.id:
            raise ValueError(f"Contest needs two distinct entities, got #{self.entity_a.id} twice")

    def slot(self, fighter: int) -> Entity:
        if fighter == 1:
            return self.entity_a
        if fighter == 2:
            return self.entity_b
        raise ValueError(f"fighter must be 1 or 2, got {fighter!r}")

    def other(self, fighter: int) -> Entity:
        self.slot(fighter)
        return self.entity_b if fighter == 1 else self.entity_a

@dataclass(frozen=True)
class Outcome:
    per_attribute: Mapping[str, AttributeResult]
    winner: Winner
    player_id: int | None = field(default=None, compare=False)
    cpu_id: int | None = field(default=None, compare=False)

    def won_by(self, side: Side) -> Tuple[str, ...]:
        return tuple(a for a in ATTRIBUTES if self.per_attribute.get(a) is side)

    def score(self, side: Side) -> int:
        return len(self.won_by(side))

    def draws(self) -> Tuple[str, ...]:
        return tuple(a for a in ATTRIBUTES if self.per_attribute.get(a) is None)

    @property
    def winner_id(self) -> int | None:
        """Id of the winning entity, or None on a tie."""
        if self.winner is Winner.PLAYER:
            return self.player_id
        if self.winner is Winner.CPU:
            return self.cpu_id
        return None

    @property
    def banner(self) -> str:
        return RESULT_BANNERS[self.winner]

RESULT_BANNERS: Dict[Winner, str] = {
    Winner.PLAYER: "Player Wins!",
    Winner.CPU: "CPU Wins!",
    Winner.TIE: "It's a Draw!",
}

__all__ = [
    "ATTRIBUTES", "Side", "Winner", "Attributes", "Entity", "Contest", "Outcome", "RESULT_BANNERS",
]
