"""
Battle system package.
- models.py (Entity, Contest, Outcome)
- engine.py (stat comparison rule)
- provider.py (random Pokémon source, distinct-pair fetch)
- timing.py (resolution delay schedulers)
- session.py (round state machine)
"""
from .engine import resolve
from .session import BattleSession, Phase
__all__ = ["resolve", "BattleSession", "Phase"]
