"""Stat-comparison battle rule.

Each of attack, defense and speed is compared head to head. The strictly
greater value takes that attribute; equal values are a draw and count for
nobody. The side holding more attributes wins the round, otherwise it is a tie.

Pure and deterministic: no randomness, no I/O, no session state.
"""
from __future__ import annotations
from types import MappingProxyType
from typing import Dict

from .models import ATTRIBUTES, AttributeResult, Entity, Outcome, Side, Winner

def compare_attribute(player: Entity, cpu: Entity, name: str) -> AttributeResult:
    p = player.attributes.get(name)
    c = cpu.attributes.get(name)
    if p > c:
        return Side.PLAYER
    if c > p:
        return Side.CPU
    return None

def resolve(player: Entity, cpu: Entity) -> Outcome:
    per_attribute: Dict[str, AttributeResult] = {
        name: compare_attribute(player, cpu, name) for name in ATTRIBUTES
    }
    player_score = sum(1 for r in per_attribute.values() if r is Side.PLAYER)
    cpu_score = sum(1 for r in per_attribute.values() if r is Side.CPU)
    if player_score > cpu_score:
        winner = Winner.PLAYER
    elif cpu_score > player_score:
        winner = Winner.CPU
    else:
        winner = Winner.TIE
    return Outcome(per_attribute=MappingProxyType(per_attribute), winner=winner, player_id=player.id, cpu_id=cpu.id)

__all__ = ["resolve", "compare_attribute"]
