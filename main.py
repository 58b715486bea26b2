#!/usr/bin/env python3
"""
Pokémon Battle Arena - terminal edition

Thin wrapper around the pokeduel CLI. Two random Pokémon are drawn from
PokéAPI; pick one, battle the other on attack/defense/speed, and the score
is kept between runs.

To run: python main.py
"""

from pokeduel.cli import run

if __name__ == "__main__":
    run()
