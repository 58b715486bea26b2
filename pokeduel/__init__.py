"""Pokémon stat battles against the CPU, with a persistent score."""
__version__ = "0.1.0"
