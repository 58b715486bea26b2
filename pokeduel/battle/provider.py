"""Entity providers and the distinct-pair fetch protocol.

The session only depends on :class:`EntityProvider`; the PokéAPI client below
is the production implementation and takes an injectable HTTP session so tests
never hit the network.
"""
from __future__ import annotations
import random
from platform import python_version
from typing import Any, Dict, Optional, Protocol

import requests

from pokeduel.core.errors import FetchError, DuplicateEntityRetryExhaustion
from pokeduel.core.logging import logger
from .models import ATTRIBUTES, Attributes, Contest, Entity

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_MAX_SPECIES_ID = 898  # up to Gen 8
DEFAULT_MAX_FETCH_ATTEMPTS = 10
USER_AGENT = f"pokeduel/0.1 (python {python_version()})"

class EntityProvider(Protocol):
    def fetch_random_entity(self) -> Entity: ...

class PokeApiProvider:
    def __init__(self, *, base_url: str = DEFAULT_BASE_URL, max_species_id: int = DEFAULT_MAX_SPECIES_ID,
                 timeout: float = 10.0, http: Optional[requests.Session] = None,
                 rng: Optional[random.Random] = None):
        if max_species_id < 1:
            raise ValueError(f"max_species_id must be >= 1, got {max_species_id}")
        self.base_url = base_url.rstrip("/")
        self.max_species_id = max_species_id
        self.timeout = timeout
        self.rng = rng or random.Random()
        if http is None:
            http = requests.Session()
            http.headers.update({"User-Agent": USER_AGENT})
        self.http = http

    def random_species_id(self) -> int:
        return self.rng.randint(1, self.max_species_id)

    def fetch_random_entity(self) -> Entity:
        return self.fetch_entity(self.random_species_id())

    def fetch_entity(self, species_id: int) -> Entity:
        url = f"{self.base_url}/pokemon/{species_id}"
        logger.debug("EntityFetchStart", species_id=species_id, url=url)
        try:
            response = self.http.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error("EntityFetchFailed", species_id=species_id, error=str(e))
            raise FetchError(f"Failed to fetch Pokémon #{species_id}: {e}", species_id=species_id) from e
        except ValueError as e:
            logger.error("EntityFetchFailed", species_id=species_id, error=f"invalid JSON: {e}")
            raise FetchError(f"Invalid response for Pokémon #{species_id}", species_id=species_id) from e
        entity = parse_entity(data, species_id=species_id)
        logger.debug("EntityFetched", id=entity.id, name=entity.name)
        return entity

def _sprite(data: Dict[str, Any]) -> str | None:
    sprites = data.get("sprites") or {}
    artwork = ((sprites.get("other") or {}).get("official-artwork") or {}).get("front_default")
    return artwork or sprites.get("front_default")

def _stat(data: Dict[str, Any], name: str) -> int:
    for entry in data.get("stats") or []:
        if (entry.get("stat") or {}).get("name") == name:
            return entry.get("base_stat") or 0
    return 0

def parse_entity(data: Any, *, species_id: int | None = None) -> Entity:
    """Build an Entity from a PokéAPI ``/pokemon/{id}`` document.

    Missing stats default to 0. A missing id/name or a stat that is not a
    non-negative integer makes the document malformed.
    """
    if not isinstance(data, dict):
        raise FetchError("Malformed Pokémon document (expected an object)", species_id=species_id)
    entity_id = data.get("id")
    name = data.get("name")
    if isinstance(entity_id, bool) or not isinstance(entity_id, int) or not isinstance(name, str) or not name:
        raise FetchError("Malformed Pokémon document (missing id or name)", species_id=species_id)
    try:
        attributes = Attributes(**{a: _stat(data, a) for a in ATTRIBUTES})
        image = _sprite(data)
    except (TypeError, AttributeError, ValueError) as e:
        raise FetchError(f"Malformed data for Pokémon #{entity_id}: {e}", species_id=entity_id) from e
    if image is not None and not isinstance(image, str):
        raise FetchError(f"Malformed sprite for Pokémon #{entity_id}", species_id=entity_id)
    return Entity(id=entity_id, name=name, image=image, attributes=attributes)

def fetch_contest(provider: EntityProvider, max_attempts: int = DEFAULT_MAX_FETCH_ATTEMPTS) -> Contest:
    """Fetch two distinct entities, one after the other.

    Only the second fighter is refetched on a duplicate id, at most
    ``max_attempts`` times. Fetch errors propagate unchanged.
    """
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
    first = provider.fetch_random_entity()
    second = provider.fetch_random_entity()
    attempts = 0
    while second.id == first.id:
        if attempts >= max_attempts:
            logger.warn("DuplicateRetryExhausted", id=first.id, attempts=attempts)
            raise DuplicateEntityRetryExhaustion(first.id, attempts)
        attempts += 1
        logger.debug("DuplicateEntityRefetch", id=first.id, attempt=attempts)
        second = provider.fetch_random_entity()
    return Contest(entity_a=first, entity_b=second)

__all__ = ["EntityProvider", "PokeApiProvider", "parse_entity", "fetch_contest"]
