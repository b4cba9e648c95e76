"""Random card subjects from the D&D 5e monster list."""

import random
from typing import List, Optional

import httpx

from .utils import get_logger

LOGGER = get_logger(__name__)

DND_MONSTERS_URL = "https://www.dnd5eapi.co/api/monsters"


async def fetch_monster_names(client: httpx.AsyncClient, url: str = DND_MONSTERS_URL) -> List[str]:
    """
    Fetch every monster name from the API.

    Raises:
        httpx.HTTPError: If the request fails
        ValueError: If the payload has no monster names
    """
    response = await client.get(url, headers={"Accept": "application/json"})
    response.raise_for_status()

    data = response.json()
    if not isinstance(data, dict):
        raise ValueError("Monster list response was not a JSON object")
    names = [
        str(entry["name"])
        for entry in data.get("results", [])
        if isinstance(entry, dict) and entry.get("name")
    ]
    if not names:
        raise ValueError("Monster list response contained no names")

    LOGGER.info("Fetched %d monster names", len(names))
    return names


def pick_monster_names(names: List[str], count: int, rng: Optional[random.Random] = None) -> List[str]:
    """Pick ``count`` names uniformly at random (repeats allowed)."""
    rng = rng or random.Random()
    return [rng.choice(names) for _ in range(count)]
