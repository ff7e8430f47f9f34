"""Deterministic placeholder images for when generation is unavailable."""

import random
from dataclasses import dataclass, field

NIGHT_SCENE_URL = "https://images.pexels.com/photos/1002638/pexels-photo-1002638.jpeg?auto=compress&cs=tinysrgb&w=800"
FOREST_URL = "https://images.pexels.com/photos/1496373/pexels-photo-1496373.jpeg?auto=compress&cs=tinysrgb&w=800"
CITY_URL = "https://images.pexels.com/photos/1519088/pexels-photo-1519088.jpeg?auto=compress&cs=tinysrgb&w=800"
MOUNTAIN_URL = "https://images.pexels.com/photos/1624496/pexels-photo-1624496.jpeg?auto=compress&cs=tinysrgb&w=800"
OCEAN_URL = "https://images.pexels.com/photos/1001682/pexels-photo-1001682.jpeg?auto=compress&cs=tinysrgb&w=800"

FALLBACK_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("ninja", "cat", "night", "moon"), NIGHT_SCENE_URL),
    (("forest", "tree", "nature"), FOREST_URL),
    (("city", "urban", "building"), CITY_URL),
    (("mountain", "landscape"), MOUNTAIN_URL),
    (("ocean", "sea", "water"), OCEAN_URL),
)

DEFAULT_POOL: tuple[str, ...] = (FOREST_URL, NIGHT_SCENE_URL, CITY_URL)


@dataclass
class FallbackSelector:
    """Pick a stock image by scanning keyword rules in order."""

    rng: random.Random = field(default_factory=random.Random)

    def select(self, description: str) -> str:
        """Return the first matching bucket URL, else a random default."""
        lowered = description.lower()
        for keywords, url in FALLBACK_RULES:
            if any(keyword in lowered for keyword in keywords):
                return url
        return self.rng.choice(DEFAULT_POOL)
