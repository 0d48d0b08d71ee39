"""
POS client boundary.

Only a simulated client exists: it waits a little and reports a small
random number of updated items. A real Toast/Square/... adapter would
implement the same two calls.
"""

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from typing import List, Optional

logger = logging.getLogger("POSClient")

SAMPLE_MENU_ITEMS = [
    {"id": "menu1", "name": "Classic Margarita", "category": "Cocktails", "price": 12.99},
    {"id": "menu2", "name": "Mojito", "category": "Cocktails", "price": 11.99},
    {"id": "menu3", "name": "Old Fashioned", "category": "Cocktails", "price": 13.99},
    {"id": "menu4", "name": "Gin & Tonic", "category": "Cocktails", "price": 10.99},
    {"id": "menu5", "name": "Draft Beer", "category": "Beers", "price": 6.99},
    {"id": "menu6", "name": "House Wine", "category": "Wines", "price": 8.99},
]


class PosClient(ABC):
    @abstractmethod
    async def sync(self, system: str, restaurant_id: str, api_key: str) -> int:
        """Pull recent sales and return how many inventory items were updated."""

    @abstractmethod
    async def menu_items(self, system: str, restaurant_id: str, api_key: str) -> List[dict]:
        """Return the venue's menu as [{id, name, category, price}]."""


class SimulatedPosClient(PosClient):
    def __init__(self, delay_seconds: float = 1.0, rng: Optional[random.Random] = None):
        self.delay_seconds = delay_seconds
        self.rng = rng or random.Random()

    async def sync(self, system: str, restaurant_id: str, api_key: str) -> int:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        updated = self.rng.randint(1, 5)
        logger.info(f"Simulated {system} sync for restaurant {restaurant_id}: {updated} items")
        return updated

    async def menu_items(self, system: str, restaurant_id: str, api_key: str) -> List[dict]:
        return [dict(item) for item in SAMPLE_MENU_ITEMS]
