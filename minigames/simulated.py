"""Headless stand-ins for the four mini-games.

Each one honours the mini-game contract: ``start`` schedules exactly one
completion on the running event loop, ``stop`` cancels anything pending.
Outcomes are drawn from an injected ``random.Random`` so runs are
reproducible.
"""

from __future__ import annotations

import asyncio
import logging
import random

from .models import CowAdjustment, MiniGameContext, MiniGameResult, MiniGameStats
from .runner import MINIGAME_INFO

logger = logging.getLogger(__name__)


class SimulatedMiniGame:
    """Resolve a mini-game instantly with a weighted coin flip."""

    def __init__(self, key: str, rng: random.Random | None = None, success_rate: float = 0.75):
        info = MINIGAME_INFO[key]
        self.key = info.key
        self.label = info.label
        self.description = info.description
        self.icon = info.icon
        self._rng = rng or random.Random()
        self._success_rate = success_rate
        self._handle: asyncio.Handle | None = None
        self.runs = 0

    def start(self, context: MiniGameContext) -> None:
        self.runs += 1
        loop = asyncio.get_running_loop()
        self._handle = loop.call_soon(self._finish, context)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _success_chance(self, context: MiniGameContext) -> float:
        chance = self._success_rate - 0.02 * max(0, context.difficulty - 1)
        chance += 0.02 * float(context.modifier("timeModifier", 0))
        return min(0.98, max(0.05, chance))

    def _finish(self, context: MiniGameContext) -> None:
        self._handle = None
        success = self._rng.random() < self._success_chance(context)
        result = MiniGameResult(success=success, stats=MiniGameStats(total_perfects=0, total_chonks=0))
        for cow in context.participants:
            result.adjustments[cow.id] = self._adjust(cow.id, success, context, result)
        result.summary = f"{self.label} {'cleared' if success else 'slipped away'}."
        if success and self._rng.random() < 0.5:
            result.stats.total_perfects = 1
        logger.debug("%s finished: success=%s", self.key, success)
        context.update_timer(0)
        context.on_complete(result)

    def _adjust(
        self,
        cow_id: str,
        success: bool,
        context: MiniGameContext,
        result: MiniGameResult,
    ) -> CowAdjustment:
        adj = CowAdjustment()
        if self.key == "catch":
            adj.happiness = 4 if success else -3
        elif self.key == "food":
            if context.foods:
                adj.served_treats = [self._rng.choice(context.foods)]
            adj.hunger = -20 if success else -8
            adj.happiness = 5 if success else 1
            if not success and self._rng.random() < 0.4:
                adj.chonk = 5
                result.stats.total_chonks = (result.stats.total_chonks or 0) + 1
        elif self.key == "brush":
            adj.cleanliness = 12 + int(context.modifier("patchBonus", 0)) if success else 4
            adj.happiness = 2 if success else -1
        elif self.key == "ceilidh":
            bonus = int(context.modifier("happinessBonus", 0))
            adj.happiness = 6 + bonus if success else -2
            adj.hunger = 3
        return adj


def build_simulated_minigames(
    rng: random.Random | None = None,
    success_rate: float = 0.75,
) -> dict[str, SimulatedMiniGame]:
    rng = rng or random.Random()
    return {key: SimulatedMiniGame(key, rng=rng, success_rate=success_rate) for key in MINIGAME_INFO}
