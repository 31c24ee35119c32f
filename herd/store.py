"""Write operations over the farm save.

Every mutation of a SaveState during a day goes through FarmStore. Changes
land in memory first; ``persist`` writes the whole save in one go.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from minigames.models import Adjustments, CowAdjustment

from .catalog import ACHIEVEMENTS, CHONK_SENTINEL_LIMIT, DEFAULT_FOODS, STAT_KEYS, in_library
from .memory import (
    MAX_OUTFIT_HISTORY,
    CowJournal,
    OutfitRecord,
    SaveState,
    StateManager,
    clamp,
    sanitize_accessories,
)

logger = logging.getLogger(__name__)


class FarmStore:
    """Handle on the save state for the duration of a session."""

    def __init__(self, state: SaveState, manager: StateManager | None = None):
        self.state = state
        self._manager = manager

    # ── Reads ───────────────────────────────────────────────────

    @property
    def day(self) -> int:
        return self.state.day

    def unlocked(self, unlock_type: str) -> list[str]:
        items = list(self.state.unlocks.items(unlock_type))
        if unlock_type == "foods":
            items = [f for f in DEFAULT_FOODS if f not in items] + items
        return [item for item in items if in_library(unlock_type, item)]

    # ── Writes ──────────────────────────────────────────────────

    def apply_adjustments(self, adjustments: Adjustments) -> None:
        """Apply accumulated deltas once, clamped. Unknown cow ids are ignored."""
        for cow_id, diff in adjustments.items():
            cow = self.state.cow(cow_id)
            if cow is None:
                logger.debug("Ignoring adjustment for unknown cow %s", cow_id)
                continue
            if not isinstance(diff, CowAdjustment):
                logger.debug("Ignoring malformed adjustment for cow %s", cow_id)
                continue
            for stat in STAT_KEYS:
                delta = getattr(diff, stat, 0)
                if isinstance(delta, (int, float)) and delta:
                    setattr(cow, stat, clamp(getattr(cow, stat) + delta))
            if diff.add_accessory and diff.add_accessory not in cow.accessories:
                outfit = sanitize_accessories(
                    cow.accessories + [diff.add_accessory], self.state.unlocks.accessories
                )
                if outfit != cow.accessories:
                    cow.accessories = outfit
                    self._record_outfit(cow_id)
            if diff.served_treats:
                self._record_treats(cow_id, diff.served_treats)

    def _journal(self, cow_id: str) -> CowJournal:
        if cow_id not in self.state.journal:
            self.state.journal[cow_id] = CowJournal()
        return self.state.journal[cow_id]

    def _record_outfit(self, cow_id: str) -> None:
        cow = self.state.cow(cow_id)
        entry = self._journal(cow_id)
        if entry.outfits and entry.outfits[-1].accessories == cow.accessories:
            return
        entry.outfits.append(
            OutfitRecord(
                day=self.state.day,
                accessories=list(cow.accessories),
                recorded_iso=datetime.now(timezone.utc).isoformat(),
            )
        )
        entry.outfits = entry.outfits[-MAX_OUTFIT_HISTORY:]

    def _record_treats(self, cow_id: str, treats: list[str]) -> None:
        entry = self._journal(cow_id)
        for name in treats:
            name = name.strip()
            if name:
                entry.favourite_treats[name] = entry.favourite_treats.get(name, 0) + 1

    def add_unlock(self, unlock_type: str, item: str) -> bool:
        """Add ``item`` to its catalog. False when already present or unknown."""
        if not in_library(unlock_type, item):
            logger.warning("Refusing unknown %s unlock: %s", unlock_type, item)
            return False
        items = self.state.unlocks.items(unlock_type)
        if item in items:
            return False
        items.append(item)
        logger.info("Unlocked %s: %s", unlock_type, item)
        return True

    def record_stats(self, total_perfects: int = 0, total_chonks: int = 0) -> None:
        self.state.stats.total_perfects += total_perfects
        self.state.stats.total_chonks += total_chonks

    def register_day_outcome(
        self,
        perfect_day: bool,
        reward_type: str | None = None,
        perfect_streak: int | None = None,
    ) -> tuple[int, int]:
        """Update the perfect-day streak; returns (streak, best streak)."""
        stats = self.state.stats
        if perfect_streak is not None:
            next_streak = max(0, int(perfect_streak))
        elif perfect_day:
            next_streak = stats.perfect_day_streak + 1
        else:
            next_streak = 0
        stats.perfect_day_streak = next_streak
        stats.best_perfect_day_streak = max(stats.best_perfect_day_streak, next_streak)
        if reward_type:
            stats.last_reward_type = reward_type
        return stats.perfect_day_streak, stats.best_perfect_day_streak

    def mark_festival_complete(self, festival_id: str) -> None:
        if festival_id and not self.state.season.is_festival_complete(festival_id):
            self.state.season.completed_festivals.append(festival_id)

    def unlock_achievement(self, key: str) -> bool:
        """Earn ``key``. False when unknown or already earned."""
        if key not in ACHIEVEMENTS:
            return False
        if self.state.achievements.get(key):
            return False
        self.state.achievements[key] = True
        logger.info("Achievement unlocked: %s", key)
        return True

    def evaluate_chonk_sentinel(self) -> bool:
        if self.state.cows and all(cow.chonk < CHONK_SENTINEL_LIMIT for cow in self.state.cows):
            return self.unlock_achievement("chonkSentinel")
        return False

    def refresh_automatic_achievements(self) -> list[str]:
        unlocked = []
        dressed = [cow for cow in self.state.cows if cow.accessories]
        if len(dressed) >= 3 and self.unlock_achievement("fashionista"):
            unlocked.append("fashionista")
        return unlocked

    def increment_day(self) -> None:
        self.state.day += 1

    def persist(self) -> None:
        if self._manager is None:
            logger.debug("No state manager attached; skipping persist")
            return
        self._manager.save(self.state)
