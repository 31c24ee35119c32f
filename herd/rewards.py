"""End-of-day reward selection.

At most one unlock is granted per day. Festival rewards come first, then the
streak and perfect-day guarantees, then a rotation over the unlock types that
avoids repeating yesterday's type. Within a type, items are drawn from the
theme with the most locked items left so themes fill in as sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from seasons.calendar import SeasonSnapshot

from .catalog import ACCESSORIES, DECOR, FOODS, in_library, type_label
from .memory import Unlocks

logger = logging.getLogger(__name__)

STREAK_REWARD_EVERY = 3
TYPE_PREFERENCE = (ACCESSORIES, DECOR, FOODS)


@dataclass(frozen=True)
class ThemeItem:
    type: str
    item: str


@dataclass(frozen=True)
class RewardTheme:
    name: str
    items: tuple[ThemeItem, ...]


REWARD_THEMES: tuple[RewardTheme, ...] = (
    RewardTheme(
        "Highland Picnic",
        (
            ThemeItem(ACCESSORIES, "Pastel Bow"),
            ThemeItem(DECOR, "Tartan Picnic Rug"),
            ThemeItem(FOODS, "Sweet Clover Bale"),
        ),
    ),
    RewardTheme(
        "Forest Trimmings",
        (
            ThemeItem(ACCESSORIES, "Fern Garland"),
            ThemeItem(DECOR, "Wildflower Patch"),
            ThemeItem(FOODS, "Heather Honey Jar"),
        ),
    ),
    RewardTheme(
        "Sunlit Outing",
        (
            ThemeItem(ACCESSORIES, "Sun Hat"),
            ThemeItem(ACCESSORIES, "Starry Bandana"),
            ThemeItem(FOODS, "Crisp Apple Crate"),
        ),
    ),
    RewardTheme(
        "Cozy Evenings",
        (
            ThemeItem(ACCESSORIES, "Woolly Scarf"),
            ThemeItem(DECOR, "Fairy Lights Garland"),
            ThemeItem(DECOR, "Stone Cairn Lantern"),
        ),
    ),
    RewardTheme(
        "Barnyard Keepsakes",
        (
            ThemeItem(ACCESSORIES, "Bell Charm"),
            ThemeItem(DECOR, "Milk Churn Planter"),
            ThemeItem(FOODS, "Barley Biscuit Stack"),
        ),
    ),
)


@dataclass
class Reward:
    type: str
    item: str
    type_label: str
    theme: str
    guaranteed_by: str | None = None
    festival_id: str | None = None


@dataclass
class RewardContext:
    perfect_day: bool
    streak_before: int = 0
    next_streak: int = 0
    last_reward_type: str | None = None


@dataclass
class FestivalResult:
    id: str
    name: str
    reward_unlocked: bool
    reward_item: str
    reward_type: str
    guaranteed_by: str | None = None


def _festival_reward(unlocks: Unlocks, context: RewardContext, season: SeasonSnapshot | None) -> Reward | None:
    festival = season.active_festival if season else None
    if festival is None or festival.reward is None or not context.perfect_day:
        return None
    if festival.completed or season.season.is_festival_complete(festival.id):
        return None
    reward = festival.reward
    if not in_library(reward.type, reward.item):
        logger.warning("Festival %s offers unknown %s: %s", festival.id, reward.type, reward.item)
        return None
    if unlocks.has(reward.type, reward.item):
        return None
    return Reward(
        type=reward.type,
        item=reward.item,
        type_label=type_label(reward.type),
        theme=festival.name,
        guaranteed_by=reward.reason or f"{festival.name} milestone",
        festival_id=festival.id,
    )


def _locked_by_theme(unlocks: Unlocks) -> list[tuple[RewardTheme, list[ThemeItem]]]:
    result = []
    for theme in REWARD_THEMES:
        locked = [
            entry
            for entry in theme.items
            if in_library(entry.type, entry.item) and not unlocks.has(entry.type, entry.item)
        ]
        if locked:
            result.append((theme, locked))
    return result


def pick_from_type(unlocks: Unlocks, unlock_type: str) -> Reward | None:
    """The first locked ``unlock_type`` item from the theme with the most locked items."""
    best: tuple[int, RewardTheme, ThemeItem] | None = None
    for theme, locked in _locked_by_theme(unlocks):
        for entry in locked:
            if entry.type != unlock_type:
                continue
            # strict > keeps the earliest theme and item on ties
            if best is None or len(locked) > best[0]:
                best = (len(locked), theme, entry)
            break
    if best is None:
        return None
    _, theme, entry = best
    return Reward(type=entry.type, item=entry.item, type_label=type_label(entry.type), theme=theme.name)


def choose_reward(
    unlocks: Unlocks,
    context: RewardContext,
    season: SeasonSnapshot | None = None,
) -> Reward | None:
    """Pick today's reward, or None when every themed item is unlocked."""
    festival = _festival_reward(unlocks, context, season)
    if festival is not None:
        return festival

    streak = context.next_streak
    if streak > 0 and streak % STREAK_REWARD_EVERY == 0:
        reward = pick_from_type(unlocks, DECOR)
        if reward is not None:
            reward.guaranteed_by = f"Perfect-day streak ({streak} {'day' if streak == 1 else 'days'})"
            return reward

    if context.perfect_day:
        reward = pick_from_type(unlocks, ACCESSORIES)
        if reward is not None:
            reward.guaranteed_by = "Perfect day bonus"
            return reward

    preference = list(TYPE_PREFERENCE)
    if context.last_reward_type in preference:
        preference.remove(context.last_reward_type)
        preference.append(context.last_reward_type)
    for unlock_type in preference:
        reward = pick_from_type(unlocks, unlock_type)
        if reward is not None:
            return reward
    return None
