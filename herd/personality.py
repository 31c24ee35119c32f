"""Personality events - daily twists on each mini-game.

Every mini-game kind has a small table of personality-keyed rules. Once per
day the planner picks at most one rule per kind: the personality with the
strongest tie to that mini-game when the herd has one, else the Social rule,
else nothing. Festival modifiers are layered over the chosen rule.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from minigames.models import MiniGameResult
from minigames.runner import MINIGAME_KEYS
from seasons.calendar import SeasonSnapshot, festival_countdown

from .catalog import PERSONALITIES

if TYPE_CHECKING:
    from .memory import Cow
    from .planner import DayPlan

logger = logging.getLogger(__name__)

OutcomeHook = Callable[[MiniGameResult, "list[Cow]"], None]

# Personality most tied to each mini-game; Social is the fallback everywhere.
THEMATIC_PERSONALITY: dict[str, str | None] = {
    "catch": "Sleepy",
    "food": "Greedy",
    "brush": "Vain",
    "ceilidh": None,
}
FALLBACK_PERSONALITY = "Social"


@dataclass
class EventRule:
    minigame: str
    personality: str
    label: str
    instruction: str
    daily_note: str
    modifiers: dict[str, Any] = field(default_factory=dict)
    achievement_on_success: str | None = None
    apply_outcome: OutcomeHook | None = None

    def clone(self) -> EventRule:
        return replace(self, modifiers=dict(self.modifiers))


def _append_summary(outcome: MiniGameResult, text: str) -> None:
    outcome.summary = f"{outcome.summary} {text}".strip()


def _of(participants: list[Cow], personality: str) -> list[Cow]:
    return [cow for cow in participants if cow.personality == personality]


# ── Outcome hooks ───────────────────────────────────────────────


def _sleepy_shuffle(outcome: MiniGameResult, participants: list[Cow]) -> None:
    sleepy = _of(participants, "Sleepy")
    for cow in sleepy:
        outcome.ensure_adjustment(cow.id).add("happiness", 3 if outcome.success else -4)
    if sleepy:
        _append_summary(
            outcome,
            "The sleepy herd perked up after a safe stroll."
            if outcome.success
            else "Sleepy hooves will need pep tomorrow.",
        )


def _buddy_system(outcome: MiniGameResult, participants: list[Cow]) -> None:
    for cow in participants:
        outcome.ensure_adjustment(cow.id).add("happiness", 2 if outcome.success else -2)
    _append_summary(
        outcome,
        "The herd moved in perfect harmony."
        if outcome.success
        else "The herd scattered without their social lead.",
    )


def _greedy_graze(outcome: MiniGameResult, participants: list[Cow]) -> None:
    greedy = _of(participants, "Greedy")
    if not greedy:
        return
    for cow in greedy:
        adj = outcome.ensure_adjustment(cow.id)
        if outcome.success:
            adj.add("hunger", -6)
            adj.add("happiness", 3)
        elif outcome.chonks:
            adj.add("chonk", 4)
            adj.add("happiness", -3)
    if outcome.chonks:
        _append_summary(outcome, "Greedy bellies grew a little rounder.")
    elif outcome.success:
        _append_summary(outcome, "Sensible servings satisfied the greedy grazers.")


def _shared_snacks(outcome: MiniGameResult, participants: list[Cow]) -> None:
    if outcome.success and outcome.stats is not None and outcome.stats.total_chonks == 0:
        for cow in participants:
            outcome.ensure_adjustment(cow.id).add("happiness", 3)
        _append_summary(outcome, "Sharing snacks lifted every mood.")
    elif not outcome.success:
        for cow in participants:
            outcome.ensure_adjustment(cow.id).add("happiness", -2)


def _fringe_focus(outcome: MiniGameResult, participants: list[Cow]) -> None:
    vain = _of(participants, "Vain")
    for cow in vain:
        adj = outcome.ensure_adjustment(cow.id)
        if outcome.success:
            adj.add("cleanliness", 6)
            adj.add("happiness", 3)
        else:
            adj.add("happiness", -5)
    if vain:
        _append_summary(
            outcome,
            "Every fringe sparkled to vain approval."
            if outcome.success
            else "Vain cows pouted about stray curls.",
        )


def _salon_day(outcome: MiniGameResult, participants: list[Cow]) -> None:
    for cow in participants:
        adj = outcome.ensure_adjustment(cow.id)
        if outcome.success:
            adj.add("cleanliness", 3)
            adj.add("happiness", 2)
        else:
            adj.add("happiness", -2)
    _append_summary(
        outcome,
        "The grooming circle finished with smiles."
        if outcome.success
        else "The grooming circle fizzled out early.",
    )


def _community_ceilidh(outcome: MiniGameResult, participants: list[Cow]) -> None:
    socials = _of(participants, "Social")
    for cow in socials:
        adj = outcome.ensure_adjustment(cow.id)
        if outcome.success:
            adj.add("happiness", 4)
        else:
            adj.add("happiness", -3)
            adj.add("hunger", 4)
    if socials:
        _append_summary(
            outcome,
            "The social herd cheered the ceilidh on!"
            if outcome.success
            else "Without the rhythm, the social herd lost steam.",
        )


EVENT_RULES: dict[str, dict[str, EventRule]] = {
    "catch": {
        "Sleepy": EventRule(
            minigame="catch",
            personality="Sleepy",
            label="Sleepy Shuffle",
            instruction="Sleepy cows drift today – their hooves slow but the timer hurries.",
            daily_note="Sleepy cows might nod off near the fence. Nudge them gently back to the centre.",
            modifiers={"timeModifier": -4, "speedScale": 0.85},
            apply_outcome=_sleepy_shuffle,
        ),
        "Social": EventRule(
            minigame="catch",
            personality="Social",
            label="Buddy System",
            instruction="Social butterflies rally the herd. Keep everyone close for a group bonus.",
            daily_note="Social cows are leading the way – togetherness keeps them calm.",
            modifiers={"timeModifier": 3, "speedScale": 0.95},
            achievement_on_success="socialButterfly",
            apply_outcome=_buddy_system,
        ),
    },
    "food": {
        "Greedy": EventRule(
            minigame="food",
            personality="Greedy",
            label="Greedy Graze",
            instruction="Greedy cows eye a second helping. Match perfectly to keep fluff in check.",
            daily_note="Greedy grazers crave seconds. Keep servings strict to avoid extra chonk.",
            modifiers={"timeModifier": -2},
            apply_outcome=_greedy_graze,
        ),
        "Social": EventRule(
            minigame="food",
            personality="Social",
            label="Shared Snacks",
            instruction="Share snacks evenly – a perfect round delights every cow.",
            daily_note="Social cows want every muzzle to get a taste at once. Even distribution lifts morale.",
            modifiers={"timeModifier": 2},
            apply_outcome=_shared_snacks,
        ),
    },
    "brush": {
        "Vain": EventRule(
            minigame="brush",
            personality="Vain",
            label="Fringe Focus",
            instruction="Extra tangles appear as the vain herd demands spotless fringes.",
            daily_note="Vain cows expect flawless coats. A few extra patches need smoothing.",
            modifiers={"timeModifier": 1, "patchBonus": 2},
            apply_outcome=_fringe_focus,
        ),
        "Social": EventRule(
            minigame="brush",
            personality="Social",
            label="Salon Day",
            instruction="Friends brush friends – a little extra time keeps the grooming circle happy.",
            daily_note="Social cows hold a group grooming session. Keep brushes moving to match the chatter.",
            modifiers={"timeModifier": 2},
            apply_outcome=_salon_day,
        ),
    },
    "ceilidh": {
        "Social": EventRule(
            minigame="ceilidh",
            personality="Social",
            label="Community Ceilidh",
            instruction="Social cows invite the whole herd. The rhythm window widens – keep chaining steps!",
            daily_note="Social cows plan an evening ceilidh. Stay on tempo to send spirits soaring.",
            modifiers={"beatWindow": 0.15, "happinessBonus": 3},
            apply_outcome=_community_ceilidh,
        ),
    },
}


# ── Planning ────────────────────────────────────────────────────


@dataclass
class SeasonNotes:
    title: str
    detail: str
    tasks: list[str] = field(default_factory=list)
    days_until: int | None = None


@dataclass
class EventPlan:
    events: dict[str, EventRule] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)
    season_notes: SeasonNotes | None = None


def count_personalities(cows: list[Cow]) -> dict[str, int]:
    counts = {name: 0 for name in PERSONALITIES}
    for cow in cows:
        if cow.personality in counts:
            counts[cow.personality] += 1
    return counts


def select_event(minigame: str, counts: dict[str, int]) -> EventRule | None:
    rules = EVENT_RULES.get(minigame, {})
    thematic = THEMATIC_PERSONALITY.get(minigame)
    if thematic and counts.get(thematic) and thematic in rules:
        return rules[thematic]
    if counts.get(FALLBACK_PERSONALITY) and FALLBACK_PERSONALITY in rules:
        return rules[FALLBACK_PERSONALITY]
    return None


def plan_events(cows: list[Cow], season: SeasonSnapshot | None = None) -> EventPlan:
    """Choose the day's personality events and fold in festival modifiers."""
    counts = count_personalities(cows)
    plan = EventPlan()
    for key in MINIGAME_KEYS:
        rule = select_event(key, counts)
        if rule is None:
            continue
        event = rule.clone()
        plan.events[key] = event
        plan.notes.append(event.daily_note)

    highlight = season.highlight if season else None
    if highlight is None:
        return plan

    if highlight.note:
        plan.notes.append(highlight.note)
    for key, overrides in highlight.modifiers.items():
        event = plan.events.get(key)
        if event is not None:
            event.modifiers = {**event.modifiers, **overrides}
        else:
            logger.debug("Festival modifiers for %s ignored: no event today", key)

    detail = " ".join(
        part for part in (festival_countdown(highlight.days_until_festival), highlight.note) if part
    )
    plan.season_notes = SeasonNotes(
        title=f"{season.season.name or 'Season'} • {highlight.name}",
        detail=detail,
        tasks=list(highlight.tasks or season.season.festival_tasks),
        days_until=highlight.days_until_festival,
    )
    return plan


def event_for_minigame(key: str, participants: list[Cow], plan: EventPlan | DayPlan) -> EventRule | None:
    """The planned rule for ``key`` if a participant carries its personality."""
    base = plan.events.get(key)
    if base is None:
        return None
    if base.personality and not any(cow.personality == base.personality for cow in participants):
        return None
    return base.clone()


def apply_outcome(event: EventRule | None, outcome: MiniGameResult, participants: list[Cow]) -> None:
    if event is None or event.apply_outcome is None:
        return
    event.apply_outcome(outcome, participants)
