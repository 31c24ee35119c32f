"""Day planner - decides what the herd plays each day.

A plan is the shuffled mini-game queue plus the personality events and
season notes for that queue. Plans are memoised on the day number and the
herd's (id, personality) pairs, so previewing a day and then starting it
gives the same queue without drawing more randomness.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from minigames.runner import MINIGAME_INFO, MINIGAME_KEYS
from seasons.calendar import SeasonSnapshot, season_context

from .memory import SaveState
from .personality import EventPlan, EventRule, SeasonNotes, plan_events

logger = logging.getLogger(__name__)

STANDARD_CONDITIONS = "Standard conditions today."


@dataclass
class PreviewNote:
    title: str
    detail: str
    key: str = ""


@dataclass
class DayPlan:
    """One day's mini-game queue and the events attached to it."""

    queue: list[str]
    events: dict[str, EventRule | None]
    notes: list[str] = field(default_factory=list)
    season_notes: SeasonNotes | None = None
    preview_notes: list[PreviewNote] = field(default_factory=list)
    season: SeasonSnapshot | None = None
    signature: str = ""


def plan_signature(state: SaveState) -> str:
    herd = sorted(f"{cow.id}:{cow.personality}" for cow in state.cows)
    return f"{state.day}|" + "|".join(herd)


def build_preview_notes(
    queue: list[str],
    events: dict[str, EventRule | None],
    season_notes: SeasonNotes | None = None,
) -> list[PreviewNote]:
    notes = []
    for index, key in enumerate(queue, start=1):
        info = MINIGAME_INFO.get(key)
        label = info.label if info else key
        event = events.get(key)
        detail = f"{event.label}: {event.daily_note}" if event else STANDARD_CONDITIONS
        notes.append(PreviewNote(title=f"{index}. {label}", detail=detail, key=key))

    if season_notes is not None:
        detail = season_notes.detail
        if season_notes.tasks:
            detail = f"{detail} Tasks: {' • '.join(season_notes.tasks)}"
        notes.append(PreviewNote(title=season_notes.title, detail=detail.strip(), key="season"))
    return notes


class DayPlanner:
    """Build and cache the plan for the current day."""

    def __init__(self, rng: random.Random | None = None, keys: tuple[str, ...] = MINIGAME_KEYS):
        self._rng = rng or random.Random()
        self._keys = tuple(keys)
        self._cached: DayPlan | None = None

    @property
    def cached(self) -> DayPlan | None:
        return self._cached

    def get_or_build(self, state: SaveState) -> DayPlan:
        signature = plan_signature(state)
        if self._cached is not None and self._cached.signature == signature:
            return self._cached

        queue = list(self._keys)
        self._rng.shuffle(queue)
        snapshot = season_context(state.season, state.day)
        event_plan: EventPlan = plan_events(state.cows, snapshot)
        events = {key: event_plan.events.get(key) for key in queue}

        plan = DayPlan(
            queue=queue,
            events=events,
            notes=list(event_plan.notes),
            season_notes=event_plan.season_notes,
            preview_notes=build_preview_notes(queue, events, event_plan.season_notes),
            season=snapshot,
            signature=signature,
        )
        logger.info(
            "Planned day %d: %s (events: %s)",
            state.day,
            ", ".join(queue),
            ", ".join(e.label for e in events.values() if e) or "none",
        )
        self._cached = plan
        return plan

    def invalidate(self) -> None:
        self._cached = None
