"""Season calendar helpers: festival windows and per-day snapshots."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any

from herd.catalog import UNLOCK_TYPES


@dataclass
class FestivalReward:
    type: str
    item: str
    reason: str = ""


@dataclass
class Festival:
    id: str
    name: str
    start_offset: int = 0
    festival_offset: int = 0
    tasks: list[str] = field(default_factory=list)
    note: str = ""
    modifiers: dict[str, dict[str, Any]] = field(default_factory=dict)
    reward: FestivalReward | None = None


@dataclass
class SeasonState:
    id: str
    name: str
    start_day: int = 1
    festival_tasks: list[str] = field(default_factory=list)
    calendar: list[Festival] = field(default_factory=list)
    completed_festivals: list[str] = field(default_factory=list)

    def is_festival_complete(self, festival_id: str) -> bool:
        return bool(festival_id) and festival_id in self.completed_festivals

    def festival_name(self, festival_id: str) -> str | None:
        for entry in self.calendar:
            if entry.id == festival_id:
                return entry.name
        return None


@dataclass
class FestivalProgress:
    """A festival as seen from a particular day."""

    festival: Festival
    week_start_day: int
    festival_day: int
    days_until_festival: int
    is_festival_week: bool
    completed: bool = False

    @property
    def id(self) -> str:
        return self.festival.id

    @property
    def name(self) -> str:
        return self.festival.name

    @property
    def note(self) -> str:
        return self.festival.note

    @property
    def tasks(self) -> list[str]:
        return self.festival.tasks

    @property
    def modifiers(self) -> dict[str, dict[str, Any]]:
        return self.festival.modifiers

    @property
    def reward(self) -> FestivalReward | None:
        return self.festival.reward


@dataclass
class SeasonSnapshot:
    season: SeasonState
    day: int
    day_of_season: int
    week_number: int
    active_festival: FestivalProgress | None = None
    next_festival: FestivalProgress | None = None

    @property
    def highlight(self) -> FestivalProgress | None:
        return self.active_festival or self.next_festival


DEFAULT_SEASON = SeasonState(
    id="spring-bloom",
    name="Spring Bloom",
    start_day=1,
    festival_tasks=[
        "Keep two decor spots filled to impress visiting neighbours.",
        "Serve every cow a seasonal treat at least once this week.",
        "Earn a perfect day to kick off the closing ceilidh.",
    ],
    calendar=[
        Festival(
            id="spring-bunting-week",
            name="Ribbon Rehearsal",
            start_offset=0,
            festival_offset=6,
            tasks=[
                "Earn a perfect day to delight the décor committee.",
                "Display at least two decor pieces before the weekend.",
            ],
            note="Ribbon practise adds extra grooming patches and a brisker herding pace.",
            modifiers={"brush": {"patchBonus": 1}, "catch": {"timeModifier": 1}},
            reward=FestivalReward(
                type="decor",
                item="Festival Bunting",
                reason="Ribbon Rehearsal décor milestone",
            ),
        ),
        Festival(
            id="spring-pantry-week",
            name="Pasture Pantry Prep",
            start_offset=7,
            festival_offset=13,
            tasks=[
                "Win the food frenzy with no chonky mishaps.",
                "Keep herd happiness above 60 heading into the feast.",
            ],
            note="Seasonal snacks grant extra feeding time but cows grow hungrier if you slip.",
            modifiers={"food": {"timeModifier": 2}, "ceilidh": {"beatWindow": 0.12}},
        ),
        Festival(
            id="spring-ceilidh-week",
            name="Bloomlight Ceilidh",
            start_offset=14,
            festival_offset=20,
            tasks=[
                "Finish the ceilidh with a perfect chain of steps.",
                "Brush at least two cows to parade sheen.",
            ],
            note="Lantern rehearsals slow the ceilidh beat but expect gleaming coats.",
            modifiers={
                "ceilidh": {"beatWindow": 0.18, "tempoModifier": -0.05},
                "brush": {"patchBonus": 1},
            },
        ),
    ],
)


def default_season() -> SeasonState:
    return copy.deepcopy(DEFAULT_SEASON)


def _clean_text(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return fallback


def clean_int(value: Any, fallback: int, minimum: int = 0) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    return max(minimum, int(value))


def _clean_tasks(value: Any, fallback: list[str]) -> list[str]:
    if not isinstance(value, list) or not value:
        return list(fallback)
    return [task.strip() for task in value if isinstance(task, str) and task.strip()]


def _clean_modifiers(value: Any, fallback: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    if not isinstance(value, dict):
        return copy.deepcopy(fallback)
    return {key: dict(bag) for key, bag in value.items() if isinstance(bag, dict)}


def _clean_reward(value: Any, fallback: FestivalReward | None) -> FestivalReward | None:
    if not isinstance(value, dict) or value.get("type") not in UNLOCK_TYPES:
        return copy.copy(fallback)
    item = value.get("item")
    if not isinstance(item, str) or not item.strip():
        return copy.copy(fallback)
    reason = value.get("reason")
    return FestivalReward(
        type=value["type"],
        item=item.strip(),
        reason=reason if isinstance(reason, str) else (fallback.reason if fallback else ""),
    )


def _clean_festival(raw: Any, fallback: Festival) -> Festival:
    if not isinstance(raw, dict):
        return copy.deepcopy(fallback)
    festival = Festival(
        id=_clean_text(raw.get("id"), fallback.id),
        name=_clean_text(raw.get("name"), fallback.name),
        start_offset=clean_int(raw.get("start_offset"), fallback.start_offset),
        festival_offset=clean_int(raw.get("festival_offset"), fallback.festival_offset),
        tasks=_clean_tasks(raw.get("tasks"), fallback.tasks),
        note=_clean_text(raw.get("note"), fallback.note),
        modifiers=_clean_modifiers(raw.get("modifiers"), fallback.modifiers),
        reward=_clean_reward(raw.get("reward"), fallback.reward),
    )
    if festival.festival_offset < festival.start_offset:
        festival.festival_offset = festival.start_offset
    return festival


def sanitize_season(raw: dict[str, Any] | None) -> SeasonState:
    """Build a SeasonState from stored data, falling back to the default season."""
    base = default_season()
    if not isinstance(raw, dict):
        return base

    calendar_raw = raw.get("calendar")
    if isinstance(calendar_raw, list) and calendar_raw:
        templates = {entry.id: entry for entry in base.calendar}
        calendar = []
        for entry in calendar_raw:
            entry_id = entry.get("id") if isinstance(entry, dict) else None
            calendar.append(_clean_festival(entry, templates.get(entry_id, base.calendar[0])))
    else:
        calendar = base.calendar

    seen: set[str] = set()
    for index, entry in enumerate(calendar):
        if entry.id in seen:
            entry.id = f"{entry.id}-{index + 1}"
        seen.add(entry.id)

    completed_raw = raw.get("completed_festivals")
    completed = []
    if isinstance(completed_raw, list):
        completed = [c.strip() for c in completed_raw if isinstance(c, str) and c.strip() in seen]

    return SeasonState(
        id=_clean_text(raw.get("id"), base.id),
        name=_clean_text(raw.get("name"), base.name),
        start_day=clean_int(raw.get("start_day"), base.start_day, minimum=1),
        festival_tasks=_clean_tasks(raw.get("festival_tasks"), base.festival_tasks),
        calendar=calendar,
        completed_festivals=completed,
    )


def _progress(season: SeasonState, entry: Festival, day: int, completed: set[str]) -> FestivalProgress:
    week_start_day = season.start_day + entry.start_offset
    festival_day = season.start_day + entry.festival_offset
    return FestivalProgress(
        festival=copy.deepcopy(entry),
        week_start_day=week_start_day,
        festival_day=festival_day,
        days_until_festival=festival_day - day,
        is_festival_week=week_start_day <= day <= festival_day,
        completed=entry.id in completed,
    )


def season_context(season: SeasonState, day: int) -> SeasonSnapshot:
    """Locate ``day`` in the season calendar."""
    snapshot_season = copy.deepcopy(season)
    current_day = max(1, int(day))
    day_of_season = max(0, current_day - snapshot_season.start_day)
    completed = set(snapshot_season.completed_festivals)
    calendar = sorted(snapshot_season.calendar, key=lambda f: (f.start_offset, f.festival_offset))

    active: FestivalProgress | None = None
    upcoming: FestivalProgress | None = None
    for entry in calendar:
        progress = _progress(snapshot_season, entry, current_day, completed)
        if upcoming is None and progress.days_until_festival >= 0:
            upcoming = progress
        if active is None and progress.is_festival_week:
            active = progress
    if active is None and upcoming is not None and upcoming.week_start_day <= current_day:
        active = upcoming

    return SeasonSnapshot(
        season=snapshot_season,
        day=current_day,
        day_of_season=day_of_season,
        week_number=max(1, day_of_season // 7 + 1),
        active_festival=active,
        next_festival=upcoming,
    )


def festival_countdown(days_until: int | None) -> str:
    """Human-facing countdown line for a festival."""
    if days_until is None or days_until < 0:
        return ""
    if days_until == 0:
        return "Festival day is here!"
    label = "day" if days_until == 1 else "days"
    return f"Festival in {days_until} {label}."
