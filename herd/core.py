"""Day orchestrator - one call plays a whole farm day.

Each day: plan -> play every mini-game in turn -> merge effects -> reward ->
commit. Between days nothing runs; all state lives in the save.
"""

from __future__ import annotations

import logging
import random
from dataclasses import asdict, dataclass, field
from typing import Any

from minigames.models import Adjustments, MiniGameContext
from minigames.runner import MiniGame, play_minigame
from seasons.calendar import SeasonSnapshot

from .adjustments import merge_adjustments
from .family import FamilyAssignment, FamilySummary, assign_caretakers, complete_family_day
from .memory import Cow, HistoryDB
from .personality import EventRule, apply_outcome, event_for_minigame
from .planner import DayPlan, DayPlanner
from .rewards import FestivalResult, Reward, RewardContext, choose_reward
from .store import FarmStore
from .ui import DayUI, NullUI

logger = logging.getLogger(__name__)

MAX_PARTICIPANTS = 3
MAX_DIFFICULTY = 10
SUCCESS_FALLBACK = "Great job!"
FAILURE_FALLBACK = "We will get it tomorrow."


class DayInProgressError(RuntimeError):
    """Raised when a day is started while another one is still running."""


@dataclass
class MiniGameRecord:
    key: str
    name: str
    success: bool
    summary: str
    icon: str = ""
    caretaker: str | None = None


@dataclass
class DaySummary:
    """Everything the summary screen shows after a day."""

    day: int
    records: list[MiniGameRecord] = field(default_factory=list)
    adjustments: Adjustments = field(default_factory=dict)
    total_perfects: int = 0
    total_chonks: int = 0
    reward: Reward | None = None
    achievements_unlocked: list[str] = field(default_factory=list)
    perfect_day: bool = False
    previous_streak: int = 0
    perfect_streak: int = 0
    best_perfect_streak: int = 0
    season: SeasonSnapshot | None = None
    festival_result: FestivalResult | None = None
    family: FamilySummary | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class DayOrchestrator:
    """Plays farm days against a FarmStore."""

    def __init__(
        self,
        store: FarmStore,
        minigames: dict[str, MiniGame],
        rng: random.Random | None = None,
        ui: DayUI | None = None,
        history: HistoryDB | None = None,
        minigame_timeout: float | None = None,
        max_difficulty: int = MAX_DIFFICULTY,
        max_participants: int = MAX_PARTICIPANTS,
    ):
        self._store = store
        self._minigames = dict(minigames)
        self._rng = rng or random.Random()
        self._ui = ui or NullUI()
        self._history = history
        self._timeout = minigame_timeout
        self._max_difficulty = max_difficulty
        self._max_participants = max_participants
        self._planner = DayPlanner(rng=self._rng)
        self._running = False
        self.last_summary: DaySummary | None = None

    @property
    def running(self) -> bool:
        return self._running

    @property
    def planner(self) -> DayPlanner:
        return self._planner

    def preview(self) -> DayPlan:
        """Plan (or reuse) today's queue and show it."""
        plan = self._planner.get_or_build(self._store.state)
        self._ui.show_preview(plan.preview_notes)
        return plan

    def pick_participants(self, cows: list[Cow], count: int, event: EventRule | None) -> list[Cow]:
        """Up to ``count`` cows, led by one matching the event's personality."""
        if not cows:
            return []
        desired = min(count, len(cows))
        selection: list[Cow] = []
        if event is not None and event.personality:
            matches = [cow for cow in cows if cow.personality == event.personality]
            if matches:
                selection.append(self._rng.choice(matches))
        remaining = [cow for cow in cows if cow not in selection]
        selection.extend(self._rng.sample(remaining, max(0, desired - len(selection))))
        return selection

    async def start_day(self) -> DaySummary:
        """Play every queued mini-game, then commit the day."""
        if self._running:
            raise DayInProgressError(f"Day {self._store.day} is already running")
        self._running = True
        try:
            return await self._play_day()
        finally:
            self._running = False

    async def _play_day(self) -> DaySummary:
        state = self._store.state
        plan = self._planner.get_or_build(state)
        logger.info("=== Day %d === %d cows, queue: %s", state.day, len(state.cows), ", ".join(plan.queue))

        queue = []
        for key in plan.queue:
            if key in self._minigames:
                queue.append(key)
            else:
                logger.warning("No mini-game registered for %s; skipping", key)

        summary = DaySummary(
            day=state.day,
            previous_streak=state.stats.perfect_day_streak,
            season=plan.season,
        )
        caretakers = assign_caretakers(state.family, queue)
        assignments: list[FamilyAssignment] = []
        options = dict(state.options)
        foods = self._store.unlocked("foods")

        for index, key in enumerate(queue):
            game = self._minigames[key]
            planned = plan.events.get(key)
            participants = self.pick_participants(state.cows, self._max_participants, planned)
            event = event_for_minigame(key, participants, plan)
            caretaker = caretakers[index]

            instruction = [game.description]
            if event is not None:
                instruction.append(f"{event.label}: {event.instruction}")
            display_name = game.label
            if caretaker is not None:
                display_name = f"{game.label} • {caretaker.name}"
                instruction.append(f"Caretaker: {caretaker.name}")
            self._ui.set_title(display_name, index + 1, len(queue), game.icon)
            self._ui.set_instruction(" ".join(instruction))

            context = MiniGameContext(
                participants=participants,
                difficulty=min(self._max_difficulty, state.day + index),
                on_complete=lambda result: None,
                modifiers=dict(event.modifiers) if event else None,
                options=options,
                foods=list(foods),
                update_timer=self._ui.update_timer,
                update_instruction=self._ui.set_instruction,
            )
            outcome = await play_minigame(game, context, timeout=self._timeout)

            apply_outcome(event, outcome, participants)
            summary.records.append(
                MiniGameRecord(
                    key=key,
                    name=display_name,
                    success=bool(outcome.success),
                    summary=outcome.summary or (SUCCESS_FALLBACK if outcome.success else FAILURE_FALLBACK),
                    icon=game.icon,
                    caretaker=caretaker.name if caretaker else None,
                )
            )
            if caretaker is not None:
                perfect = bool(
                    outcome.success
                    and (
                        outcome.stats is None
                        or outcome.stats.total_perfects is None
                        or outcome.stats.total_perfects > 0
                    )
                )
                assignments.append(
                    FamilyAssignment(
                        participant_id=caretaker.id,
                        minigame=key,
                        success=bool(outcome.success),
                        perfect=perfect,
                    )
                )
            merge_adjustments(summary.adjustments, outcome.adjustments)
            if outcome.stats is not None:
                summary.total_perfects += outcome.stats.total_perfects or 0
                summary.total_chonks += outcome.stats.total_chonks or 0
            if event is not None and event.achievement_on_success and outcome.success:
                if self._store.unlock_achievement(event.achievement_on_success):
                    summary.achievements_unlocked.append(event.achievement_on_success)
            logger.info("[%d/%d] %s: %s", index + 1, len(queue), display_name, "success" if outcome.success else "failed")

        self._commit(summary, plan, assignments)
        await self._log_history(summary)
        self._planner.invalidate()
        self.last_summary = summary
        self._ui.show_summary(summary)
        return summary

    def _commit(self, summary: DaySummary, plan: DayPlan, assignments: list[FamilyAssignment]) -> None:
        store = self._store
        state = store.state

        store.apply_adjustments(summary.adjustments)
        summary.perfect_day = bool(summary.records) and all(r.success for r in summary.records)

        family = complete_family_day(state.family, assignments, summary.perfect_day, state.day)
        if family is not None:
            summary.family = family
            for key in family.unlocked_achievements:
                if key not in summary.achievements_unlocked and store.unlock_achievement(key):
                    summary.achievements_unlocked.append(key)

        if summary.perfect_day and store.unlock_achievement("perfectDay"):
            summary.achievements_unlocked.append("perfectDay")
        for key in store.refresh_automatic_achievements():
            summary.achievements_unlocked.append(key)

        previous = state.stats.perfect_day_streak
        next_streak = previous + 1 if summary.perfect_day else 0
        reward = choose_reward(
            state.unlocks,
            RewardContext(
                perfect_day=summary.perfect_day,
                streak_before=previous,
                next_streak=next_streak,
                last_reward_type=state.stats.last_reward_type,
            ),
            plan.season,
        )
        if reward is not None:
            added = store.add_unlock(reward.type, reward.item)
            if reward.festival_id:
                summary.festival_result = self._complete_festival(reward, added, plan.season)
            if added:
                summary.reward = reward
            else:
                reward = None

        store.record_stats(summary.total_perfects, summary.total_chonks)
        summary.perfect_streak, summary.best_perfect_streak = store.register_day_outcome(
            summary.perfect_day,
            reward_type=reward.type if reward else None,
            perfect_streak=next_streak,
        )

        store.increment_day()
        if store.evaluate_chonk_sentinel():
            summary.achievements_unlocked.append("chonkSentinel")
        store.persist()
        logger.info(
            "Day %d done: perfect=%s streak=%d reward=%s",
            summary.day,
            summary.perfect_day,
            summary.perfect_streak,
            reward.item if reward else "-",
        )

    def _complete_festival(self, reward: Reward, added: bool, season: SeasonSnapshot | None) -> FestivalResult:
        self._store.mark_festival_complete(reward.festival_id)
        name = None
        if season is not None:
            for progress in (season.active_festival, season.next_festival):
                if progress is not None and progress.id == reward.festival_id:
                    progress.completed = True
                    name = name or progress.name
        name = name or self._store.state.season.festival_name(reward.festival_id) or reward.theme or reward.item
        return FestivalResult(
            id=reward.festival_id,
            name=name,
            reward_unlocked=added,
            reward_item=reward.item,
            reward_type=reward.type,
            guaranteed_by=reward.guaranteed_by,
        )

    async def _log_history(self, summary: DaySummary) -> None:
        if self._history is None:
            return
        await self._history.log_day(
            day_number=summary.day,
            perfect_day=summary.perfect_day,
            perfect_streak=summary.perfect_streak,
            reward_type=summary.reward.type if summary.reward else "",
            reward_item=summary.reward.item if summary.reward else "",
            mvp=summary.family.mvp.name if summary.family and summary.family.mvp else "",
            summary=summary.to_dict(),
        )
        for position, record in enumerate(summary.records, start=1):
            await self._history.log_minigame_run(
                day_number=summary.day,
                position=position,
                minigame=record.key,
                success=record.success,
                caretaker=record.caretaker or "",
                summary=record.summary,
            )
        for key in summary.achievements_unlocked:
            await self._history.log_achievement(summary.day, key)

