"""Tests for personality event selection and outcome hooks."""

from herd.memory import Cow
from herd.personality import (
    EVENT_RULES,
    apply_outcome,
    count_personalities,
    event_for_minigame,
    plan_events,
    select_event,
)
from minigames.models import MiniGameResult, MiniGameStats


def _cow(cow_id: str, personality: str) -> Cow:
    return Cow(id=cow_id, name=cow_id.title(), personality=personality)


class TestSelection:
    def test_thematic_personality_beats_social(self):
        counts = count_personalities([_cow("a", "Sleepy"), _cow("b", "Social")])
        assert select_event("catch", counts).label == "Sleepy Shuffle"

    def test_social_is_the_fallback(self):
        counts = count_personalities([_cow("a", "Vain"), _cow("b", "Social")])
        assert select_event("food", counts).label == "Shared Snacks"

    def test_no_matching_personality_means_no_event(self):
        counts = count_personalities([_cow("a", "Greedy")])
        assert select_event("ceilidh", counts) is None
        assert select_event("brush", counts) is None

    def test_plan_without_season_has_one_note_per_event(self):
        plan = plan_events([_cow("a", "Vain"), _cow("b", "Social")])
        assert set(plan.events) == {"catch", "food", "brush", "ceilidh"}
        assert len(plan.notes) == 4
        assert plan.season_notes is None

    def test_planned_events_are_copies(self):
        plan = plan_events([_cow("a", "Greedy")])
        plan.events["food"].modifiers["timeModifier"] = 99
        assert EVENT_RULES["food"]["Greedy"].modifiers == {"timeModifier": -2}


class TestEventForMinigame:
    def test_requires_a_participant_with_the_personality(self):
        plan = plan_events([_cow("a", "Greedy"), _cow("b", "Vain")])
        assert event_for_minigame("food", [_cow("b", "Vain")], plan) is None
        event = event_for_minigame("food", [_cow("a", "Greedy")], plan)
        assert event.label == "Greedy Graze"
        assert event is not plan.events["food"]

    def test_unplanned_kind_returns_none(self):
        plan = plan_events([_cow("a", "Greedy")])
        assert event_for_minigame("ceilidh", [_cow("a", "Greedy")], plan) is None


class TestOutcomeHooks:
    def test_greedy_success_feeds_greedy_participants(self):
        greedy, vain = _cow("g", "Greedy"), _cow("v", "Vain")
        outcome = MiniGameResult(success=True, summary="Fed.")
        apply_outcome(EVENT_RULES["food"]["Greedy"], outcome, [greedy, vain])
        assert outcome.adjustments["g"].hunger == -6
        assert outcome.adjustments["g"].happiness == 3
        assert "v" not in outcome.adjustments
        assert outcome.summary == "Fed. Sensible servings satisfied the greedy grazers."

    def test_greedy_failure_with_chonks_adds_chonk(self):
        outcome = MiniGameResult(success=False, stats=MiniGameStats(total_chonks=2))
        apply_outcome(EVENT_RULES["food"]["Greedy"], outcome, [_cow("g", "Greedy")])
        assert outcome.adjustments["g"].chonk == 4
        assert outcome.adjustments["g"].happiness == -3
        assert outcome.summary == "Greedy bellies grew a little rounder."

    def test_shared_snacks_needs_zero_chonks(self):
        herd = [_cow("a", "Social"), _cow("b", "Vain")]
        clean = MiniGameResult(success=True, stats=MiniGameStats(total_chonks=0))
        apply_outcome(EVENT_RULES["food"]["Social"], clean, herd)
        assert clean.adjustments["a"].happiness == 3
        assert clean.adjustments["b"].happiness == 3

        messy = MiniGameResult(success=True, stats=MiniGameStats(total_chonks=1))
        apply_outcome(EVENT_RULES["food"]["Social"], messy, herd)
        assert messy.adjustments == {}

    def test_hook_adds_to_existing_adjustment(self):
        outcome = MiniGameResult(success=False)
        outcome.ensure_adjustment("s").happiness = 5
        apply_outcome(EVENT_RULES["catch"]["Sleepy"], outcome, [_cow("s", "Sleepy")])
        assert outcome.adjustments["s"].happiness == 1

    def test_buddy_system_carries_achievement(self):
        assert EVENT_RULES["catch"]["Social"].achievement_on_success == "socialButterfly"

    def test_no_event_is_a_no_op(self):
        outcome = MiniGameResult(success=True, summary="ok")
        apply_outcome(None, outcome, [_cow("a", "Social")])
        assert outcome.adjustments == {}
        assert outcome.summary == "ok"
